import os

from dotenv import load_dotenv

load_dotenv()

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_KEY")

# JWT
JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key-change-this")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS
_DEFAULT_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", ",".join(_DEFAULT_ORIGINS)).split(",")
    if origin.strip()
]

# Payroll
DEFAULT_HOURLY_RATE = float(os.getenv("DEFAULT_HOURLY_RATE", "15"))
DAYS_PER_YEAR = int(os.getenv("DAYS_PER_YEAR", "365"))

# Store numbers as they appear in the sales ledger's "Store" column
STORE_NUMBER_MAP = {
    "1": "Spartanburg",
    "3": "Greenville",
    "4": "Columbia",
    "5": "Trailer",
    "7": "Camper",
}

MANAGER_ROLE = "Manager"
