import logging
from datetime import datetime
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from supabase import Client

from config.settings import ALLOWED_ORIGINS, LOG_LEVEL
from database.supabase_client import get_supabase
from routes.payroll import router as payroll_router
from routes.bonus_tiers import router as bonus_tiers_router


# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastAPI
app = FastAPI(
    title="Scrub Shop Ops API",
    description="Sales, scheduling and payroll for Scrub Shop Road",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===== ROUTES =====
app.include_router(payroll_router)
app.include_router(bonus_tiers_router)


@app.get("/")
async def root():
    return {
        "message": "Scrub Shop Ops API v1.0",
        "status": "running"
    }

@app.get("/health")
async def health_check(supabase: Client = Depends(get_supabase)):
    """Health check endpoint"""
    try:
        result = supabase.table('stores').select('id').limit(1).execute()
        db_status = "connected" if result.data is not None else "disconnected"

        return {
            "status": "healthy",
            "database": db_status,
            "timestamp": datetime.utcnow().isoformat()
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e)
        }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
