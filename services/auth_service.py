import jwt
from datetime import datetime, timedelta
from typing import Dict, Any
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from config.settings import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRATION_HOURS, MANAGER_ROLE

security = HTTPBearer()

def create_jwt_token(user_data: Dict[str, Any]) -> str:
    """Create JWT token"""
    payload = {
        "user_id": user_data["user_id"],
        "email": user_data["email"],
        "name": user_data.get("name"),
        "role": user_data["role"],
        "staff_id": user_data.get("staff_id"),
        "store_id": user_data.get("store_id"),
        "exp": datetime.utcnow() + timedelta(hours=JWT_EXPIRATION_HOURS),
        "iat": datetime.utcnow()
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)

def verify_jwt_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, Any]:
    """Verify JWT token and return payload"""
    try:
        payload = jwt.decode(credentials.credentials, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials"
        )

def require_manager(current_user: Dict[str, Any] = Depends(verify_jwt_token)) -> Dict[str, Any]:
    """Require the Manager role (payroll, bonuses and staff pages)"""
    if current_user.get("role") != MANAGER_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only managers can view or change payroll."
        )
    return current_user
