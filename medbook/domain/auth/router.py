"""Auth router - registration and login endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...rate_limiter import create_rate_limiter
from .schemas import LoginRequest, RegisterRequest, TokenResponse
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])

# 10 registrations per hour per IP
rate_limit_register = create_rate_limiter(limit=10, window_seconds=3600, key_prefix="register")

# 10 login attempts per minute per IP
rate_limit_login = create_rate_limiter(limit=10, window_seconds=60, key_prefix="login")


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    data: RegisterRequest,
    _: None = Depends(rate_limit_register),
    service: AuthService = Depends(get_auth_service),
):
    """Create a patient or doctor account and return a bearer token"""
    return service.register(data)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    _: None = Depends(rate_limit_login),
    service: AuthService = Depends(get_auth_service),
):
    return service.login(data)
