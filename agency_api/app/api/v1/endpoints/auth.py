"""
Authentication endpoints: self-registration and login.
"""

from fastapi import APIRouter, status

from ....schemas.user import TokenResponse, UserLogin, UserRegister
from ....services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: UserRegister) -> TokenResponse:
    """Register an account and return a token for it.

    The first account in an empty store becomes the admin.  Later
    registrations may only create clients.
    """
    return await AuthService.register(payload)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin) -> TokenResponse:
    return await AuthService.login(credentials)
