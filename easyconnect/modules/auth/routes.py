from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPAuthorizationCredentials
from easyconnect.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, AuthUser
from easyconnect.modules.auth.service import AuthService
from easyconnect.core.dependencies import get_auth_service, get_current_user, security

router = APIRouter(prefix="/auth", tags=["auth"])


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/register", response_model=AuthUser, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=AuthUser)
async def me(current_user: AuthUser = Depends(get_current_user)):
    """Get the current authenticated user"""
    return current_user
