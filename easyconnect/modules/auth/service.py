import hashlib
import time
from supabase import Client
from easyconnect.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, AuthUser
from fastapi import HTTPException
from easyconnect.database.supabase_client import SupabaseClient
from typing import Callable, Dict, Optional
import logging

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user so parallel requests with one token hit Supabase Auth once
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, session_factory: Optional[Callable[[], Client]] = None):
        self.supabase = supabase
        self.session_factory = session_factory or SupabaseClient.new_session_client

    def register(self, register_data: RegisterRequest) -> AuthUser:
        """Register a new user using Supabase Auth"""
        try:
            user_metadata = {}
            if register_data.username:
                user_metadata["username"] = register_data.username

            auth_response = self.session_factory().auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            logger.info(f"Registered user {auth_response.user.id}")
            return AuthUser(
                id=auth_response.user.id,
                email=auth_response.user.email or register_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Registration failed: {error_message}")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.session_factory().auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user=AuthUser(
                    id=auth_response.user.id,
                    email=auth_response.user.email or login_data.email
                )
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> AuthUser:
        """Resolve the user behind a bearer token. Uses a short TTL cache."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user
                del _AUTH_USER_CACHE[cache_key]

            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")

            user = AuthUser(id=user_response.user.id, email=user_response.user.email or "")
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user, now + _AUTH_CACHE_TTL_SEC)
            return user
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Revoke the session behind this token and forget its cached user"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # The access token itself stays valid until it expires; refresh tokens are revoked
            self.session_factory().auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.error(f"Error signing out: {e}")
            return False
