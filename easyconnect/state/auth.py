"""In-process session: who is signed in, for clients embedding the services directly."""
from typing import Optional
from easyconnect.modules.auth.schemas import AuthUser, LoginRequest, RegisterRequest
from easyconnect.modules.auth.service import AuthService
from easyconnect.state.store import StateContainer
import logging

logger = logging.getLogger(__name__)


class AuthSession:
    def __init__(self, auth_service: AuthService):
        self.auth_service = auth_service
        self.current_user: StateContainer[Optional[AuthUser]] = StateContainer(None)
        self.access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user.get() is not None

    def sign_in(self, email: str, password: str) -> AuthUser:
        token = self.auth_service.login(LoginRequest(email=email, password=password))
        self.access_token = token.access_token
        self.current_user.set(token.user)
        return token.user

    def sign_up(self, email: str, password: str) -> AuthUser:
        user = self.auth_service.register(RegisterRequest(email=email, password=password))
        self.current_user.set(user)
        return user

    def sign_out(self) -> bool:
        """Sign out; identity is kept when the backend call fails"""
        if not self.auth_service.logout(self.access_token or ""):
            return False
        self.access_token = None
        self.current_user.set(None)
        return True
