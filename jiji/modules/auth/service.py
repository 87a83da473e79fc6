import logging
from typing import Optional

from supabase import AuthError, Client

from jiji.core.exceptions import AuthServiceUnavailableError, UnauthorizedError
from jiji.database.supabase_client import BackendAvailability
from jiji.modules.auth.schemas import AuthenticatedUser

logger = logging.getLogger(__name__)

# Development identity used while Supabase Auth is not configured
MOCK_USER = AuthenticatedUser(id="mock-user-id", email="mock@example.com", role="authenticated")


def is_well_formed_jwt(token: str) -> bool:
    """Structural check only: header.payload.signature"""
    return len(token.split(".")) == 3


class AuthService:
    def __init__(self, supabase: Optional[Client], availability: BackendAvailability):
        self.supabase = supabase
        self.availability = availability

    def authenticate(self, token: Optional[str]) -> AuthenticatedUser:
        """Resolve the caller's identity from a bearer token (None when the header is absent)."""
        if token is None:
            if self.availability.mock_mode:
                logger.warning("Auth skipped: Supabase not configured, using mock user")
                return MOCK_USER
            raise UnauthorizedError("Authorization header required. Use: Bearer <token>")

        if self.availability.mock_mode:
            logger.warning("Auth in mock mode: Supabase not configured")
            if not is_well_formed_jwt(token):
                raise UnauthorizedError("Invalid token format")
            return MOCK_USER

        return self.verify_token(token)

    def verify_token(self, token: str) -> AuthenticatedUser:
        """Validate a JWT against Supabase Auth"""
        try:
            user_response = self.supabase.auth.get_user(token)
        except AuthError as e:
            logger.warning(f"Token validation failed: {e}")
            raise UnauthorizedError("Invalid or expired token")
        except Exception as e:
            logger.exception(f"Authentication error: {e}")
            raise AuthServiceUnavailableError()

        user = user_response.user if user_response else None
        if not user:
            logger.warning("Token validation failed: no user returned")
            raise UnauthorizedError("Invalid or expired token")

        logger.debug(f"User authenticated successfully: {user.id}")
        return AuthenticatedUser(
            id=str(user.id),
            email=user.email or "",
            role=user.role or "authenticated",
        )
