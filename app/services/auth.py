"""
Authentication service resolving bearer tokens to users.
Token issuance lives with the identity provider; this service only consumes tokens.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User
from app.repositories.user import UserRepository
from app.utils.auth import verify_token, JWTError, ExpiredSignatureError
from app.utils.exceptions import InvalidTokenError, TokenExpiredError, UnauthorizedError
import logging
import uuid

logger = logging.getLogger(__name__)


class AuthService:
    """Service turning verified token claims into user records."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.user_repo = UserRepository(db_session)

    async def get_current_user(self, token: str) -> User:
        """
        Get the user a bearer token was issued to.

        Args:
            token: JWT access token

        Returns:
            User object

        Raises:
            TokenExpiredError: If token is expired
            InvalidTokenError: If token is invalid
            UnauthorizedError: If the user no longer exists
        """
        try:
            token_payload = verify_token(token, token_type="access")
            user_id = uuid.UUID(token_payload.user_id)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            logger.debug(f"Rejected bearer token: {e}")
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UnauthorizedError("Not authorized, user not found")

        return user
