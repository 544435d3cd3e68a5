"""Account and session management."""

from typing import Optional, Tuple

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.exceptions import AuthenticationError, ConflictError
from storefront.core.security import generate_session_token, get_password_hash, verify_password
from storefront.core.time_utils import expires_in, utcnow
from storefront.db.models import User, UserRole, UserSession


class AuthService:
    """Sign-up, sign-in and bearer token resolution."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalars().first()

    async def _issue_session(self, user: User) -> str:
        token = generate_session_token()
        self.db.add(UserSession(user_id=user.id, token=token, expires_at=expires_in(settings.SESSION_TTL_DAYS)))
        await self.db.commit()
        return token

    async def create_user(self, email: str, password: str, role: UserRole = UserRole.USER) -> User:
        if await self.get_user_by_email(email):
            raise ConflictError("A user with this email already exists")

        user = User(email=email.lower(), password_hash=get_password_hash(password), role=role.value)
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"Created {role.value} account {user.id}")
        return user

    async def create_admin(self, email: str, password: str) -> User:
        """Seed an admin account; there is no route that grants the role."""
        return await self.create_user(email, password, role=UserRole.ADMIN)

    async def sign_up(self, email: str, password: str) -> Tuple[User, str]:
        user = await self.create_user(email, password)
        return user, await self._issue_session(user)

    async def sign_in(self, email: str, password: str) -> Tuple[User, str]:
        user = await self.get_user_by_email(email)
        if user is None or not verify_password(password, str(user.password_hash)):
            logger.warning(f"Failed sign-in for {email}")
            raise AuthenticationError("Invalid credentials")
        return user, await self._issue_session(user)

    async def resolve_token(self, token: Optional[str]) -> Optional[User]:
        """
        Map a bearer token to its user.

        Expiry is checked lazily here; an expired session is removed and
        resolves to None.
        """
        if not token:
            return None

        result = await self.db.execute(select(UserSession).where(UserSession.token == token))
        session = result.scalar_one_or_none()
        if session is None:
            return None

        if session.expires_at <= utcnow():
            logger.info(f"Session for user {session.user_id} expired")
            await self.db.execute(delete(UserSession).where(UserSession.id == session.id))
            await self.db.commit()
            return None

        return await self.db.get(User, session.user_id)

    async def sign_out(self, token: str) -> bool:
        result = await self.db.execute(delete(UserSession).where(UserSession.token == token))
        await self.db.commit()
        return bool(result.rowcount)
