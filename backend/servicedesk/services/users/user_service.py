"""User service. Users only exist as contract creators here."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from servicedesk.models.user import User
from servicedesk.services.users.exceptions import UsernameTaken, UserNotFound


class UserService:
    """Service for creator records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user(self, user_id: int) -> User:
        """Get user by ID."""
        user = await self.session.get(User, user_id)
        if not user:
            raise UserNotFound()
        return user

    async def create_user(self, username: str, email: str | None = None) -> User:
        """Create a user with a unique username."""
        user = User(username=username, email=email)
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise UsernameTaken() from None
        return user
