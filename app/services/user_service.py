"""User registration and profile projection."""
import uuid
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import UserRegister
from app.db.repositories import (
    create_user as db_create_user,
    get_user as db_get_user,
    get_user_by_email as db_get_user_by_email,
    list_rsvped_events_for_user,
)
from app.cache.cache_decorators import invalidate_stats
from app.core.errors import ConflictError, InternalError, InvalidInputError, NotFoundError
from app.core.logging import logger
from app.core.security import create_access_token, hash_password, validate_password
from app.core.timeutils import isoformat


class UserService:
    """
    Service layer for users.

    Registration doubles as the identity provider: it issues the UID that
    every other collection references and a signed token for the client.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def register(self, payload: UserRegister) -> dict:
        """
        Register a new user.

        Args:
            payload: Registration data (fullname, email, password, age, role, gender)

        Returns:
            Dictionary with message, uid and token

        Raises:
            InvalidInputError: If required fields are missing or the password is weak
            ConflictError: If the email is already registered
        """
        if not payload.fullname or not payload.password:
            raise InvalidInputError("fullname, email and password are required")
        try:
            validate_password(payload.password)
        except ValueError as e:
            raise InvalidInputError(str(e))

        if await db_get_user_by_email(self.session, payload.email):
            raise ConflictError("Email already registered")

        uid = uuid.uuid4().hex
        role = payload.role.value if payload.role else "user"
        try:
            user = await db_create_user(
                self.session,
                uid=uid,
                email=payload.email,
                hashed_password=hash_password(payload.password),
                fullname=payload.fullname,
                age=payload.age,
                gender=payload.gender,
                role=role,
            )
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Email already registered") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Error registering user: {e}")
            raise InternalError("Failed to register user") from e

        token = create_access_token({"sub": user.id, "role": role})
        logger.info(f"User registered successfully with UID: {user.id}")
        await invalidate_stats()
        return {"message": "User registered successfully", "uid": user.id, "token": token}

    async def get_profile(self, uid: str) -> dict:
        user = await db_get_user(self.session, uid)
        if not user:
            raise NotFoundError("User not found")
        rsvped = await list_rsvped_events_for_user(self.session, uid)
        return {
            "uid": user.id,
            "fullname": user.fullname,
            "email": user.email,
            "age": user.age,
            "gender": user.gender,
            "role": user.role.value if hasattr(user.role, "value") else user.role,
            "createdAt": isoformat(user.created_at),
            "rsvpEvents": [title for _, title in rsvped],
            "rsvpEventIds": [event_id for event_id, _ in rsvped],
        }
