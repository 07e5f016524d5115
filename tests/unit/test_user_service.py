import pytest
from jose import jwt

from app.core import security
from app.core.config import settings
from app.core.errors import ConflictError, InvalidInputError, NotFoundError
from app.db.repositories import get_user
from app.schemas import UserRegister
from app.services.rsvp_service import RSVPService
from app.services.user_service import UserService


def registration(**overrides) -> UserRegister:
    fields = {
        "fullname": "Lerato Dlamini",
        "email": "lerato@example.com",
        "password": "Test123!@#",
        "age": 29,
        "gender": "Female",
    }
    fields.update(overrides)
    return UserRegister(**fields)


@pytest.mark.unit
@pytest.mark.asyncio
class TestRegister:
    async def test_register_issues_uid_and_token(self, db_session):
        result = await UserService(db_session).register(registration())

        assert result["message"] == "User registered successfully"
        claims = jwt.decode(result["token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        assert claims["sub"] == result["uid"]
        user = await get_user(db_session, result["uid"])
        assert user.email == "lerato@example.com"
        assert user.age == 29
        assert security.pwd_context.verify("Test123!@#", user.hashed_password)

    async def test_uids_are_unique(self, db_session):
        service = UserService(db_session)

        first = await service.register(registration())
        second = await service.register(registration(email="sipho@example.com"))

        assert first["uid"] != second["uid"]

    async def test_duplicate_email_rejected(self, db_session):
        service = UserService(db_session)
        await service.register(registration())

        with pytest.raises(ConflictError, match="Email already registered"):
            await service.register(registration(fullname="Someone Else"))

    async def test_weak_password_rejected(self, db_session):
        with pytest.raises(InvalidInputError, match="at least 8 characters"):
            await UserService(db_session).register(registration(password="short"))

    async def test_missing_fullname_rejected(self, db_session):
        with pytest.raises(InvalidInputError):
            await UserService(db_session).register(registration(fullname=None))


@pytest.mark.unit
@pytest.mark.asyncio
class TestProfile:
    async def test_profile_lists_rsvped_events(self, db_session, test_user, test_event):
        await RSVPService(db_session).join(test_event.id, test_user.id)

        profile = await UserService(db_session).get_profile(test_user.id)

        assert profile["uid"] == test_user.id
        assert profile["fullname"] == "Thabo Nkosi"
        assert profile["role"] == "user"
        assert profile["rsvpEvents"] == ["Jazz Night"]
        assert profile["rsvpEventIds"] == [test_event.id]

    async def test_profile_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            await UserService(db_session).get_profile("ghost")
