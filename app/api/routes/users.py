"""User routes: registration and profile lookup."""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.rate_limit import limiter
from app.db.session import get_session
from app.schemas import RegisterOut, UserProfileOut, UserRegister
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(session: AsyncSession = Depends(get_session)) -> UserService:
    return UserService(session)


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
async def register(
    request: Request,
    payload: UserRegister,
    user_service: UserService = Depends(get_user_service),
):
    """
    Register a new user account and return its UID with an access token.

    Rate limited per client address (REGISTER_RATE_LIMIT).
    """
    return await user_service.register(payload)


@router.get("/profile/{uid}", response_model=UserProfileOut)
async def get_user_profile(uid: str, user_service: UserService = Depends(get_user_service)):
    """Profile with the titles and ids of the events the user has RSVP'd for."""
    return await user_service.get_profile(uid)
