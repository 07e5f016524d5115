from sqlalchemy import Column, Integer, String, DateTime, func, Enum
from app.db.session import Base
import enum


class RoleEnum(str, enum.Enum):
    user = "user"
    organizer = "organizer"
    admin = "admin"


class User(Base):
    __tablename__ = "users"
    # UID issued at registration; other collections reference users by this id
    id = Column(String(128), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    fullname = Column(String(255), nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(String(50), nullable=True)
    role = Column(Enum(RoleEnum), default=RoleEnum.user, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
