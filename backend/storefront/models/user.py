from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from storefront.config import settings
from storefront.database import Base
from storefront.models.base import utcnow

class UserRole(str, enum.Enum):
    user = "user"
    admin = "admin"
    system = "system"

class DiscordRole(str, enum.Enum):
    admin = "admin"
    support = "support"
    worker = "worker"
    customer = "customer"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    fullname = Column(String(191), nullable=False)
    username = Column(String(191), unique=True, nullable=True)
    email = Column(String(191), unique=True, nullable=False, index=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.user)
    discord_id = Column(String(64), unique=True, nullable=True, index=True)
    discord_username = Column(String(191), nullable=True)
    discord_display_name = Column(String(191), nullable=True)
    discord_role = Column(Enum(DiscordRole), nullable=True, default=DiscordRole.customer)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    wallet = relationship("Wallet", back_populates="user", uselist=False)


def system_user_row() -> dict:
    """Row for the account that owns postings made without an acting user.

    Seeded by the initial migration; wallet_transactions.created_by_id falls
    back to it.
    """
    return {
        "id": settings.SYSTEM_USER_ID,
        "fullname": "System",
        "username": "system",
        "email": "system@storefront.local",
        "role": UserRole.system.value,
        "discord_role": None,
    }
