from sqlalchemy import Column, Integer, String, DateTime, Boolean
from subgate.core.database import Base
import enum


class Package(str, enum.Enum):
    BASIC = "Basic"
    PREMIUM = "Premium"


class Subscription(Base):
    __tablename__ = "manual_subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    user_id = Column(String, nullable=False, index=True)  # Firebase UID, not checked on write
    package = Column(String(50), nullable=False)  # free text, see Package for accepted values
    start_date = Column(DateTime, nullable=True)  # set on approval
    expiry_date = Column(DateTime, nullable=True)  # start_date + 30 days
    approved = Column(Boolean, nullable=False, default=False, index=True)
    invoice_url = Column(String(255), nullable=False, default='')

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, user_id={self.user_id}, approved={self.approved})>"
