from datetime import datetime, timezone
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, UUID, Text, DateTime, JSON, ForeignKey, Integer
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    firebase_uid: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String, default="")
    last_name: Mapped[str] = mapped_column(String, default="")
    # free | premium
    subscription_status: Mapped[str] = mapped_column(String, default="free")
    billing_interval: Mapped[str] = mapped_column(String, nullable=True)
    subscription_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    subscription_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    stripe_customer_id: Mapped[str] = mapped_column(String, nullable=True)
    stripe_subscription_id: Mapped[str] = mapped_column(String, nullable=True, index=True)
    preferences: Mapped[dict] = mapped_column(JSON, default=dict)
    # generations in generation_period ("YYYY-MM"); deleting itineraries does not lower it
    generation_period: Mapped[str] = mapped_column(String, nullable=True)
    generation_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    last_login: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_premium(self) -> bool:
        return self.subscription_status == "premium"

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Itinerary(Base):
    __tablename__ = "itineraries"
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    location: Mapped[str] = mapped_column(String, nullable=False)
    filters: Mapped[dict] = mapped_column(JSON, default=dict)
    comments: Mapped[str] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # custom | popular-trek
    type: Mapped[str] = mapped_column(String, default="custom")
    trek_id: Mapped[str] = mapped_column(String, nullable=True)
    trek_details: Mapped[dict] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    last_viewed: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
