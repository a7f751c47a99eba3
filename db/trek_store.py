import logging
import uuid

from sqlalchemy import case, delete, or_, select, text, update
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from core.identity import VerifiedIdentity
from models.records import Base, Itinerary, User, utcnow

logger = logging.getLogger(__name__)

ITINERARY_UPDATABLE = {"title", "location", "filters", "comments", "content"}
USER_UPDATABLE = {
    "first_name",
    "last_name",
    "preferences",
    "subscription_status",
    "billing_interval",
    "subscription_start",
    "subscription_end",
    "stripe_customer_id",
    "stripe_subscription_id",
}


class TrekStore:

    def __init__(self, db_url: str, echo: bool = False) -> None:
        self.engine = create_async_engine(db_url, echo=echo)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        self.available = False

    async def db_init(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.available = True
        logger.info("Database tables ready")

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()

    # Users

    async def upsert_user(self, identity: VerifiedIdentity) -> User:
        """Create the local user on first login, otherwise refresh last_login."""
        async with self.session_factory() as session:
            result = await session.execute(select(User).where(User.firebase_uid == identity.uid))
            user = result.scalar_one_or_none()
            now = utcnow()

            if user is None:
                first, _, last = (identity.display_name or "").partition(" ")
                user = User(
                    firebase_uid=identity.uid,
                    email=(identity.email or f"{identity.uid}@users.invalid").lower(),
                    first_name=first,
                    last_name=last,
                    subscription_status="free",
                    subscription_start=now,
                    preferences={},
                    created_at=now,
                    last_login=now,
                )
                session.add(user)
                logger.info(f"Created user for firebase uid {identity.uid}")
            else:
                user.last_login = now

            await session.commit()
            return user

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        async with self.session_factory() as session:
            return await session.get(User, user_id)

    async def find_user_by_subscription(self, subscription_id: str) -> User | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(User).where(User.stripe_subscription_id == subscription_id)
            )
            return result.scalar_one_or_none()

    async def update_user(self, user_id: uuid.UUID, **fields) -> User | None:
        unknown = set(fields) - USER_UPDATABLE
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        async with self.session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            for k, v in fields.items():
                setattr(user, k, v)
            await session.commit()
            return user

    async def delete_user(self, user_id: uuid.UUID) -> User | None:
        async with self.session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            await session.execute(delete(Itinerary).where(Itinerary.user_id == user_id))
            await session.delete(user)
            await session.commit()
            return user

    # Itineraries

    async def create_itinerary(
        self,
        user_id: uuid.UUID,
        title: str,
        location: str,
        content: str,
        filters: dict | None = None,
        comments: str | None = None,
    ) -> Itinerary:
        now = utcnow()
        itinerary = Itinerary(
            user_id=user_id,
            title=title.strip(),
            location=location.strip(),
            filters=filters or {},
            comments=comments.strip() if comments else comments,
            content=content,
            type="custom",
            created_at=now,
            last_viewed=now,
        )
        async with self.session_factory() as session:
            session.add(itinerary)
            await session.commit()
        logger.info(f"Itinerary saved with ID: {itinerary.id}")
        return itinerary

    async def list_itineraries(self, user_id: uuid.UUID) -> list[Itinerary]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Itinerary)
                .where(Itinerary.user_id == user_id)
                .order_by(Itinerary.created_at.desc())
            )
            return list(result.scalars().all())

    async def get_itinerary(self, itinerary_id: uuid.UUID, user_id: uuid.UUID) -> Itinerary | None:
        """Fetch an itinerary owned by user_id and mark it as viewed."""
        async with self.session_factory() as session:
            itinerary = await session.get(Itinerary, itinerary_id)
            if itinerary is None or itinerary.user_id != user_id:
                return None
            itinerary.last_viewed = utcnow()
            await session.commit()
            return itinerary

    async def update_itinerary(self, itinerary_id: uuid.UUID, user_id: uuid.UUID, **updates) -> Itinerary | None:
        async with self.session_factory() as session:
            itinerary = await session.get(Itinerary, itinerary_id)
            if itinerary is None or itinerary.user_id != user_id:
                return None
            for k, v in updates.items():
                if k in ITINERARY_UPDATABLE and v is not None:
                    setattr(itinerary, k, v)
            await session.commit()
            return itinerary

    async def delete_itinerary(self, itinerary_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        async with self.session_factory() as session:
            itinerary = await session.get(Itinerary, itinerary_id)
            if itinerary is None or itinerary.user_id != user_id:
                return False
            await session.delete(itinerary)
            await session.commit()
            return True

    # Generation quota

    async def claim_generation(self, user_id: uuid.UUID, period: str, limit: int) -> bool:
        """
        Take one generation from the user's allowance for period ("YYYY-MM").

        The check and the increment are one UPDATE, so concurrent claims
        cannot overshoot limit. A new period starts the count again at 1.
        """
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                or_(
                    User.generation_period.is_(None),
                    User.generation_period != period,
                    User.generation_count < limit,
                ),
            )
            .values(
                generation_count=case((User.generation_period == period, User.generation_count + 1), else_=1),
                generation_period=period,
            )
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount == 1

    async def release_generation(self, user_id: uuid.UUID, period: str) -> None:
        """Give back a claimed generation that produced nothing."""
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.generation_period == period,
                User.generation_count > 0,
            )
            .values(generation_count=User.generation_count - 1)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            await session.execute(stmt)
            await session.commit()
