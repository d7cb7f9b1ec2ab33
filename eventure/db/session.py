from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from eventure.core.config import settings

engine = create_async_engine(settings.DATABASE_URL, future=True, echo=settings.DEBUG)

AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    future=True
)


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


async def init_models():
    # every table must be on Base.metadata before create_all
    import eventure.models.user  # noqa: F401
    import eventure.models.scooter  # noqa: F401
    import eventure.models.booking  # noqa: F401
    import eventure.models.audit  # noqa: F401
    from eventure.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
