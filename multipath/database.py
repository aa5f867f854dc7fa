from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from multipath.settings.config import settings

raw_url = settings.DATABASE_URL
if raw_url.startswith("postgresql+psycopg"):
    # if someone provided a sync URL by mistake, upgrade it to async
    DATABASE_URL = raw_url.replace("postgresql+psycopg", "postgresql+asyncpg")
elif raw_url.startswith("sqlite:"):
    DATABASE_URL = raw_url.replace("sqlite:", "sqlite+aiosqlite:", 1)
else:
    DATABASE_URL = raw_url


engine = create_async_engine(DATABASE_URL, echo=False, future=True)
async_session_maker = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
Base = declarative_base()

async def get_db():
    async with async_session_maker() as session:
        yield session

async def init_db(bind: AsyncEngine | None = None):
    # SQLite files are created in place; other databases go through Alembic
    bind = bind or engine
    if settings.RUN_DB_CREATE_ALL or bind.url.get_backend_name() == "sqlite":
        async with bind.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
