"""Database configuration module."""
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from tabpos.settings import settings


def configure_sqlite(engine: AsyncEngine) -> None:
    """Enforce foreign keys and take the write lock when a unit of work starts.

    SQLite ships with foreign keys disabled, which would leave transaction
    lines behind when their transaction is deleted. It also ignores
    SELECT ... FOR UPDATE, so every transaction is opened with
    BEGIN IMMEDIATE instead: a unit of work that reads a tab holds the
    database write lock until it commits, and concurrent writers wait on
    the busy timeout.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # stop the driver from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

if engine.dialect.name == "sqlite":
    configure_sqlite(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """Dependency for database session."""
    async with async_session() as session:
        yield session
