"""
Database connection and session management for PostgreSQL.
Wraps the SQLAlchemy async engine and its connection pool, logs every query,
and exposes sessions and raw connections to the rest of the application.
"""

from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.engine import make_url, URL
from sqlalchemy.exc import DisconnectionError
from sqlalchemy import event, text, DateTime, Integer, func
from contextlib import asynccontextmanager
from fastapi import Request
from app.config import settings, Settings
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, Optional, Tuple
import logging
import ssl
import time

logger = logging.getLogger(__name__)

QUERY_LOG_LENGTH = 50


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Base class for all database models.
    Includes common fields: id, created_at.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        """String representation of the model."""
        return f"<{self.__class__.__name__}(id={self.id})>"


def _ssl_context(mode: str) -> Optional[ssl.SSLContext]:
    """Build the SSL context asyncpg should use for the given mode."""
    if mode == "disable":
        return None

    context = ssl.create_default_context()
    if mode == "require":
        # Managed Postgres providers commonly present certificates that
        # do not chain to the system store.
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def prepare_database_url(database_url: str, ssl_mode: str) -> Tuple[URL, Dict[str, Any]]:
    """
    Split a connection string into a driver URL and asyncpg connect arguments.

    asyncpg rejects libpq's `sslmode` query parameter, so it is removed from
    the URL and turned into an SSL context instead.

    Args:
        database_url: SQLAlchemy connection string
        ssl_mode: Default SSL mode (disable, require, verify-full)

    Returns:
        Tuple of (url, connect_args)
    """
    url = make_url(database_url)
    if not url.drivername.startswith("postgresql"):
        return url, {}

    sslmode = url.query.get("sslmode")
    if sslmode:
        url = url.difference_update_query(["sslmode"])
        if sslmode in ("disable", "allow"):
            ssl_mode = "disable"
        elif sslmode in ("verify-ca", "verify-full"):
            ssl_mode = "verify-full"
        else:
            ssl_mode = "require"

    connect_args: Dict[str, Any] = {
        "server_settings": {"application_name": "classifieds_api"},
    }
    context = _ssl_context(ssl_mode)
    if context is not None:
        connect_args["ssl"] = context
    return url, connect_args


def _connection_hint(exc: BaseException) -> Optional[str]:
    """Return a human hint for the most common connection failures."""
    message = str(exc).lower()
    if isinstance(exc, ConnectionRefusedError) or "connection refused" in message:
        return "Connection refused. Check the host and port in DATABASE_URL."
    if "name or service not known" in message or "nodename nor servname" in message or "getaddrinfo" in message:
        return "Database host not found. Check the host in DATABASE_URL."
    if "password authentication failed" in message:
        return "Password authentication failed. Check the database password."
    if "ssl" in message:
        return "SSL connection issue. Check DATABASE_SSL_MODE."
    return None


class Database:
    """
    Persistence gateway around an async engine.

    The pool itself (sizing, acquire timeout, recycling) is provided by
    SQLAlchemy; this class configures it, logs every statement with its
    duration and owns the engine's lifecycle.
    """

    def __init__(self, engine: AsyncEngine, max_uses: int = 0):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._install_query_logging()
        self._install_pool_logging()
        if max_uses > 0:
            self._install_max_uses(max_uses)

    @classmethod
    def from_settings(cls, config: Settings) -> "Database":
        """Create the gateway with pool settings taken from configuration."""
        url, connect_args = prepare_database_url(config.database_url, config.database_ssl_mode)

        engine_options: Dict[str, Any] = {"echo": config.debug, "connect_args": connect_args}
        if url.drivername.startswith("postgresql"):
            engine_options.update(
                pool_size=config.db_pool_size,
                max_overflow=config.db_max_overflow,
                pool_timeout=config.db_pool_timeout,
                pool_recycle=config.db_pool_recycle,
                pool_pre_ping=True,
            )

        engine = create_async_engine(url, **engine_options)
        return cls(engine, max_uses=config.db_max_uses)

    def _install_query_logging(self) -> None:
        sync_engine = self.engine.sync_engine

        @event.listens_for(sync_engine, "before_cursor_execute")
        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("query_start_time", []).append(time.perf_counter())

        @event.listens_for(sync_engine, "after_cursor_execute")
        def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            started = conn.info["query_start_time"].pop()
            duration_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"Executed query: {statement[:QUERY_LOG_LENGTH]!r} "
                f"({duration_ms:.1f} ms, rows={cursor.rowcount})"
            )

        @event.listens_for(sync_engine, "handle_error")
        def _handle_error(context):
            if context.connection is not None:
                stack = context.connection.info.get("query_start_time")
                if stack:
                    stack.pop()
            logger.error(f"Query error: {context.original_exception}")
            logger.error(f"Query text: {context.statement}")

    def _install_pool_logging(self) -> None:
        sync_engine = self.engine.sync_engine

        @event.listens_for(sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            logger.info("New client connected to database")

        @event.listens_for(sync_engine, "invalidate")
        def _on_invalidate(dbapi_connection, connection_record, exception):
            if exception is not None:
                logger.error(f"Pooled connection invalidated: {exception}")

        @event.listens_for(sync_engine, "close")
        def _on_close(dbapi_connection, connection_record):
            logger.debug("Client removed from pool")

    def _install_max_uses(self, max_uses: int) -> None:
        sync_engine = self.engine.sync_engine

        @event.listens_for(sync_engine, "connect")
        def _reset_uses(dbapi_connection, connection_record):
            connection_record.info["uses"] = 0

        @event.listens_for(sync_engine, "checkout")
        def _on_checkout(dbapi_connection, connection_record, connection_proxy):
            info = connection_record.info
            info["uses"] = info.get("uses", 0) + 1
            if info["uses"] > max_uses:
                logger.info(f"Retiring pooled connection after {max_uses} uses")
                # The pool discards the connection and retries with a fresh one
                raise DisconnectionError("Connection reached its maximum use count")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session bound to the pool, rolled back on error."""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """Check out a raw connection for multi-statement work."""
        async with self.engine.connect() as conn:
            yield conn

    async def execute(self, statement: Any, params: Optional[Dict[str, Any]] = None):
        """
        Execute a single parameterized statement in its own transaction.

        Args:
            statement: SQL text or SQLAlchemy executable
            params: Bound parameters

        Returns:
            Buffered result of the statement
        """
        if isinstance(statement, str):
            statement = text(statement)
        async with self.engine.begin() as conn:
            return await conn.execute(statement, params or {})

    async def check_connection(self) -> bool:
        """
        Test database connectivity and log the server version.
        Returns True if connection is successful, False otherwise.
        """
        query = "SELECT version()" if self.engine.dialect.name == "postgresql" else "SELECT sqlite_version()"
        try:
            result = await self.execute(query)
            version = str(result.scalar())
            logger.info(f"Database connection test successful: {version.split(',')[0]}")
            return True
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            hint = _connection_hint(e)
            if hint:
                logger.error(hint)
            return False

    async def ping(self) -> bool:
        """Run `SELECT 1` for health checks."""
        try:
            result = await self.execute("SELECT 1")
            return result.scalar() == 1
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            return False

    def pool_status(self) -> str:
        """Describe the pool's current checkout state."""
        return self.engine.pool.status()

    async def create_tables(self) -> None:
        """Create all tables known to the model metadata."""
        import app.models  # noqa: F401  registers every table on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")

    async def drop_tables(self) -> None:
        """
        Drop all tables.
        This should only be used in testing or development.
        """
        if settings.is_production:
            raise RuntimeError("Cannot drop tables in production environment")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database tables dropped successfully")

    async def close(self) -> None:
        """Drain and close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database pool closed")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.
    Yields an async session from the application's database gateway.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
