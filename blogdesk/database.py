# blogdesk/database.py
import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

import aiosqlite
import asyncpg

from blogdesk.config import DatabaseConfig
from blogdesk.errors import BlogError, Conflict, NotFound, InternalError

logger = logging.getLogger(__name__)

# TIMESTAMP columns hold naive UTC on both backends
PG_UTC_NOW = "(now() AT TIME ZONE 'utc')"


def _casefold(value):
    return value.casefold() if value is not None else None


class BlogDatabase:
    """Storage client shared by the mutation and query services.

    Constructed by the host process and passed in explicitly; ``initialize``
    and ``close`` are called from the application lifespan.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.use_postgres = config.use_postgres
        self.database_path = config.sqlite_path
        self.pool: Optional[asyncpg.Pool] = None
        self._initialized = False

    async def initialize(self):
        """Initialize database connection pool and schema."""
        if self._initialized:
            return

        if self.use_postgres:
            logger.info("🐘 Using PostgreSQL database for blog posts")
            try:
                self.pool = await asyncpg.create_pool(
                    min_size=self.config.pool_min_size,
                    max_size=self.config.pool_max_size,
                    **self.config.asyncpg_kwargs()
                )
                logger.info(f"PostgreSQL connection pool created: {self.config.host}:{self.config.port}")
                await self._initialize_postgres_schema()
            except Exception as e:
                logger.error(f"PostgreSQL pool creation failed: {e}", exc_info=True)
                raise
        else:
            logger.info("💾 Using SQLite database for blog posts")
            await self._initialize_sqlite_schema()

        self._initialized = True

    async def _initialize_postgres_schema(self):
        """Initialize PostgreSQL database schema."""
        async with self.pool.acquire() as conn:
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS posts (
                    id SERIAL PRIMARY KEY,
                    title VARCHAR(256) NOT NULL,
                    slug VARCHAR(256) NOT NULL UNIQUE,
                    content TEXT,
                    published BOOLEAN NOT NULL DEFAULT FALSE,
                    created_at TIMESTAMP NOT NULL DEFAULT (now() AT TIME ZONE 'utc'),
                    updated_at TIMESTAMP NOT NULL DEFAULT (now() AT TIME ZONE 'utc')
                )
            ''')
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS categories (
                    id SERIAL PRIMARY KEY,
                    name VARCHAR(256) NOT NULL UNIQUE,
                    slug VARCHAR(256) NOT NULL UNIQUE,
                    description TEXT
                )
            ''')
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS posts_to_categories (
                    post_id INTEGER NOT NULL REFERENCES posts(id),
                    category_id INTEGER NOT NULL REFERENCES categories(id),
                    PRIMARY KEY (post_id, category_id)
                )
            ''')

            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_created_at ON posts(created_at DESC)')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_ptc_category_id ON posts_to_categories(category_id)')

        logger.info("PostgreSQL blog database schema initialized")

    async def _initialize_sqlite_schema(self):
        """Initialize SQLite database schema."""
        directory = os.path.dirname(self.database_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        async with aiosqlite.connect(self.database_path) as conn:
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS posts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    slug TEXT NOT NULL UNIQUE,
                    content TEXT,
                    published INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS categories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    slug TEXT NOT NULL UNIQUE,
                    description TEXT
                )
            ''')
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS posts_to_categories (
                    post_id INTEGER NOT NULL,
                    category_id INTEGER NOT NULL,
                    PRIMARY KEY (post_id, category_id),
                    FOREIGN KEY (post_id) REFERENCES posts(id),
                    FOREIGN KEY (category_id) REFERENCES categories(id)
                )
            ''')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_created_at ON posts(created_at DESC)')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_ptc_category_id ON posts_to_categories(category_id)')
            await conn.commit()

        logger.info("SQLite blog database schema initialized")

    async def _connect_sqlite(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.database_path)
        conn.row_factory = aiosqlite.Row
        # SQLite only enforces REFERENCES when asked, per connection
        await conn.execute("PRAGMA foreign_keys = ON")
        # Unicode-aware case folding for title search (built-in lower()/LIKE are ASCII-only)
        await conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    @asynccontextmanager
    async def connection(self):
        """Yield a connection for read-only work."""
        if self.use_postgres:
            async with self.pool.acquire() as conn:
                yield conn
        else:
            conn = await self._connect_sqlite()
            try:
                yield conn
            finally:
                await conn.close()

    @asynccontextmanager
    async def transaction(self):
        """Yield a connection whose statements commit together or not at all."""
        if self.use_postgres:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    yield conn
        else:
            conn = await self._connect_sqlite()
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            else:
                await conn.commit()
            finally:
                await conn.close()

    async def health_check(self) -> bool:
        """Check database connection health."""
        try:
            async with self.connection() as conn:
                if self.use_postgres:
                    await conn.fetchval("SELECT 1")
                else:
                    await conn.execute("SELECT 1")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def close(self):
        """Close database connection pool."""
        if self.use_postgres and self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("PostgreSQL connection pool closed")
        self._initialized = False


def classify_storage_error(exc: BaseException, entity: str) -> BlogError:
    """Map a driver exception to the error taxonomy.

    Unique violations become Conflict, foreign-key violations NotFound, and
    anything else an InternalError with a generic message.
    """
    if isinstance(exc, BlogError):
        return exc
    if isinstance(exc, asyncpg.UniqueViolationError):
        return Conflict(f"A {entity.lower()} with this name or slug already exists.")
    if isinstance(exc, asyncpg.ForeignKeyViolationError):
        return NotFound("One or more categories not found")
    if isinstance(exc, aiosqlite.IntegrityError):
        text = str(exc)
        if "UNIQUE" in text:
            return Conflict(f"A {entity.lower()} with this name or slug already exists.")
        if "FOREIGN KEY" in text:
            return NotFound("One or more categories not found")
    logger.error(f"{entity} storage operation failed: {exc}", exc_info=exc)
    return InternalError(f"Could not complete the {entity.lower()} operation.")
