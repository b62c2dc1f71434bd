# blogdesk/config.py
import os
from dataclasses import dataclass, field
from typing import List


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() not in ('disable', 'false', 'no', '0', '')


@dataclass
class DatabaseConfig:
    """PostgreSQL(asyncpg) 또는 SQLite(aiosqlite) 연결 설정"""
    use_postgres: bool = field(default_factory=lambda: os.getenv('USE_POSTGRES', 'false').lower() == 'true')
    host: str = field(default_factory=lambda: os.getenv('POSTGRES_HOST', 'postgresql-service'))
    port: int = field(default_factory=lambda: int(os.getenv('POSTGRES_PORT', '5432')))
    database: str = field(default_factory=lambda: os.getenv('POSTGRES_DB', 'titanium'))
    user: str = field(default_factory=lambda: os.getenv('POSTGRES_USER', 'postgres'))
    password: str = field(default_factory=lambda: os.getenv('POSTGRES_PASSWORD', ''))
    # asyncpg uses ssl parameter, not sslmode
    ssl: bool = field(default_factory=lambda: _env_flag('POSTGRES_SSLMODE', 'disable'))
    pool_min_size: int = field(default_factory=lambda: int(os.getenv('POSTGRES_POOL_MIN', '5')))
    pool_max_size: int = field(default_factory=lambda: int(os.getenv('POSTGRES_POOL_MAX', '20')))
    sqlite_path: str = field(default_factory=lambda: os.getenv('BLOG_DATABASE_PATH', '/app/blog.db'))

    def asyncpg_kwargs(self) -> dict:
        return {
            'host': self.host,
            'port': self.port,
            'database': self.database,
            'user': self.user,
            'password': self.password,
            'ssl': self.ssl,
        }


@dataclass
class ServerConfig:
    """Blog Service 서버 실행 설정"""
    host: str = field(default_factory=lambda: os.getenv('BLOG_SERVICE_HOST', '0.0.0.0'))
    port: int = field(default_factory=lambda: int(os.getenv('BLOG_SERVICE_PORT', '8005')))
    allowed_origins: List[str] = field(
        default_factory=lambda: os.getenv('ALLOWED_ORIGINS', '*').split(',')
    )
    log_level: str = field(default_factory=lambda: os.getenv('LOG_LEVEL', 'INFO'))


class Config:
    def __init__(self):
        self.database = DatabaseConfig()
        self.server = ServerConfig()

    def database_url(self) -> str:
        """SQLAlchemy URL for the declarative schema in blogdesk.models."""
        db = self.database
        if db.use_postgres:
            return f'postgresql://{db.user}:{db.password}@{db.host}:{db.port}/{db.database}'
        return f'sqlite:///{db.sqlite_path}'


def load_config() -> Config:
    """Build a Config from the current environment."""
    return Config()


# Prometheus Metrics Configuration
REQUEST_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.075,
    0.1,
    0.25,
    0.5,
    0.75,
    1.0,
    2.5,
    5.0,
    10.0,
)
