"""config.database

Database configuration.

Default: MySQL using DB_* variables.
Optional: Postgres by setting DATABASE_URL.

Notes:
- Hosted URLs may be `postgres://...`; SQLAlchemy expects `postgresql://...`.
- Pool options are only applied to server databases. SQLite manages its own
  connections and rejects them.
"""
import os
from dotenv import load_dotenv

_is_production = os.getenv('FLASK_ENV', 'development') == 'production'
load_dotenv(override=(not _is_production))


def _normalize_database_url(url: str) -> str:
    url = url.strip()
    # Heroku/Render-style scheme alias + make driver explicit (psycopg v3).
    if url.startswith('postgres://'):
        return 'postgresql+psycopg://' + url[len('postgres://'):]
    if url.startswith('postgresql://'):
        return 'postgresql+psycopg://' + url[len('postgresql://'):]

    return url


def _build_mysql_uri() -> str:
    database_config = {
        'host': os.getenv('DB_HOST', 'localhost'),
        'port': int(os.getenv('DB_PORT', 3306)),
        'user': os.getenv('DB_USER', 'root'),
        'password': os.getenv('DB_PASSWORD', ''),
        'database': os.getenv('DB_NAME', 'business_app'),
        'charset': 'utf8mb4',
    }

    return (
        f"mysql+pymysql://{database_config['user']}:{database_config['password']}"
        f"@{database_config['host']}:{database_config['port']}/{database_config['database']}"
        f"?charset={database_config['charset']}"
    )


def get_sqlalchemy_database_uri() -> str:
    """Return the SQLAlchemy DB URI.

    Priority:
    1) DATABASE_URL (Postgres or any SQLAlchemy URL)
    2) DB_* vars (MySQL)
    """

    database_url = os.getenv('DATABASE_URL')
    if database_url:
        return _normalize_database_url(database_url)

    return _build_mysql_uri()


def get_engine_options(uri: str, pool_size: int = 10, pool_timeout: int = 30) -> dict:
    """Engine options for a bounded connection pool.

    `max_overflow=0` caps concurrent connections at `pool_size`; callers beyond
    that wait up to `pool_timeout` seconds, then get a pool TimeoutError.
    """
    if uri.startswith('sqlite'):
        return {}
    return {
        'pool_size': pool_size,
        'max_overflow': 0,
        'pool_timeout': pool_timeout,
        'pool_pre_ping': True,
        'pool_recycle': 1800,
    }


SQLALCHEMY_DATABASE_URI = get_sqlalchemy_database_uri()

SQLALCHEMY_TRACK_MODIFICATIONS = False
SQLALCHEMY_ECHO = os.getenv('DEBUG', 'False').lower() == 'true'
