"""Database URL for alembic migrations."""
from urllib.parse import quote_plus

from ...config.config import get_database_settings


def build_database_url() -> str:
    """SQLAlchemy URL for the same database the API connects to."""
    settings = get_database_settings()
    return (
        f"postgresql+psycopg2://{quote_plus(settings['user'])}:{quote_plus(settings['password'])}"
        f"@{settings['host']}:{settings['port']}/{quote_plus(settings['dbname'])}"
    )
