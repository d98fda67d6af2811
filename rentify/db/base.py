from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from rentify.core.config import settings


def normalize_database_url(url: str) -> str:
    """Point bare ``postgresql://`` URLs at the psycopg 3 driver. Other URLs pass through."""
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


engine = create_engine(normalize_database_url(settings.database_url), pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
