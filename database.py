"""Database setup and session management."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from config import settings

# Sync engine, shared by the storage layer and the Scrapy pipelines
sync_engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    future=True,
)

SessionLocal = sessionmaker(
    sync_engine,
    expire_on_commit=False,
)

# Base class for models
Base = declarative_base()


def init_db(engine=None):
    """Create any missing tables."""
    # Register the models on Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(engine or sync_engine)


def get_sync_db():
    """Get sync database session."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
