import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from app.core.config import settings
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def create_db_engine(url: str, timeout: int = 30) -> Engine:
    if url.startswith("sqlite"):
        # pysqlite runs SELECTs outside a transaction and opens one only at the first
        # write, so reads never hold a lock and a write blocked by another writer
        # waits up to `timeout` seconds for it to commit
        return create_engine(url, connect_args={"check_same_thread": False, "timeout": timeout})
    return create_engine(url,
                         connect_args={"connect_timeout": timeout},
                         pool_pre_ping=True,
                         pool_recycle=3600,
    )


# Create the SQLAlchemy engine
engine = create_db_engine(settings.DATABASE_URL)

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# do not change the order of the code below
# Dependency that can be used in routes to get the session
def get_db() -> Session  |  HTTPException:
    db = SessionLocal()  # generate a new SessionLocal
    try:
        yield db
    except Exception as e:
        if isinstance(e, HTTPException):
            raise e
        else:
            logger.exception("database session error")
            raise HTTPException(status_code=500, detail="Query data error")
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create the tables of every registered model if they do not exist yet."""
    # models must be imported so they register on Base.metadata
    from app.db.base import Base
    from app.models import auth, contracts  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
