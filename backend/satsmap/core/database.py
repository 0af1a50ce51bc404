from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from .config import settings


def make_engine(database_url: str) -> Engine:
    """Create an engine for the location store (SQLite needs cross-thread access)."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # The scheduler and the request handlers share the same file
        connect_args["check_same_thread"] = False

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Test connections before using them
        echo=settings.DEBUG,
        connect_args=connect_args,
    )


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind: Engine = None):
    """
    Create all tables if they do not exist yet.
    Safe to call on every startup.
    """
    # Register models on the metadata before creating tables
    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """
    Dependency for FastAPI to get database session.
    Automatically handles session lifecycle and cleanup.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        # Rollback on any exception
        db.rollback()
        raise e
    finally:
        db.close()
