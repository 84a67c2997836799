"""Database engine and session handling"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from cleancity_api.config import settings


def make_engine(url: str):
    """Create an engine; SQLite needs cross-thread access under the ASGI server."""
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    from cleancity_api import models  # noqa: F401  register tables

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
