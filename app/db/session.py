# app/db/session.py
# SQLAlchemy setup. The URL comes from DATABASE_URL in .env.

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import settings

Base = declarative_base()


def make_engine(database_url: str):
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set.")

    if database_url.startswith("sqlite"):
        # SQLite is used for local runs; FastAPI calls sync routes from a threadpool
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_pre_ping=True,  # drop dead connections
        pool_size=10,
        max_overflow=0,
        pool_timeout=30,
    )


engine = make_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
