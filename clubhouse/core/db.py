"""
Database engine and session factory
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from clubhouse.core.config import settings


def build_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
