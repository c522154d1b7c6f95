# app/db/base.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core import config


def make_engine(url: str = config.DATABASE_URL):
    connect_args = {}
    if url.startswith("sqlite"):
        # sessions are handed across FastAPI's threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=config.SQL_ECHO, connect_args=connect_args)


engine = make_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    # models register themselves on Base.metadata when imported
    from app.db import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
