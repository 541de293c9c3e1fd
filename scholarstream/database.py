import uuid

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


class Database:
    """Engine and session factory owned by one application instance."""

    def __init__(self, url: str):
        self.engine = create_engine(
            url,
            connect_args={"check_same_thread": False} if url.startswith("sqlite") else {}
        )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def create_all(self):
        Base.metadata.create_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request):
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_by_id(db: Session, model, raw_id: str):
    """Look up a row by id, trying the canonical hex form before the raw string."""
    try:
        canonical = uuid.UUID(raw_id).hex
    except (ValueError, AttributeError, TypeError):
        canonical = None

    if canonical is not None:
        found = db.get(model, canonical)
        if found is not None:
            return found
    if raw_id is None:
        return None
    return db.get(model, raw_id)
