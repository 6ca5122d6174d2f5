import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from suratjalan.config import settings
from suratjalan.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine; SQLite connections are shared across worker threads."""
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        return create_engine(database_url, echo=echo, connect_args=connect_args, **kwargs)
    return create_engine(database_url, echo=echo, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.database_url, echo=settings.database_echo)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db: Session, operation: str) -> None:
    """Commit, turning database failures into PersistenceError."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{operation} failed: {str(e)}")
        raise PersistenceError(operation, str(e)) from e
