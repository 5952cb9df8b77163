from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from lkbb.core.errors import ConflictError, from_integrity_error

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, url: str, echo: bool = False):
        kwargs = {"echo": echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                kwargs["poolclass"] = StaticPool
        self.url = url
        self.engine: Engine = create_engine(url, **kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    def create_all(self) -> None:
        # Models must be imported so they register with Base
        import lkbb.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def commit(db: Session, conflict_detail: str = "Data violates a unique constraint") -> None:
    """Commit, mapping constraint violations to API errors."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise from_integrity_error(exc, conflict_detail) from exc


def commit_delete(db: Session, referenced_detail: str) -> None:
    """Commit a delete; a row still referenced elsewhere is a conflict."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(referenced_detail) from exc
