from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine


class Database:
    """Owns the engine for the lifetime of one application instance."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url

        if url.startswith("sqlite"):
            # in-memory databases must share one connection
            extra = {}
            if url in ("sqlite://", "sqlite:///:memory:"):
                extra["poolclass"] = StaticPool
            self.engine = create_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                **extra,
            )
        else:
            self.engine = create_engine(
                url,
                echo=echo,
                pool_pre_ping=True,      # checks dead connections
                pool_recycle=1800,       # refresh every 30 min
            )

    def create_all(self) -> None:
        from storefront import models  # noqa: F401  registers tables

        SQLModel.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session

    def dispose(self) -> None:
        self.engine.dispose()


def get_session(request: Request) -> Iterator[Session]:
    with request.app.state.db.session() as session:
        yield session
