from contextlib import contextmanager

from sqlalchemy import create_engine

from jewelry_storefront.core.config import DatabaseConfig


class Database:
    """Owns the SQLAlchemy engine for one application instance."""

    def __init__(self, config: DatabaseConfig):
        kwargs = {"echo": config.echo, "pool_pre_ping": True}
        if config.url.startswith("sqlite"):
            # Request threads and the profile loader share connections
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs.update(
                pool_size=config.pool_size,
                max_overflow=config.max_overflow,
                pool_timeout=config.pool_timeout,
                pool_recycle=config.pool_recycle,
            )
        self.engine = create_engine(config.url, **kwargs)

    @contextmanager
    def get_connection(self):
        with self.engine.connect() as conn:
            yield conn

    @contextmanager
    def begin(self):
        """Connection with a transaction committed on exit, rolled back on error"""
        with self.engine.begin() as conn:
            yield conn

    def create_all(self) -> None:
        from jewelry_storefront.tables import Base

        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        from jewelry_storefront.tables import Base

        Base.metadata.drop_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
