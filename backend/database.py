import logging
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), unique=True, nullable=False),
    Column("hashed_password", String(255), nullable=False),
    Column("name", String(255)),
    Column("created_at", DateTime, nullable=False, default=datetime.now),
)

transactions = Table(
    "transactions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("type", String(20), nullable=False),
    Column("category", String(255), nullable=False),
    Column("amount", Numeric(12, 2, asdecimal=False), nullable=False),
    Column("description", String(500)),
    Column("date", DateTime, nullable=False, index=True),
    Column("created_at", DateTime, nullable=False, default=datetime.now),
    Column("updated_at", DateTime, nullable=False, default=datetime.now, onupdate=datetime.now),
)

budgets = Table(
    "budgets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("month", Integer, nullable=False),
    Column("year", Integer, nullable=False),
    Column("amount", Numeric(12, 2, asdecimal=False), nullable=False),
    Column("created_at", DateTime, nullable=False, default=datetime.now),
    Column("updated_at", DateTime, nullable=False, default=datetime.now, onupdate=datetime.now),
    UniqueConstraint("user_id", "month", "year", name="uq_budgets_user_period"),
)


class Database:
    """Owns the process-wide SQLAlchemy engine.

    The engine is created on first access so that constructing an app does not
    open connections. ``init`` creates the schema, ``dispose`` releases the pool.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine: Engine | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            connect_args = {}
            if self.url.startswith("sqlite"):
                connect_args = {"check_same_thread": False}
            self._engine = create_engine(self.url, connect_args=connect_args)
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def begin(self):
        return self.engine.begin()

    def init(self) -> None:
        metadata.create_all(self.engine)
        logger.info("Database ready (%s)", self.dialect_name)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connections closed")
