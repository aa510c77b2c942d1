"""Persistence of the single GitHub metrics row."""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from sqlalchemy import Column, Integer, MetaData, Table, create_engine, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from shared.logger import get_logger

from .errors import ConfigurationError, MetricsStoreError

logger = get_logger(__name__)

METRICS_ROW_ID = 1

metadata = MetaData()

github_metrics = Table(
    "github_metrics",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("commits", Integer, nullable=False, default=0),
    Column("repos", Integer, nullable=False, default=0),
)


@dataclass(frozen=True)
class MetricsRecord:
    """The persisted summary row."""

    id: int
    commits: int
    repos: int

    def to_dict(self) -> dict:
        return {"id": self.id, "commits": self.commits, "repos": self.repos}


@contextmanager
def _wrap_errors(message: str) -> Iterator[None]:
    """Log database errors and re-raise them as MetricsStoreError(message)."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"{message}: {e}")
        raise MetricsStoreError(message) from e


class MetricsStore:
    """
    Read and write the metrics row.

    The engine is created on first use, so a missing connection string only
    fails when the store is actually touched.
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        """
        Initialize the store.

        Args:
            database_url: SQLAlchemy connection URL
            engine: Pre-built engine (takes precedence over database_url)
        """
        self.database_url = database_url
        self._engine = engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            if not self.database_url:
                raise ConfigurationError("DATABASE_URL environment variable is not set")
            self._engine = create_engine(self.database_url, pool_pre_ping=True)
        return self._engine

    def init_schema(self) -> MetricsRecord:
        """
        Create the table and seed the row if they do not exist yet.

        Returns:
            The current record (zeros when freshly seeded)
        """
        with _wrap_errors("Failed to initialize the GitHub metrics table"):
            metadata.create_all(self.engine)
            with self.engine.begin() as conn:
                existing = conn.execute(
                    select(github_metrics).where(github_metrics.c.id == METRICS_ROW_ID)
                ).first()
                if existing is None:
                    conn.execute(
                        insert(github_metrics).values(id=METRICS_ROW_ID, commits=0, repos=0)
                    )
                    logger.info("Seeded github_metrics row")

        record = self.read_metrics()
        assert record is not None
        return record

    def read_metrics(self) -> Optional[MetricsRecord]:
        """
        Read the stored metrics.

        Returns:
            MetricsRecord, or None when no row exists
        """
        with _wrap_errors("Failed to fetch GitHub metrics from the database"):
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(github_metrics).order_by(github_metrics.c.id.asc()).limit(1)
                ).first()

        if row is None:
            return None
        return MetricsRecord(id=row.id, commits=row.commits, repos=row.repos)

    def write_metrics(self, commits: int, repos: int) -> MetricsRecord:
        """
        Overwrite the metrics row, inserting it if it is missing.

        Args:
            commits: Total commit count
            repos: Total repository count

        Returns:
            The stored record
        """
        with _wrap_errors("Failed to update GitHub metrics in the database"):
            with self.engine.begin() as conn:
                result = conn.execute(
                    update(github_metrics)
                    .where(github_metrics.c.id == METRICS_ROW_ID)
                    .values(commits=commits, repos=repos)
                )
                if result.rowcount == 0:
                    conn.execute(
                        insert(github_metrics).values(
                            id=METRICS_ROW_ID, commits=commits, repos=repos
                        )
                    )

        logger.info(f"Stored metrics: {commits} commits, {repos} repos")
        return MetricsRecord(id=METRICS_ROW_ID, commits=commits, repos=repos)
