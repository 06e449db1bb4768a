"""
Optimization history storage.

Append-only: records are created once per successful run and never updated
or deleted. Reads are newest first.
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, DateTime, Integer, String, Text, create_engine, select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

REQUIRED_FIELDS = (
    'asin',
    'original_title',
    'original_bullets',
    'original_description',
    'optimized_title',
    'optimized_bullets',
    'optimized_description',
    'suggested_keywords',
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on load; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Base(DeclarativeBase):
    pass


class Optimization(Base):
    __tablename__ = "optimizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    asin: Mapped[str] = mapped_column(String(10), nullable=False, index=True)

    # Original content from Amazon (or placeholder data)
    original_title: Mapped[str] = mapped_column(Text, nullable=False)
    original_bullets: Mapped[list] = mapped_column(JSON, nullable=False)
    original_description: Mapped[str] = mapped_column(Text, nullable=False)

    # AI-optimized content
    optimized_title: Mapped[str] = mapped_column(Text, nullable=False)
    optimized_bullets: Mapped[list] = mapped_column(JSON, nullable=False)
    optimized_description: Mapped[str] = mapped_column(Text, nullable=False)
    suggested_keywords: Mapped[list] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def to_dict(self) -> dict:
        """JSON shape returned by the API (camelCase, ISO timestamps)."""
        return {
            'id': self.id,
            'asin': self.asin,
            'originalTitle': self.original_title,
            'originalBullets': list(self.original_bullets),
            'originalDescription': self.original_description,
            'optimizedTitle': self.optimized_title,
            'optimizedBullets': list(self.optimized_bullets),
            'optimizedDescription': self.optimized_description,
            'suggestedKeywords': list(self.suggested_keywords),
            'createdAt': _as_utc(self.created_at).isoformat(),
            'updatedAt': _as_utc(self.updated_at).isoformat(),
        }


class OptimizationStore:
    """Persistence gateway over a SQLAlchemy engine."""

    def __init__(self, engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        Base.metadata.create_all(engine)

    def create_optimization(self, record: dict) -> dict:
        """
        Append a new optimization record.

        Args:
            record: Snake-case fields from REQUIRED_FIELDS (no id/timestamps)

        Returns:
            The stored record, including id, createdAt and updatedAt
        """
        missing = [field for field in REQUIRED_FIELDS if field not in record]
        if missing:
            raise ValueError(f"Missing optimization fields: {', '.join(missing)}")

        now = _utcnow()
        row = Optimization(
            **{field: record[field] for field in REQUIRED_FIELDS},
            created_at=now,
            updated_at=now,
        )

        with self._session_factory() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return row.to_dict()

    def get_optimizations_by_asin(self, asin: str) -> List[dict]:
        """All records for an ASIN, newest first."""
        stmt = (
            select(Optimization)
            .where(Optimization.asin == asin)
            .order_by(Optimization.created_at.desc(), Optimization.id.desc())
        )
        with self._session_factory() as session:
            return [row.to_dict() for row in session.scalars(stmt)]

    def get_all_optimizations(self) -> List[dict]:
        """Every record, newest first."""
        stmt = select(Optimization).order_by(Optimization.created_at.desc(), Optimization.id.desc())
        with self._session_factory() as session:
            return [row.to_dict() for row in session.scalars(stmt)]


def create_store(database_url: str) -> OptimizationStore:
    """Build a store from a SQLAlchemy URL."""
    if database_url in ('sqlite://', 'sqlite:///:memory:'):
        # Share the single in-memory database across sessions
        engine = create_engine(
            database_url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url, pool_pre_ping=True)
    return OptimizationStore(engine)
