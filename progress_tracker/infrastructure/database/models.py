"""
Modelos SQLAlchemy: camada de Infraestrutura.

Tabelas:
  - progress_bars  (barras manuais e baseadas em tempo; status derivado em cache)
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    String,
    Text,
    func,
)

from progress_tracker.infrastructure.database.session import Base


# ────────────────────────────────────────────────────────────────
# PROGRESS BARS
# ────────────────────────────────────────────────────────────────
class ProgressBarModel(Base):
    __tablename__ = "progress_bars"

    __table_args__ = (
        Index("idx_progress_bars_dates", "start_date", "target_date"),
    )

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    current_value = Column(Float, nullable=False, server_default="0")
    target_value = Column(Float, nullable=False, server_default="0")
    bar_type = Column(
        String(20),
        nullable=False,
        server_default="manual",
        index=True,
    )
    start_date = Column(DateTime(timezone=True), nullable=True)
    target_date = Column(DateTime(timezone=True), nullable=True)
    time_based_type = Column(String(20), nullable=True)   # "count-up", "count-down", "arrival-date"
    is_completed = Column(Boolean, nullable=False, default=False)
    is_overdue = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
