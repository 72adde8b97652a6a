"""
db/models/competitor_url.py

Competitor product page tracked for one product, with scrape health fields.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.product import Product


class CompetitorURL(Base, TimestampMixin):
    __tablename__ = "competitor_urls"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    competitor_name: Mapped[str] = mapped_column(String(255), nullable=False)

    url: Mapped[str] = mapped_column(Text, nullable=False)

    scrape_selector: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Optional CSS selector override for the price element",
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    last_scraped_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    last_status: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        comment="success, failed, rate_limited",
    )

    consecutive_failures: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    product: Mapped["Product"] = relationship("Product", back_populates="competitor_urls")

    __table_args__ = (
        Index("ix_competitor_urls_product_id", "product_id"),
        Index("ix_competitor_urls_is_active", "is_active"),
    )
