"""
db/models/product.py

Product model: one of the operator's own products whose competitor prices
are tracked.
"""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Index, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.competitor_url import CompetitorURL


class Product(Base, TimestampMixin):
    """
    A tracked product.

    own_price is compared against scraped competitor prices to decide whether
    a price alert goes out to notification_email.
    """

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
        comment="Owning dashboard user",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    own_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="HUF",
        comment="ISO 4217 code",
    )

    notification_email: Mapped[str | None] = mapped_column(
        String(320),
        nullable=True,
        comment="Recipient of price alerts for this product",
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    competitor_urls: Mapped[list["CompetitorURL"]] = relationship(
        "CompetitorURL",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_products_user_id", "user_id"),)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"
