"""
IT asset inventory model.

Assets are tracked per organization and may be attributed to a person by
email address (not necessarily a user account).
"""

import enum
from sqlalchemy import Column, Integer, String, Text, Date, Enum, ForeignKey, Index

from ticketdesk.models.base import Base, TimestampMixin, PrimaryKeyMixin


class AssetType(str, enum.Enum):
    COMPUTER = "COMPUTER"
    PHONE = "PHONE"
    PRINTER = "PRINTER"
    NETWORK = "NETWORK"
    OTHER = "OTHER"


class AssetStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    RETIRED = "RETIRED"


class Asset(Base, PrimaryKeyMixin, TimestampMixin):
    """Piece of equipment owned by an organization."""

    __tablename__ = "assets"
    __table_args__ = (
        Index("ix_assets_org_type", "org_id", "type"),
        Index("ix_assets_org_status", "org_id", "status"),
    )

    name = Column(String(200), nullable=False)
    type = Column(Enum(AssetType, name="assettype"), nullable=False)
    status = Column(Enum(AssetStatus, name="assetstatus"), nullable=False, default=AssetStatus.ACTIVE)
    serial_number = Column(String(100), nullable=True)
    brand = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    purchase_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    assigned_to_email = Column(String(255), nullable=True)
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Asset(id={self.id}, name={self.name}, type={self.type})>"
