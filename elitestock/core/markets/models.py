"""
Asset model - Tradable instruments (read-only from the ledger core)
"""

from sqlalchemy import Column, String, Boolean, Numeric, Enum as SQLEnum
import enum
from elitestock.core.common.base_model import BaseModel


class AssetType(str, enum.Enum):
    STOCK = "stock"
    CRYPTO = "crypto"
    FOREX = "forex"


class Asset(BaseModel):
    """
    Asset model

    `price` is maintained by the external price feed; the core only reads it.
    """

    __tablename__ = "assets"

    symbol = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(SQLEnum(AssetType, name="asset_type"), nullable=False, index=True)
    price = Column(Numeric(24, 8), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
