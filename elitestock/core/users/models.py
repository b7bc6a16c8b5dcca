"""
User model
"""

from decimal import Decimal
from sqlalchemy import Column, String, Boolean, Numeric, CheckConstraint, Enum as SQLEnum
import enum
from elitestock.core.common.base_model import BaseModel


class KycStatus(str, enum.Enum):
    """KYC verification status"""
    UNVERIFIED = "unverified"
    PENDING = "pending"
    VERIFIED = "verified"


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """
    User model

    `balance` is the user's single spendable balance. It is mutated ONLY by
    elitestock.services.ledger.adjust_balance(); feature code must never
    assign it directly.
    """

    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    balance = Column(Numeric(24, 8), nullable=False, default=Decimal("0"))
    kyc_status = Column(SQLEnum(KycStatus, name="kyc_status"), nullable=False, default=KycStatus.UNVERIFIED)
    role = Column(SQLEnum(UserRole, name="user_role"), nullable=False, default=UserRole.USER)
    suspended = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint('balance >= 0', name='check_users_balance_non_negative'),
    )
