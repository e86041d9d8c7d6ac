from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, Enum, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from storefront.database import Base
from storefront.models.base import new_id, utcnow

class WalletType(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    WORKER = "WORKER"
    SUPPORT = "SUPPORT"

class WalletTransactionType(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    PAYMENT = "PAYMENT"
    REFUND = "REFUND"
    EARNING = "EARNING"
    COMMISSION = "COMMISSION"
    SYSTEM_FEE = "SYSTEM_FEE"
    ADJUSTMENT = "ADJUSTMENT"
    RELEASE = "RELEASE"
    WORKER_DEPOSIT = "WORKER_DEPOSIT"

class WalletTransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REVERSED = "REVERSED"

class LedgerCounter(str, enum.Enum):
    """Which wallet counter an addition lands on."""

    BALANCE = "balance"
    DEPOSIT = "deposit"

    @classmethod
    def for_transaction_type(cls, transaction_type: WalletTransactionType) -> "LedgerCounter":
        if transaction_type is WalletTransactionType.WORKER_DEPOSIT:
            return cls.DEPOSIT
        return cls.BALANCE

class Wallet(Base):
    __tablename__ = "wallets"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)
    wallet_type = Column(Enum(WalletType), nullable=False, default=WalletType.CUSTOMER, index=True)
    balance = Column(Numeric(precision=18, scale=8), nullable=False, default=0)
    pending_balance = Column(Numeric(precision=18, scale=8), nullable=False, default=0)
    deposit = Column(Numeric(precision=18, scale=8), nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="USD")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now())

    user = relationship("User", back_populates="wallet", lazy="selectin")
    transactions = relationship("WalletTransaction", back_populates="wallet")

class WalletTransaction(Base):
    """Append-only audit row; one per counter mutation."""

    __tablename__ = "wallet_transactions"
    __table_args__ = (
        Index("ix_wallet_transactions_wallet_created", "wallet_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    wallet_id = Column(String(36), ForeignKey("wallets.id"), nullable=False, index=True)
    # correlation only, orders live in the ticketing module
    order_id = Column(String(36), nullable=True, index=True)
    type = Column(Enum(WalletTransactionType), nullable=False, index=True)
    amount = Column(Numeric(precision=18, scale=8), nullable=False)
    balance_before = Column(Numeric(precision=18, scale=8), nullable=False)
    balance_after = Column(Numeric(precision=18, scale=8), nullable=False)
    deposit_before = Column(Numeric(precision=18, scale=8), nullable=True)
    deposit_after = Column(Numeric(precision=18, scale=8), nullable=True)
    currency = Column(String(10), nullable=False, default="USD")
    status = Column(Enum(WalletTransactionStatus), nullable=False, default=WalletTransactionStatus.COMPLETED, index=True)
    payment_method_id = Column(String(64), nullable=True)
    reference = Column(String(191), nullable=True)
    notes = Column(Text, nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)

    wallet = relationship("Wallet", back_populates="transactions")
