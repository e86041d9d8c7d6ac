from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from storefront.models import User, Wallet, WalletTransaction, WalletType


class CamelModel(BaseModel):
    """Accepts both ``order_id`` and the bot's ``orderId``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateWalletRequest(CamelModel):
    user_id: int
    wallet_type: WalletType = WalletType.CUSTOMER
    currency: Optional[str] = None


class AddBalanceRequest(CamelModel):
    amount: Decimal
    transaction_type: str = "DEPOSIT"
    payment_method_id: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    currency: Optional[str] = None


class DeductBalanceRequest(CamelModel):
    amount: Decimal
    order_id: Optional[str] = None
    notes: Optional[str] = None
    lock_as_pending: bool = False


class ReleaseBalanceRequest(CamelModel):
    amount: Decimal
    order_id: Optional[str] = None


class RefundBalanceRequest(CamelModel):
    amount: Decimal
    order_id: Optional[str] = None
    notes: Optional[str] = None


class AdjustBalanceRequest(CamelModel):
    amount: Decimal
    reference: Optional[str] = None
    notes: Optional[str] = None


class SettleRequest(CamelModel):
    source_wallet_id: str
    target_wallet_id: str
    amount: Decimal
    order_id: Optional[str] = None
    transaction_type: str = "EARNING"
    notes: Optional[str] = None


class UpdateWalletRequest(CamelModel):
    wallet_type: Optional[WalletType] = None
    is_active: Optional[bool] = None
    currency: Optional[str] = None


class WalletStatusRequest(CamelModel):
    is_active: bool


class DiscordWalletRequest(CamelModel):
    username: str
    wallet_type: WalletType = WalletType.CUSTOMER
    display_name: Optional[str] = None


class DiscordAddBalanceRequest(CamelModel):
    customer_discord_id: str
    amount: Decimal
    transaction_type: Optional[str] = "DEPOSIT"
    customer_discord_username: Optional[str] = None
    customer_discord_display_name: Optional[str] = None
    payment_method_id: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_by_id: Optional[int] = None


def serialize_user(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "id": user.id,
        "fullname": user.fullname,
        "username": user.username,
        "email": user.email,
        "discord_id": user.discord_id,
        "discord_username": user.discord_username,
        "discord_display_name": user.discord_display_name,
        "discord_role": user.discord_role.value if user.discord_role else None,
    }


def serialize_wallet(wallet: Wallet, include_user: bool = True) -> dict:
    data = {
        "id": wallet.id,
        "user_id": wallet.user_id,
        "wallet_type": wallet.wallet_type.value,
        "balance": float(wallet.balance or 0),
        "pending_balance": float(wallet.pending_balance or 0),
        "deposit": float(wallet.deposit or 0),
        "currency": wallet.currency,
        "is_active": wallet.is_active,
        "created_at": wallet.created_at.isoformat() if wallet.created_at else None,
        "updated_at": wallet.updated_at.isoformat() if wallet.updated_at else None,
    }
    if include_user:
        data["user"] = serialize_user(wallet.user)
    return data


def serialize_transaction(tx: WalletTransaction) -> dict:
    return {
        "id": tx.id,
        "wallet_id": tx.wallet_id,
        "order_id": tx.order_id,
        "type": tx.type.value,
        "amount": float(tx.amount),
        "balance_before": float(tx.balance_before),
        "balance_after": float(tx.balance_after),
        "deposit_before": float(tx.deposit_before) if tx.deposit_before is not None else None,
        "deposit_after": float(tx.deposit_after) if tx.deposit_after is not None else None,
        "currency": tx.currency,
        "status": tx.status.value,
        "payment_method_id": tx.payment_method_id,
        "reference": tx.reference,
        "notes": tx.notes,
        "created_by_id": tx.created_by_id,
        "created_at": tx.created_at.isoformat() if tx.created_at else None,
    }


def serialize_page(page: dict, serializer) -> dict:
    return {**page, "list": [serializer(item) for item in page["list"]]}
