"""Internal API used by the Discord bot. API-key protected and rate limited."""
import logging
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.config import settings
from storefront.database import get_db
from storefront.core.deps import require_discord_bot, discord_rate_limit
from storefront.core.exceptions import ServiceError
from storefront.core.money import to_decimal
from storefront.models import WalletTransactionType, WalletTransactionStatus
from storefront.schemas.wallet import (
    DiscordAddBalanceRequest,
    DiscordWalletRequest,
    serialize_page,
    serialize_transaction,
    serialize_user,
    serialize_wallet,
)
from storefront.services.pagination import page_bounds, page_result
from storefront.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/discord/wallets",
    tags=["discord"],
    dependencies=[Depends(require_discord_bot), Depends(discord_rate_limit)],
)


@router.get("/discord/{discord_id}")
async def get_wallet_by_discord_id(discord_id: str, db: AsyncSession = Depends(get_db)):
    wallet = await WalletService(db).get_wallet_by_discord_id(discord_id)
    return {"success": True, "data": serialize_wallet(wallet) if wallet else None}


@router.post("/discord/{discord_id}")
async def get_or_create_wallet(
    discord_id: str,
    body: DiscordWalletRequest,
    db: AsyncSession = Depends(get_db),
):
    wallet = await WalletService(db).get_or_create_wallet_by_discord_id(
        discord_id, body.username, body.wallet_type, body.display_name
    )
    return {"success": True, "data": serialize_wallet(wallet)}


@router.post("/add-balance")
async def add_balance(body: DiscordAddBalanceRequest, db: AsyncSession = Depends(get_db)):
    logger.info("Discord add balance: %s %s for %s",
                body.amount, body.transaction_type, body.customer_discord_id)
    try:
        result = await WalletService(db).add_balance_by_discord(
            body.customer_discord_id,
            body.amount,
            body.transaction_type,
            customer_discord_username=body.customer_discord_username,
            customer_discord_display_name=body.customer_discord_display_name,
            payment_method_id=body.payment_method_id,
            reference=body.reference,
            notes=body.notes,
            created_by_id=body.created_by_id,
        )
    except ServiceError:
        raise
    except Exception:
        logger.exception("Discord add balance failed for %s", body.customer_discord_id)
        raise

    tx = result.transaction
    data = {
        "wallet": serialize_wallet(result.wallet),
        "transaction": serialize_transaction(tx),
    }
    # worker deposits report the deposit counter, everything else the balance
    if tx.type is WalletTransactionType.WORKER_DEPOSIT:
        data["previous_balance"] = float(tx.deposit_before)
        data["new_balance"] = float(tx.deposit_after)
        data["deposit_before"] = float(tx.deposit_before)
        data["deposit_after"] = float(tx.deposit_after)
    else:
        data["previous_balance"] = float(tx.balance_before)
        data["new_balance"] = float(tx.balance_after)
    return {"success": True, "data": data}


@router.get("/balance/{discord_id}")
async def get_balance(discord_id: str, db: AsyncSession = Depends(get_db)):
    wallet = await WalletService(db).get_wallet_by_discord_id(discord_id)
    if wallet is None:
        return {
            "success": True,
            "data": {
                "balance": 0.0,
                "pending_balance": 0.0,
                "deposit": 0.0,
                "currency": settings.DEFAULT_CURRENCY,
                "has_wallet": False,
            },
        }

    balance = to_decimal(wallet.balance)
    pending = to_decimal(wallet.pending_balance)
    deposit = to_decimal(wallet.deposit)
    available = balance - pending
    return {
        "success": True,
        "data": {
            "wallet_id": wallet.id,
            "balance": float(balance),
            "pending_balance": float(pending),
            "deposit": float(deposit),
            "available_balance": float(available),
            "eligibility_balance": float(deposit + available),
            "currency": wallet.currency,
            "wallet_type": wallet.wallet_type.value,
            "has_wallet": True,
            "user": serialize_user(wallet.user),
        },
    }


@router.get("/transactions/{discord_id}")
async def get_transactions(
    discord_id: str,
    type: Optional[WalletTransactionType] = None,
    status: Optional[WalletTransactionStatus] = None,
    page: int = 1,
    limit: int = 20,
    db: AsyncSession = Depends(get_db),
):
    service = WalletService(db)
    wallet = await service.get_wallet_by_discord_id(discord_id)
    if wallet is None:
        page, limit = page_bounds(page, limit)
        return {"success": True, "data": page_result([], 0, page, limit)}

    result = await service.get_transaction_history(
        wallet.id, type=type, status=status, page=page, limit=limit
    )
    return {"success": True, "data": serialize_page(result, serialize_transaction)}


@router.get("/check-balance/{discord_id}/{amount}")
async def check_balance(discord_id: str, amount: Decimal, db: AsyncSession = Depends(get_db)):
    wallet = await WalletService(db).get_wallet_by_discord_id(discord_id)
    if wallet is None:
        return {
            "success": True,
            "data": {
                "has_sufficient_balance": False,
                "current_balance": 0.0,
                "required_amount": float(amount),
            },
        }

    balance = to_decimal(wallet.balance)
    sufficient = balance >= amount
    return {
        "success": True,
        "data": {
            "has_sufficient_balance": sufficient,
            "current_balance": float(balance),
            "required_amount": float(amount),
            "shortfall": 0.0 if sufficient else float(amount - balance),
        },
    }
