from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.database import get_db
from storefront.core.deps import require_admin
from storefront.core.exceptions import WalletNotFoundError
from storefront.models import User, WalletType, WalletTransactionType, WalletTransactionStatus
from storefront.schemas.wallet import (
    AddBalanceRequest,
    AdjustBalanceRequest,
    CreateWalletRequest,
    DeductBalanceRequest,
    RefundBalanceRequest,
    ReleaseBalanceRequest,
    SettleRequest,
    UpdateWalletRequest,
    WalletStatusRequest,
    serialize_page,
    serialize_transaction,
    serialize_wallet,
)
from storefront.services.wallet_service import WalletService, LedgerResult

router = APIRouter(prefix="/api/admin/wallets", tags=["admin-wallets"])


def _ledger(result: LedgerResult) -> dict:
    return {
        "wallet": serialize_wallet(result.wallet),
        "transaction": serialize_transaction(result.transaction),
    }


@router.get("")
async def list_wallets(
    search: Optional[str] = None,
    wallet_type: Optional[WalletType] = None,
    page: int = 1,
    limit: int = 20,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await WalletService(db).get_wallet_list(
        search=search,
        wallet_type=wallet_type,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {"success": True, "data": serialize_page(result, serialize_wallet)}


@router.get("/stats")
async def wallet_stats(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await WalletService(db).get_wallet_stats()}


@router.get("/stats/enhanced")
async def enhanced_wallet_stats(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await WalletService(db).get_enhanced_wallet_stats()}


@router.get("/system/balance")
async def system_wallet(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    """Platform revenue from completed orders."""
    return {"success": True, "data": await WalletService(db).get_system_wallet()}


@router.get("/user/{user_id}")
async def get_wallet_by_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    wallet = await WalletService(db).get_wallet_by_user_id(user_id)
    if wallet is None:
        raise WalletNotFoundError()
    return {"success": True, "data": serialize_wallet(wallet)}


@router.post("", status_code=201)
async def create_wallet(
    body: CreateWalletRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    wallet = await WalletService(db).create_wallet(body.user_id, body.wallet_type, body.currency)
    return {"success": True, "data": serialize_wallet(wallet)}


@router.post("/settle")
async def release_and_disburse(
    body: SettleRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Release held funds on one wallet and pay them out to another, atomically."""
    result = await WalletService(db).release_and_disburse(
        body.source_wallet_id,
        body.target_wallet_id,
        body.amount,
        order_id=body.order_id,
        created_by_id=admin.id,
        transaction_type=body.transaction_type,
        notes=body.notes,
    )
    return {
        "success": True,
        "data": {"source": _ledger(result.source), "target": _ledger(result.target)},
    }


@router.get("/{wallet_id}")
async def get_wallet(
    wallet_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    wallet = await WalletService(db).get_wallet_by_id(wallet_id)
    return {"success": True, "data": serialize_wallet(wallet)}


@router.patch("/{wallet_id}")
async def update_wallet(
    wallet_id: str,
    body: UpdateWalletRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    wallet = await WalletService(db).update_wallet(
        wallet_id,
        wallet_type=body.wallet_type,
        is_active=body.is_active,
        currency=body.currency,
    )
    return {"success": True, "data": serialize_wallet(wallet)}


@router.patch("/{wallet_id}/status")
async def set_wallet_status(
    wallet_id: str,
    body: WalletStatusRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    wallet = await WalletService(db).update_wallet(wallet_id, is_active=body.is_active)
    return {"success": True, "data": serialize_wallet(wallet)}


@router.post("/{wallet_id}/add-balance")
async def add_balance(
    wallet_id: str,
    body: AddBalanceRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await WalletService(db).add_balance(
        wallet_id,
        body.amount,
        body.transaction_type,
        payment_method_id=body.payment_method_id,
        reference=body.reference,
        notes=body.notes,
        currency=body.currency,
        created_by_id=admin.id,
    )
    return {"success": True, "data": _ledger(result)}


@router.post("/{wallet_id}/deduct")
async def deduct_balance(
    wallet_id: str,
    body: DeductBalanceRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await WalletService(db).deduct_balance(
        wallet_id,
        body.amount,
        order_id=body.order_id,
        notes=body.notes,
        lock_as_pending=body.lock_as_pending,
        created_by_id=admin.id,
    )
    return {"success": True, "data": _ledger(result)}


@router.post("/{wallet_id}/release")
async def release_pending_balance(
    wallet_id: str,
    body: ReleaseBalanceRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await WalletService(db).release_pending_balance(
        wallet_id, body.amount, body.order_id, created_by_id=admin.id
    )
    return {"success": True, "data": _ledger(result)}


@router.post("/{wallet_id}/refund")
async def refund_balance(
    wallet_id: str,
    body: RefundBalanceRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await WalletService(db).refund_balance(
        wallet_id, body.amount, body.order_id, created_by_id=admin.id, notes=body.notes
    )
    return {"success": True, "data": _ledger(result)}


@router.post("/{wallet_id}/adjust")
async def adjust_balance(
    wallet_id: str,
    body: AdjustBalanceRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await WalletService(db).adjust_balance(
        wallet_id,
        body.amount,
        reference=body.reference,
        notes=body.notes,
        created_by_id=admin.id,
    )
    return {"success": True, "data": _ledger(result)}


@router.get("/{wallet_id}/transactions")
async def wallet_transactions(
    wallet_id: str,
    type: Optional[WalletTransactionType] = None,
    status: Optional[WalletTransactionStatus] = None,
    page: int = 1,
    limit: int = 20,
    sort_order: str = "desc",
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = WalletService(db)
    await service.get_wallet_by_id(wallet_id)
    result = await service.get_transaction_history(
        wallet_id, type=type, status=status, page=page, limit=limit, sort_order=sort_order
    )
    return {"success": True, "data": serialize_page(result, serialize_transaction)}
