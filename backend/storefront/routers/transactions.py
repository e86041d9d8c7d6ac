from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.database import get_db
from storefront.core.deps import require_admin
from storefront.models import User, WalletTransactionType, WalletTransactionStatus
from storefront.schemas.wallet import serialize_page, serialize_transaction, serialize_user
from storefront.services.transaction_report import TransactionFilters, TransactionReportService

router = APIRouter(prefix="/api/admin/transactions", tags=["admin-transactions"])


def _filters(
    wallet_id: Optional[str] = None,
    user_id: Optional[int] = None,
    type: Optional[WalletTransactionType] = None,
    status: Optional[WalletTransactionStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
) -> TransactionFilters:
    return TransactionFilters(
        wallet_id=wallet_id,
        user_id=user_id,
        type=type,
        status=status,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )


def _row(row) -> dict:
    tx, user = row
    return {**serialize_transaction(tx), "user": serialize_user(user)}


@router.get("")
async def list_transactions(
    page: int = 1,
    limit: int = 20,
    filters: TransactionFilters = Depends(_filters),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await TransactionReportService(db).list_transactions(filters, page, limit)
    return {"success": True, "data": serialize_page(result, _row)}


@router.get("/stats")
async def transaction_stats(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await TransactionReportService(db).get_stats()}


@router.get("/volume")
async def transaction_volume(
    days: int = 30,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return {"success": True, "data": await TransactionReportService(db).get_volume(days)}


@router.get("/export")
async def export_transactions(
    filters: TransactionFilters = Depends(_filters),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await TransactionReportService(db).export_rows(filters)
    return {"success": True, "data": rows}


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    row = await TransactionReportService(db).get_transaction(transaction_id)
    return {"success": True, "data": _row(row)}
