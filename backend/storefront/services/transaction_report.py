"""Cross-wallet transaction reporting for the admin panel. Read-only."""
import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select, func, or_, desc
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import TransactionNotFoundError
from storefront.core.money import to_decimal
from storefront.models import (
    User,
    Wallet,
    WalletTransaction,
    WalletTransactionStatus,
    WalletTransactionType,
)
from storefront.models.base import utcnow
from storefront.services.pagination import page_bounds, page_result
from storefront.services.wallet_service import coerce_transaction_type

logger = logging.getLogger(__name__)

MAX_VOLUME_DAYS = 365
EXPORT_ROW_LIMIT = 10000

DEPOSIT_TYPES = (WalletTransactionType.DEPOSIT, WalletTransactionType.WORKER_DEPOSIT)


@dataclass
class TransactionFilters:
    wallet_id: Optional[str] = None
    user_id: Optional[int] = None
    type: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None

    def conditions(self) -> list:
        conditions = []
        if self.wallet_id:
            conditions.append(WalletTransaction.wallet_id == self.wallet_id)
        if self.user_id:
            conditions.append(Wallet.user_id == self.user_id)
        if self.type:
            conditions.append(WalletTransaction.type == coerce_transaction_type(self.type))
        if self.status:
            conditions.append(WalletTransaction.status == WalletTransactionStatus(self.status))
        if self.start_date:
            conditions.append(WalletTransaction.created_at >= self.start_date)
        if self.end_date:
            conditions.append(WalletTransaction.created_at <= self.end_date)
        if self.search:
            conditions.append(or_(
                User.username.contains(self.search),
                User.email.contains(self.search),
                WalletTransaction.reference.contains(self.search),
            ))
        return conditions


def _joined(stmt):
    return (
        stmt.join(Wallet, WalletTransaction.wallet_id == Wallet.id)
        .join(User, Wallet.user_id == User.id)
    )


class TransactionReportService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_transactions(
        self,
        filters: Optional[TransactionFilters] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        """Page of ``(transaction, owner)`` pairs, newest first."""
        filters = filters or TransactionFilters()
        page, limit = page_bounds(page, limit)
        conditions = filters.conditions()

        stmt = _joined(select(WalletTransaction, User))
        count_stmt = _joined(select(func.count(WalletTransaction.id)).select_from(WalletTransaction))
        if conditions:
            stmt = stmt.where(*conditions)
            count_stmt = count_stmt.where(*conditions)

        rows = (await self.db.execute(
            stmt.order_by(desc(WalletTransaction.created_at), desc(WalletTransaction.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )).all()
        total = await self.db.scalar(count_stmt) or 0
        return page_result([tuple(row) for row in rows], total, page, limit)

    async def get_transaction(self, transaction_id: str):
        row = (await self.db.execute(
            _joined(select(WalletTransaction, User)).where(WalletTransaction.id == transaction_id)
        )).first()
        if row is None:
            raise TransactionNotFoundError()
        return tuple(row)

    async def get_stats(self) -> dict:
        total = await self.db.scalar(select(func.count(WalletTransaction.id))) or 0

        by_type = {}
        for tx_type, count, amount in (await self.db.execute(
            select(WalletTransaction.type, func.count(WalletTransaction.id), func.sum(WalletTransaction.amount))
            .group_by(WalletTransaction.type)
        )).all():
            by_type[tx_type.value] = {"count": count, "total_amount": to_decimal(amount)}

        by_status = {
            status.value: count
            for status, count in (await self.db.execute(
                select(WalletTransaction.status, func.count(WalletTransaction.id))
                .group_by(WalletTransaction.status)
            )).all()
        }

        now = utcnow()
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

        async def count_since(since: datetime) -> int:
            return await self.db.scalar(
                select(func.count(WalletTransaction.id)).where(WalletTransaction.created_at >= since)
            ) or 0

        deposit_volume = await self.db.scalar(
            select(func.sum(WalletTransaction.amount)).where(
                WalletTransaction.type.in_(DEPOSIT_TYPES),
                WalletTransaction.status == WalletTransactionStatus.COMPLETED,
            )
        )
        withdrawal_volume = await self.db.scalar(
            select(func.sum(WalletTransaction.amount)).where(
                WalletTransaction.type == WalletTransactionType.WITHDRAWAL,
                WalletTransaction.status == WalletTransactionStatus.COMPLETED,
            )
        )

        return {
            "total_transactions": total,
            "by_type": by_type,
            "by_status": by_status,
            "today_count": await count_since(today_start),
            "week_count": await count_since(now - timedelta(days=7)),
            "month_count": await count_since(now - timedelta(days=30)),
            "total_deposit_volume": to_decimal(deposit_volume),
            "total_withdrawal_volume": abs(to_decimal(withdrawal_volume)),
            "pending_count": by_status.get(WalletTransactionStatus.PENDING.value, 0),
        }

    async def get_volume(self, days: int = 30) -> list:
        """Daily completed volume, oldest day first, missing days zero-filled."""
        days = min(max(int(days), 1), MAX_VOLUME_DAYS)
        today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        start = today - timedelta(days=days - 1)

        series = OrderedDict()
        for offset in range(days):
            day = (start + timedelta(days=offset)).date().isoformat()
            series[day] = {"date": day, "deposits": to_decimal(0), "withdrawals": to_decimal(0), "count": 0}

        rows = (await self.db.execute(
            select(WalletTransaction.created_at, WalletTransaction.type, WalletTransaction.amount).where(
                WalletTransaction.created_at >= start,
                WalletTransaction.status == WalletTransactionStatus.COMPLETED,
            )
        )).all()
        for created_at, tx_type, amount in rows:
            bucket = series.get(created_at.date().isoformat())
            if bucket is None:
                continue
            bucket["count"] += 1
            if tx_type in DEPOSIT_TYPES:
                bucket["deposits"] += to_decimal(amount)
            elif tx_type is WalletTransactionType.WITHDRAWAL:
                bucket["withdrawals"] += abs(to_decimal(amount))
        return list(series.values())

    async def export_rows(self, filters: Optional[TransactionFilters] = None) -> list:
        filters = filters or TransactionFilters()
        conditions = filters.conditions()
        stmt = _joined(select(WalletTransaction, User))
        if conditions:
            stmt = stmt.where(*conditions)
        rows = (await self.db.execute(
            stmt.order_by(desc(WalletTransaction.created_at), desc(WalletTransaction.id)).limit(EXPORT_ROW_LIMIT)
        )).all()
        if len(rows) == EXPORT_ROW_LIMIT:
            logger.warning("Transaction export truncated at %d rows", EXPORT_ROW_LIMIT)

        return [
            {
                "id": tx.id,
                "created_at": tx.created_at.isoformat() if tx.created_at else None,
                "wallet_id": tx.wallet_id,
                "user_id": user.id,
                "username": user.username,
                "discord_id": user.discord_id,
                "type": tx.type.value,
                "status": tx.status.value,
                "amount": float(tx.amount),
                "balance_before": float(tx.balance_before),
                "balance_after": float(tx.balance_after),
                "currency": tx.currency,
                "order_id": tx.order_id,
                "reference": tx.reference,
                "notes": tx.notes,
            }
            for tx, user in rows
        ]
