"""Wallet ledger.

Every counter mutation (``balance``, ``pending_balance``, ``deposit``) runs in
one database transaction that locks the wallet row, checks preconditions,
writes the new counters and appends exactly one ``WalletTransaction``.
Precondition failures raise before anything is written; any exception rolls
the whole transaction back.
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import select, func, or_, asc, desc, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.core.exceptions import (
    BadRequestError,
    InsufficientBalanceError,
    InsufficientPendingBalanceError,
    InvalidAmountError,
    NegativeBalanceError,
    UserNotFoundError,
    WalletAlreadyExistsError,
    WalletInactiveError,
    WalletNotFoundError,
)
from storefront.core.money import ZERO, to_decimal, require_positive, format_amount
from storefront.models import (
    DiscordRole,
    LedgerCounter,
    Order,
    OrderStatus,
    User,
    Wallet,
    WalletTransaction,
    WalletTransactionStatus,
    WalletTransactionType,
    WalletType,
)
from storefront.models.base import utcnow
from storefront.services.identity import get_user_by_discord_id, get_or_create_discord_user
from storefront.services.pagination import page_bounds, page_result

logger = logging.getLogger(__name__)

WALLET_SORT_FIELDS = {
    "created_at": Wallet.created_at,
    "createdAt": Wallet.created_at,
    "updated_at": Wallet.updated_at,
    "updatedAt": Wallet.updated_at,
    "balance": Wallet.balance,
    "pending_balance": Wallet.pending_balance,
    "pendingBalance": Wallet.pending_balance,
    "deposit": Wallet.deposit,
}

# The Discord bot labels plain top-ups "BALANCE".
DISCORD_BALANCE_ALIAS = "BALANCE"


@dataclass
class LedgerResult:
    wallet: Wallet
    transaction: WalletTransaction


@dataclass
class SettlementResult:
    source: LedgerResult
    target: LedgerResult


def coerce_transaction_type(value: Union[str, WalletTransactionType, None]) -> WalletTransactionType:
    if value is None or value == "":
        return WalletTransactionType.DEPOSIT
    if isinstance(value, WalletTransactionType):
        return value
    try:
        return WalletTransactionType(str(value).upper())
    except ValueError:
        raise BadRequestError(f"Unknown transaction type: {value}")


class WalletService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Lookup / creation
    # ------------------------------------------------------------------

    async def create_wallet(
        self,
        user_id: int,
        wallet_type: Union[str, WalletType] = WalletType.CUSTOMER,
        currency: Optional[str] = None,
    ) -> Wallet:
        if await self.get_wallet_by_user_id(user_id) is not None:
            raise WalletAlreadyExistsError()
        if await self.db.get(User, user_id) is None:
            raise UserNotFoundError()

        wallet = Wallet(
            user_id=user_id,
            wallet_type=WalletType(wallet_type),
            currency=currency or settings.DEFAULT_CURRENCY,
            balance=ZERO,
            pending_balance=ZERO,
            deposit=ZERO,
            is_active=True,
        )
        self.db.add(wallet)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise WalletAlreadyExistsError()

        logger.info("Created %s wallet %s for user %s", wallet.wallet_type.value, wallet.id, user_id)
        return await self.get_wallet_by_id(wallet.id)

    async def get_or_create_wallet(
        self,
        user_id: int,
        wallet_type: Union[str, WalletType] = WalletType.CUSTOMER,
    ) -> Wallet:
        wallet = await self.get_wallet_by_user_id(user_id)
        if wallet is not None:
            return wallet
        try:
            return await self.create_wallet(user_id, wallet_type)
        except WalletAlreadyExistsError:
            # lost the insert race, the other request's wallet is the one
            wallet = await self.get_wallet_by_user_id(user_id)
            if wallet is None:
                raise
            return wallet

    async def get_wallet_by_id(self, wallet_id: str) -> Wallet:
        wallet = await self.db.scalar(self._wallet_query().where(Wallet.id == wallet_id))
        if wallet is None:
            raise WalletNotFoundError()
        return wallet

    async def get_wallet_by_user_id(self, user_id: int) -> Optional[Wallet]:
        return await self.db.scalar(self._wallet_query().where(Wallet.user_id == user_id))

    async def get_wallet_by_discord_id(self, discord_id: str) -> Optional[Wallet]:
        user = await get_user_by_discord_id(self.db, discord_id)
        if user is None:
            logger.warning("No user found with Discord id %s", discord_id)
            return None
        wallet = await self.get_wallet_by_user_id(user.id)
        if wallet is None:
            logger.warning("No wallet found for user %s", user.id)
        return wallet

    async def get_or_create_wallet_by_discord_id(
        self,
        discord_id: str,
        username: str,
        wallet_type: Union[str, WalletType] = WalletType.CUSTOMER,
        display_name: Optional[str] = None,
    ) -> Wallet:
        user = await get_or_create_discord_user(self.db, discord_id, username, display_name)
        await self.db.commit()
        return await self.get_or_create_wallet(user.id, wallet_type)

    async def update_wallet(
        self,
        wallet_id: str,
        *,
        wallet_type: Union[str, WalletType, None] = None,
        is_active: Optional[bool] = None,
        currency: Optional[str] = None,
    ) -> Wallet:
        async with self._atomic():
            wallet = await self._lock_wallet(wallet_id)
            if wallet_type is not None:
                wallet.wallet_type = WalletType(wallet_type)
            if is_active is not None:
                wallet.is_active = is_active
            if currency is not None:
                wallet.currency = currency
        logger.info("Updated wallet %s (type=%s, active=%s, currency=%s)",
                    wallet_id, wallet.wallet_type.value, wallet.is_active, wallet.currency)
        return wallet

    # ------------------------------------------------------------------
    # Ledger mutations
    # ------------------------------------------------------------------

    async def add_balance(
        self,
        wallet_id: str,
        amount,
        transaction_type: Union[str, WalletTransactionType] = WalletTransactionType.DEPOSIT,
        *,
        payment_method_id: Optional[str] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        currency: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> LedgerResult:
        """Credit ``balance``, or ``deposit`` for WORKER_DEPOSIT."""
        amount = require_positive(amount)
        transaction_type = coerce_transaction_type(transaction_type)

        async with self._atomic():
            wallet = await self._lock_wallet(wallet_id)
            self._ensure_active(wallet)
            tx = self._credit(
                wallet,
                amount,
                transaction_type,
                payment_method_id=payment_method_id,
                reference=reference,
                notes=notes,
                currency=currency,
                created_by_id=created_by_id,
            )

        self._log_credit(wallet, tx)
        return LedgerResult(wallet=wallet, transaction=tx)

    async def add_balance_by_discord(
        self,
        customer_discord_id: str,
        amount,
        transaction_type: Union[str, WalletTransactionType, None] = WalletTransactionType.DEPOSIT,
        *,
        customer_discord_username: Optional[str] = None,
        customer_discord_display_name: Optional[str] = None,
        payment_method_id: Optional[str] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> LedgerResult:
        """Top up a Discord user's wallet, creating the user and wallet if needed.

        Worker deposits land on a WORKER wallet and promote the user's Discord
        role to worker; everything else lands on a CUSTOMER wallet.
        """
        amount = require_positive(amount)
        if isinstance(transaction_type, str) and transaction_type.upper() == DISCORD_BALANCE_ALIAS:
            transaction_type = WalletTransactionType.DEPOSIT
        transaction_type = coerce_transaction_type(transaction_type)
        is_worker_deposit = transaction_type is WalletTransactionType.WORKER_DEPOSIT
        wallet_type = WalletType.WORKER if is_worker_deposit else WalletType.CUSTOMER

        wallet = await self.get_or_create_wallet_by_discord_id(
            customer_discord_id,
            customer_discord_username or customer_discord_id,
            wallet_type,
            customer_discord_display_name,
        )

        async with self._atomic():
            wallet = await self._lock_wallet(wallet.id)
            # an inactive wallet keeps its type and owner role
            self._ensure_active(wallet)
            if wallet.wallet_type != wallet_type:
                logger.info("Wallet %s type: %s -> %s", wallet.id, wallet.wallet_type.value, wallet_type.value)
                wallet.wallet_type = wallet_type
            if is_worker_deposit and wallet.user is not None and wallet.user.discord_role != DiscordRole.worker:
                logger.info("User %s Discord role -> worker", wallet.user_id)
                wallet.user.discord_role = DiscordRole.worker
            tx = self._credit(
                wallet,
                amount,
                transaction_type,
                payment_method_id=payment_method_id,
                reference=reference,
                notes=notes,
                created_by_id=created_by_id,
            )

        self._log_credit(wallet, tx)
        return LedgerResult(wallet=wallet, transaction=tx)

    async def deduct_balance(
        self,
        wallet_id: str,
        amount,
        *,
        order_id: Optional[str] = None,
        notes: Optional[str] = None,
        lock_as_pending: bool = False,
        created_by_id: Optional[int] = None,
    ) -> LedgerResult:
        """Take ``amount`` out of spendable balance.

        With ``lock_as_pending`` the funds are held in ``pending_balance`` and
        the PAYMENT row stays PENDING until released or refunded.
        """
        amount = require_positive(amount)

        async with self._atomic():
            wallet = await self._lock_wallet(wallet_id)
            self._ensure_active(wallet)
            balance_before = to_decimal(wallet.balance)
            if balance_before < amount:
                raise InsufficientBalanceError(format_amount(balance_before), format_amount(amount))

            wallet.balance = balance_before - amount
            if lock_as_pending:
                wallet.pending_balance = to_decimal(wallet.pending_balance) + amount
            tx = self._record(
                wallet,
                WalletTransactionType.PAYMENT,
                -amount,
                balance_before,
                status=WalletTransactionStatus.PENDING if lock_as_pending else WalletTransactionStatus.COMPLETED,
                order_id=order_id,
                notes=notes,
                created_by_id=created_by_id,
            )

        logger.info("Deducted %s from wallet %s%s. Balance: %s -> %s",
                    format_amount(amount), wallet_id, " (held as pending)" if lock_as_pending else "",
                    format_amount(balance_before), format_amount(wallet.balance))
        return LedgerResult(wallet=wallet, transaction=tx)

    async def release_pending_balance(
        self,
        wallet_id: str,
        amount,
        order_id: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> LedgerResult:
        """Finalize held funds: ``pending_balance`` drops, ``balance`` is untouched."""
        amount = require_positive(amount)

        async with self._atomic():
            wallet = await self._lock_wallet(wallet_id)
            self._ensure_active(wallet)
            tx = self._release(wallet, amount, order_id, created_by_id)

        logger.info("Released %s pending balance from wallet %s", format_amount(amount), wallet_id)
        return LedgerResult(wallet=wallet, transaction=tx)

    async def refund_balance(
        self,
        wallet_id: str,
        amount,
        order_id: Optional[str] = None,
        created_by_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> LedgerResult:
        amount = require_positive(amount)

        async with self._atomic():
            wallet = await self._lock_wallet(wallet_id)
            self._ensure_active(wallet)
            balance_before = to_decimal(wallet.balance)
            wallet.balance = balance_before + amount
            tx = self._record(
                wallet,
                WalletTransactionType.REFUND,
                amount,
                balance_before,
                order_id=order_id,
                notes=notes or f"Refund for order {order_id}",
                created_by_id=created_by_id,
            )

        logger.info("Refunded %s to wallet %s. Balance: %s -> %s",
                    format_amount(amount), wallet_id, format_amount(balance_before), format_amount(wallet.balance))
        return LedgerResult(wallet=wallet, transaction=tx)

    async def adjust_balance(
        self,
        wallet_id: str,
        amount,
        *,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> LedgerResult:
        """Administrative correction; ``amount`` may be negative."""
        amount = to_decimal(amount)
        if not amount.is_finite() or amount == 0:
            raise InvalidAmountError("Adjustment amount must be a non-zero number")

        async with self._atomic():
            wallet = await self._lock_wallet(wallet_id)
            self._ensure_active(wallet)
            balance_before = to_decimal(wallet.balance)
            balance_after = balance_before + amount
            if balance_after < 0:
                raise NegativeBalanceError(format_amount(balance_before), format_amount(amount))

            wallet.balance = balance_after
            tx = self._record(
                wallet,
                WalletTransactionType.ADJUSTMENT,
                amount,
                balance_before,
                reference=reference,
                notes=notes or "Manual balance adjustment",
                created_by_id=created_by_id,
            )

        logger.info("Adjusted wallet %s by %s. Balance: %s -> %s",
                    wallet_id, format_amount(amount), format_amount(balance_before), format_amount(balance_after))
        return LedgerResult(wallet=wallet, transaction=tx)

    async def release_and_disburse(
        self,
        source_wallet_id: str,
        target_wallet_id: str,
        amount,
        order_id: Optional[str] = None,
        created_by_id: Optional[int] = None,
        transaction_type: Union[str, WalletTransactionType] = WalletTransactionType.EARNING,
        notes: Optional[str] = None,
    ) -> SettlementResult:
        """Release funds held on the source wallet and credit them to the target.

        Both wallets and both audit rows change in one database transaction.
        """
        amount = require_positive(amount)
        transaction_type = coerce_transaction_type(transaction_type)
        if source_wallet_id == target_wallet_id:
            raise BadRequestError("Source and target wallets must be different")

        async with self._atomic():
            # fixed lock order so two settlements over the same pair cannot deadlock
            locked = {}
            for wallet_id in sorted((source_wallet_id, target_wallet_id)):
                locked[wallet_id] = await self._lock_wallet(wallet_id)
            source = locked[source_wallet_id]
            target = locked[target_wallet_id]
            self._ensure_active(source)
            self._ensure_active(target)

            release_tx = self._release(source, amount, order_id, created_by_id)
            credit_tx = self._credit(
                target,
                amount,
                transaction_type,
                order_id=order_id,
                notes=notes or f"Payout for order {order_id}",
                created_by_id=created_by_id,
            )

        logger.info("Settled %s from wallet %s to wallet %s for order %s",
                    format_amount(amount), source_wallet_id, target_wallet_id, order_id)
        return SettlementResult(
            source=LedgerResult(wallet=source, transaction=release_tx),
            target=LedgerResult(wallet=target, transaction=credit_tx),
        )

    # ------------------------------------------------------------------
    # Balance checks
    # ------------------------------------------------------------------

    async def has_sufficient_balance(self, user_id: int, amount) -> bool:
        wallet = await self.get_wallet_by_user_id(user_id)
        if wallet is None:
            return False
        return to_decimal(wallet.balance) >= to_decimal(amount)

    async def get_available_balance(self, user_id: int) -> Decimal:
        # held funds already left ``balance`` when they were locked
        wallet = await self.get_wallet_by_user_id(user_id)
        if wallet is None:
            return ZERO
        return to_decimal(wallet.balance)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def get_wallet_list(
        self,
        *,
        search: Optional[str] = None,
        wallet_type: Union[str, WalletType, None] = None,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> dict:
        page, limit = page_bounds(page, limit)
        conditions = []
        if wallet_type:
            conditions.append(Wallet.wallet_type == WalletType(wallet_type))
        if search:
            conditions.append(or_(
                User.fullname.contains(search),
                User.username.contains(search),
                User.email.contains(search),
                User.discord_id.contains(search),
            ))

        sort_column = WALLET_SORT_FIELDS.get(sort_by, Wallet.created_at)
        direction = asc if sort_order == "asc" else desc

        stmt = self._wallet_query().join(User, Wallet.user_id == User.id)
        count_stmt = select(func.count(Wallet.id)).select_from(Wallet).join(User, Wallet.user_id == User.id)
        if conditions:
            stmt = stmt.where(*conditions)
            count_stmt = count_stmt.where(*conditions)

        wallets = list(await self.db.scalars(
            stmt.order_by(direction(sort_column), Wallet.id).offset((page - 1) * limit).limit(limit)
        ))
        total = await self.db.scalar(count_stmt) or 0
        return page_result(wallets, total, page, limit)

    async def get_transaction_history(
        self,
        wallet_id: str,
        *,
        type: Union[str, WalletTransactionType, None] = None,
        status: Union[str, WalletTransactionStatus, None] = None,
        page: int = 1,
        limit: int = 20,
        sort_order: str = "desc",
    ) -> dict:
        page, limit = page_bounds(page, limit)
        conditions = [WalletTransaction.wallet_id == wallet_id]
        if type:
            conditions.append(WalletTransaction.type == coerce_transaction_type(type))
        if status:
            conditions.append(WalletTransaction.status == WalletTransactionStatus(status))

        direction = asc if sort_order == "asc" else desc
        transactions = list(await self.db.scalars(
            select(WalletTransaction)
            .where(*conditions)
            .order_by(direction(WalletTransaction.created_at), direction(WalletTransaction.id))
            .offset((page - 1) * limit)
            .limit(limit)
        ))
        total = await self.db.scalar(
            select(func.count(WalletTransaction.id)).where(*conditions)
        ) or 0
        return page_result(transactions, total, page, limit)

    async def get_wallet_stats(self) -> dict:
        counts = dict((await self.db.execute(
            select(Wallet.wallet_type, func.count(Wallet.id)).group_by(Wallet.wallet_type)
        )).all())
        total_balance, total_pending = (await self.db.execute(
            select(func.sum(Wallet.balance), func.sum(Wallet.pending_balance))
        )).one()
        return {
            "total_wallets": sum(counts.values()),
            "customer_wallets": counts.get(WalletType.CUSTOMER, 0),
            "worker_wallets": counts.get(WalletType.WORKER, 0),
            "support_wallets": counts.get(WalletType.SUPPORT, 0),
            "total_balance": to_decimal(total_balance),
            "total_pending_balance": to_decimal(total_pending),
        }

    async def get_enhanced_wallet_stats(self) -> dict:
        stats = await self.get_wallet_stats()

        per_type = {
            wallet_type: (balance, pending)
            for wallet_type, balance, pending in (await self.db.execute(
                select(Wallet.wallet_type, func.sum(Wallet.balance), func.sum(Wallet.pending_balance))
                .group_by(Wallet.wallet_type)
            )).all()
        }
        for wallet_type in WalletType:
            balance, pending = per_type.get(wallet_type, (None, None))
            prefix = wallet_type.value.lower()
            stats[f"{prefix}_balance"] = to_decimal(balance)
            stats[f"{prefix}_pending_balance"] = to_decimal(pending)

        active = dict((await self.db.execute(
            select(Wallet.is_active, func.count(Wallet.id)).group_by(Wallet.is_active)
        )).all())
        stats["active_wallets"] = active.get(True, 0)
        stats["inactive_wallets"] = active.get(False, 0)

        now = utcnow()
        stats["recent_transactions"] = await self.db.scalar(
            select(func.count(WalletTransaction.id)).where(WalletTransaction.created_at >= now - timedelta(days=7))
        ) or 0
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        stats["today_transaction_volume"] = to_decimal(await self.db.scalar(
            select(func.sum(WalletTransaction.amount)).where(
                WalletTransaction.created_at >= today_start,
                WalletTransaction.status == WalletTransactionStatus.COMPLETED,
            )
        ))
        return stats

    async def get_system_wallet(self) -> dict:
        """Platform revenue, taken from the system payout of completed orders."""
        total_revenue = to_decimal(await self.db.scalar(
            select(func.sum(Order.system_payout)).where(Order.status == OrderStatus.COMPLETED)
        ))
        month_start = utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        month_revenue = to_decimal(await self.db.scalar(
            select(func.sum(Order.system_payout)).where(
                Order.status == OrderStatus.COMPLETED,
                Order.completed_at >= month_start,
            )
        ))
        total_payouts = ZERO
        return {
            "system_balance": total_revenue - total_payouts,
            "total_system_revenue": total_revenue,
            "total_system_payouts": total_payouts,
            "this_month_revenue": month_revenue,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _wallet_query():
        return select(Wallet).execution_options(populate_existing=True)

    def _is_sqlite(self) -> bool:
        return self.db.get_bind().dialect.name == "sqlite"

    @asynccontextmanager
    async def _atomic(self):
        try:
            if self._is_sqlite():
                # SQLite ignores FOR UPDATE; take the database write lock before the first read
                await self.db.execute(text("BEGIN IMMEDIATE"))
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def _lock_wallet(self, wallet_id: str) -> Wallet:
        # row lock on PostgreSQL, already covered by BEGIN IMMEDIATE on SQLite
        wallet = await self.db.scalar(
            self._wallet_query().where(Wallet.id == wallet_id).with_for_update()
        )
        if wallet is None:
            raise WalletNotFoundError()
        return wallet

    @staticmethod
    def _ensure_active(wallet: Wallet) -> None:
        if not wallet.is_active:
            raise WalletInactiveError()

    def _credit(
        self,
        wallet: Wallet,
        amount: Decimal,
        transaction_type: WalletTransactionType,
        currency: Optional[str] = None,
        **meta,
    ) -> WalletTransaction:
        counter = LedgerCounter.for_transaction_type(transaction_type)
        balance_before = to_decimal(wallet.balance)
        deposit_before = to_decimal(wallet.deposit)

        if counter is LedgerCounter.DEPOSIT:
            wallet.deposit = deposit_before + amount
        else:
            wallet.balance = balance_before + amount

        tx = self._record(wallet, transaction_type, amount, balance_before, currency=currency, **meta)
        if counter is LedgerCounter.DEPOSIT:
            tx.deposit_before = deposit_before
            tx.deposit_after = wallet.deposit
        return tx

    def _release(
        self,
        wallet: Wallet,
        amount: Decimal,
        order_id: Optional[str],
        created_by_id: Optional[int],
    ) -> WalletTransaction:
        pending = to_decimal(wallet.pending_balance)
        if pending < amount:
            raise InsufficientPendingBalanceError(format_amount(pending), format_amount(amount))
        wallet.pending_balance = pending - amount
        return self._record(
            wallet,
            WalletTransactionType.RELEASE,
            amount,
            to_decimal(wallet.balance),
            order_id=order_id,
            notes=f"Released pending balance for order {order_id}",
            created_by_id=created_by_id,
        )

    def _record(
        self,
        wallet: Wallet,
        transaction_type: WalletTransactionType,
        amount: Decimal,
        balance_before: Decimal,
        *,
        status: WalletTransactionStatus = WalletTransactionStatus.COMPLETED,
        currency: Optional[str] = None,
        order_id: Optional[str] = None,
        payment_method_id: Optional[str] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> WalletTransaction:
        tx = WalletTransaction(
            wallet_id=wallet.id,
            type=transaction_type,
            amount=amount,
            balance_before=balance_before,
            balance_after=to_decimal(wallet.balance),
            currency=currency or wallet.currency,
            status=status,
            order_id=order_id,
            payment_method_id=payment_method_id,
            reference=reference,
            notes=notes,
            created_by_id=created_by_id or settings.SYSTEM_USER_ID,
        )
        self.db.add(tx)
        return tx

    @staticmethod
    def _log_credit(wallet: Wallet, tx: WalletTransaction) -> None:
        if tx.deposit_after is not None:
            logger.info("Added %s to worker deposit %s. Deposit: %s -> %s",
                        format_amount(tx.amount), wallet.id,
                        format_amount(tx.deposit_before), format_amount(tx.deposit_after))
        else:
            logger.info("Added %s to wallet %s. Balance: %s -> %s",
                        format_amount(tx.amount), wallet.id,
                        format_amount(tx.balance_before), format_amount(tx.balance_after))
