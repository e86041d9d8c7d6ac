import pytest
from datetime import timedelta
from decimal import Decimal
from storefront.models import Order, OrderStatus, WalletTransactionStatus, WalletTransactionType, WalletType
from storefront.models.base import utcnow


async def _wallets(service, make_user):
    alice = await make_user(username="alice", email="alice@example.com", discord_id="1001")
    bob = await make_user(username="bob", email="bob@example.com")
    carol = await make_user(username="carol", email="carol@example.com")
    a = await service.create_wallet(alice.id)
    b = await service.create_wallet(bob.id, WalletType.WORKER)
    c = await service.create_wallet(carol.id, WalletType.SUPPORT)
    await service.add_balance(a.id, 10)
    await service.add_balance(b.id, 30)
    await service.deduct_balance(b.id, 5, lock_as_pending=True)
    await service.add_balance(c.id, 20)
    return a, b, c


@pytest.mark.asyncio
async def test_wallet_list_pagination_and_sort(service, make_user):
    a, b, c = await _wallets(service, make_user)

    page = await service.get_wallet_list(limit=2, sort_by="balance", sort_order="desc")
    assert page["total"] == 3
    assert page["total_pages"] == 2
    assert [w.id for w in page["list"]] == [b.id, c.id]

    second = await service.get_wallet_list(page=2, limit=2, sort_by="balance", sort_order="desc")
    assert [w.id for w in second["list"]] == [a.id]


@pytest.mark.asyncio
async def test_wallet_list_filters(service, make_user):
    a, b, c = await _wallets(service, make_user)

    workers = await service.get_wallet_list(wallet_type="WORKER")
    assert [w.id for w in workers["list"]] == [b.id]

    by_name = await service.get_wallet_list(search="ali")
    assert [w.id for w in by_name["list"]] == [a.id]

    by_discord = await service.get_wallet_list(search="1001")
    assert by_discord["total"] == 1


@pytest.mark.asyncio
async def test_wallet_list_clamps_bounds(service, make_user):
    await _wallets(service, make_user)
    page = await service.get_wallet_list(page=0, limit=1000, sort_by="no_such_column")
    assert page["page"] == 1
    assert page["limit"] == 100
    assert len(page["list"]) == 3


@pytest.mark.asyncio
async def test_transaction_history(service, make_user):
    a, b, c = await _wallets(service, make_user)

    history = await service.get_transaction_history(b.id)
    assert history["total"] == 2
    assert history["list"][0].type == WalletTransactionType.PAYMENT

    oldest_first = await service.get_transaction_history(b.id, sort_order="asc")
    assert oldest_first["list"][0].type == WalletTransactionType.DEPOSIT

    pending = await service.get_transaction_history(b.id, status=WalletTransactionStatus.PENDING)
    assert pending["total"] == 1

    deposits = await service.get_transaction_history(b.id, type="DEPOSIT", limit=1)
    assert deposits["total"] == 1
    assert deposits["limit"] == 1


@pytest.mark.asyncio
async def test_wallet_stats(service, make_user):
    await _wallets(service, make_user)
    stats = await service.get_wallet_stats()

    assert stats["total_wallets"] == 3
    assert stats["customer_wallets"] == 1
    assert stats["worker_wallets"] == 1
    assert stats["support_wallets"] == 1
    assert stats["total_balance"] == Decimal("55")
    assert stats["total_pending_balance"] == Decimal("5")


@pytest.mark.asyncio
async def test_wallet_stats_empty(service):
    stats = await service.get_wallet_stats()
    assert stats["total_wallets"] == 0
    assert stats["total_balance"] == 0


@pytest.mark.asyncio
async def test_enhanced_wallet_stats(service, make_user):
    a, b, c = await _wallets(service, make_user)
    await service.update_wallet(c.id, is_active=False)

    stats = await service.get_enhanced_wallet_stats()
    assert stats["worker_balance"] == Decimal("25")
    assert stats["worker_pending_balance"] == Decimal("5")
    assert stats["customer_balance"] == Decimal("10")
    assert stats["active_wallets"] == 2
    assert stats["inactive_wallets"] == 1
    assert stats["recent_transactions"] == 4
    # completed rows only; the held payment is still pending
    assert stats["today_transaction_volume"] == Decimal("60")


@pytest.mark.asyncio
async def test_system_wallet(service, db):
    now = utcnow()
    db.add_all([
        Order(status=OrderStatus.COMPLETED, order_value=100, system_payout=10, completed_at=now),
        Order(status=OrderStatus.COMPLETED, order_value=50, system_payout=5, completed_at=now - timedelta(days=400)),
        Order(status=OrderStatus.PENDING, order_value=70, system_payout=7),
    ])
    await db.commit()

    system = await service.get_system_wallet()
    assert system["total_system_revenue"] == Decimal("15")
    assert system["system_balance"] == Decimal("15")
    assert system["total_system_payouts"] == 0
    assert system["this_month_revenue"] == Decimal("10")
