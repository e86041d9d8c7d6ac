import pytest
from decimal import Decimal
from storefront.core.security import create_access_token
from storefront.models import Wallet


@pytest.mark.asyncio
async def test_requires_admin(client, make_user):
    r = await client.get("/api/admin/wallets")
    assert r.status_code in (401, 403)

    user = await make_user()
    r = await client.get(
        "/api/admin/wallets",
        headers={"Authorization": f"Bearer {create_access_token(user.id)}"},
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_invalid_token(client):
    r = await client.get("/api/admin/wallets", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_create_and_fetch_wallet(client, admin_headers, make_user):
    user = await make_user()
    r = await client.post("/api/admin/wallets", json={"userId": user.id, "walletType": "WORKER"},
                          headers=admin_headers)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["wallet_type"] == "WORKER"
    assert data["balance"] == 0.0
    assert data["user"]["username"] == user.username

    r = await client.get(f"/api/admin/wallets/{data['id']}", headers=admin_headers)
    assert r.json()["data"]["id"] == data["id"]

    r = await client.get(f"/api/admin/wallets/user/{user.id}", headers=admin_headers)
    assert r.json()["data"]["id"] == data["id"]

    r = await client.post("/api/admin/wallets", json={"user_id": user.id}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Bad Request", "message": "User already has a wallet"}


@pytest.mark.asyncio
async def test_unknown_wallet_is_404(client, admin_headers):
    r = await client.get("/api/admin/wallets/missing", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["error"] == "Not Found"
    assert r.json()["message"] == "Wallet not found"


@pytest.mark.asyncio
async def test_ledger_flow(client, admin_headers, admin_user, wallet, session_factory):
    base = f"/api/admin/wallets/{wallet.id}"

    r = await client.post(f"{base}/add-balance", json={"amount": 50, "reference": "cash"}, headers=admin_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["data"]["wallet"]["balance"] == 50.0
    assert body["data"]["transaction"]["created_by_id"] == admin_user.id

    r = await client.post(f"{base}/deduct", json={"amount": "20", "orderId": "o-1", "lockAsPending": True},
                          headers=admin_headers)
    data = r.json()["data"]
    assert data["wallet"]["balance"] == 30.0
    assert data["wallet"]["pending_balance"] == 20.0
    assert data["transaction"]["status"] == "PENDING"

    r = await client.post(f"{base}/release", json={"amount": 5, "order_id": "o-1"}, headers=admin_headers)
    assert r.json()["data"]["wallet"]["pending_balance"] == 15.0

    r = await client.post(f"{base}/refund", json={"amount": 15, "orderId": "o-1"}, headers=admin_headers)
    assert r.json()["data"]["wallet"]["balance"] == 45.0

    r = await client.post(f"{base}/adjust", json={"amount": -5, "notes": "typo"}, headers=admin_headers)
    assert r.json()["data"]["wallet"]["balance"] == 40.0

    r = await client.get(f"{base}/transactions?limit=2", headers=admin_headers)
    page = r.json()["data"]
    assert page["total"] == 5
    assert page["total_pages"] == 3
    assert page["list"][0]["type"] == "ADJUSTMENT"

    async with session_factory() as s:
        stored = await s.get(Wallet, wallet.id)
    assert stored.balance == Decimal("40")


@pytest.mark.asyncio
async def test_insufficient_balance_message(client, admin_headers, wallet):
    r = await client.post(f"/api/admin/wallets/{wallet.id}/deduct", json={"amount": 100}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Insufficient balance. Available: 0, Required: 100"


@pytest.mark.asyncio
async def test_negative_adjustment_message(client, admin_headers, wallet):
    r = await client.post(f"/api/admin/wallets/{wallet.id}/adjust", json={"amount": -1}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Adjustment would result in negative balance. Current: 0, Adjustment: -1"


@pytest.mark.asyncio
async def test_status_toggle_blocks_mutations(client, admin_headers, wallet):
    base = f"/api/admin/wallets/{wallet.id}"
    r = await client.patch(f"{base}/status", json={"isActive": False}, headers=admin_headers)
    assert r.json()["data"]["is_active"] is False

    r = await client.post(f"{base}/add-balance", json={"amount": 1}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Wallet is not active"

    r = await client.patch(base, json={"is_active": True, "wallet_type": "SUPPORT"}, headers=admin_headers)
    assert r.json()["data"]["wallet_type"] == "SUPPORT"
    assert r.json()["data"]["is_active"] is True


@pytest.mark.asyncio
async def test_settle(client, admin_headers, service, wallet, make_user):
    worker = await make_user()
    worker_wallet = await service.create_wallet(worker.id, "WORKER")
    await service.add_balance(wallet.id, 30)
    await service.deduct_balance(wallet.id, 30, lock_as_pending=True)

    r = await client.post("/api/admin/wallets/settle", json={
        "sourceWalletId": wallet.id,
        "targetWalletId": worker_wallet.id,
        "amount": 30,
        "orderId": "o-9",
    }, headers=admin_headers)
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["source"]["wallet"]["pending_balance"] == 0.0
    assert data["target"]["wallet"]["balance"] == 30.0
    assert data["target"]["transaction"]["type"] == "EARNING"


@pytest.mark.asyncio
async def test_list_and_stats(client, admin_headers, service, wallet):
    await service.add_balance(wallet.id, 12.5)

    r = await client.get("/api/admin/wallets?walletType=CUSTOMER", headers=admin_headers)
    assert r.status_code == 200

    r = await client.get("/api/admin/wallets?wallet_type=CUSTOMER&sort_by=balance", headers=admin_headers)
    assert r.json()["data"]["total"] == 1

    r = await client.get("/api/admin/wallets/stats", headers=admin_headers)
    stats = r.json()["data"]
    assert stats["total_wallets"] == 1
    assert stats["total_balance"] == 12.5

    r = await client.get("/api/admin/wallets/stats/enhanced", headers=admin_headers)
    assert r.json()["data"]["customer_balance"] == 12.5

    r = await client.get("/api/admin/wallets/system/balance", headers=admin_headers)
    assert r.json()["data"]["system_balance"] == 0


@pytest.mark.asyncio
async def test_invalid_amount(client, admin_headers, wallet):
    r = await client.post(f"/api/admin/wallets/{wallet.id}/add-balance", json={"amount": 0}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Amount must be greater than zero"
