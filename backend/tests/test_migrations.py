from pathlib import Path
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from storefront.config import settings

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def test_upgrade_seeds_system_user(tmp_path, monkeypatch):
    db_path = tmp_path / "migrated.db"
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    command.upgrade(cfg, "head")

    engine = create_engine(f"sqlite:///{db_path}")
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")
        row = conn.execute(text("SELECT id, username, role FROM users")).one()
        assert row.id == settings.SYSTEM_USER_ID
        assert row.username == "system"
        assert row.role == "system"

        # a posting with no acting user must satisfy the created_by_id foreign key
        conn.execute(text(
            "INSERT INTO wallets (id, user_id, wallet_type) VALUES ('w-1', :uid, 'CUSTOMER')"
        ), {"uid": settings.SYSTEM_USER_ID})
        conn.execute(text(
            "INSERT INTO wallet_transactions "
            "(id, wallet_id, type, amount, balance_before, balance_after, status, created_by_id) "
            "VALUES ('t-1', 'w-1', 'DEPOSIT', 5, 0, 5, 'COMPLETED', :uid)"
        ), {"uid": settings.SYSTEM_USER_ID})
        conn.commit()
        assert conn.execute(text("SELECT count(*) FROM wallet_transactions")).scalar() == 1
    engine.dispose()
