from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ALEMBIC_DIR = Path(__file__).resolve().parent.parent / "backend" / "alembic"

TABLES = {"users", "reports", "report_comments", "help_requests", "volunteers", "logs"}


def _config(url):
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def test_upgrade_and_downgrade(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrate.db'}"
    cfg = _config(url)

    command.upgrade(cfg, "head")
    engine = create_engine(url)
    assert TABLES <= set(inspect(engine).get_table_names())

    columns = {c["name"] for c in inspect(engine).get_columns("reports")}
    assert {"status", "assigned_to_id", "reporter_id", "admin_notes"} <= columns

    command.downgrade(cfg, "base")
    assert not TABLES & set(inspect(engine).get_table_names())
    engine.dispose()
