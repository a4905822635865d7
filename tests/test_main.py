import builtins

from shop_service import main as main_module
from shop_service.database import DatabaseConnection


def test_main_creates_schema_and_exits(monkeypatch, tmp_path, capsys):
    db_path = tmp_path / "shop.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.setenv("SHOP_LOG_FILE", str(tmp_path / "shop.log"))
    monkeypatch.delenv("SHOP_CREATE_SCHEMA", raising=False)
    monkeypatch.setattr(builtins, "input", lambda: "4")

    assert main_module.main() == 0

    assert "4. Exit" in capsys.readouterr().out
    with DatabaseConnection(f"sqlite:///{db_path}") as conn:
        tables = conn.execute_query("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
    assert tables == [["order_items"], ["orders"], ["products"]]


def test_main_reports_unreachable_database(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'missing' / 'shop.db'}")
    monkeypatch.setenv("SHOP_LOG_FILE", str(tmp_path / "shop.log"))
    monkeypatch.setattr(builtins, "input", lambda: "4")

    assert main_module.main() == 1
    assert "Database unavailable" in capsys.readouterr().err


def test_configure_logging_creates_missing_log_directory(tmp_path, settings):
    log_file = tmp_path / "logs" / "nested" / "shop.log"

    main_module.configure_logging(settings.model_copy(update={"log_file": str(log_file)}))

    assert log_file.parent.is_dir()


def test_main_reports_unusable_log_file(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'shop.db'}")
    monkeypatch.setenv("SHOP_LOG_FILE", str(tmp_path / "locked" / "shop.log"))

    def refuse(settings):
        raise PermissionError(13, "Permission denied", settings.log_file)

    monkeypatch.setattr(main_module, "configure_logging", refuse)

    assert main_module.main() == 1
    assert "Cannot open log file" in capsys.readouterr().err
