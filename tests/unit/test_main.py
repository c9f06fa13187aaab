import json
import logging
from unittest import mock

import pytest

from services.uploader import main as uploader_main


@pytest.fixture
def source_dir(tmp_path):
    (tmp_path / "a.json").write_text(json.dumps([
        {"title": "Vendo silla", "description": "De madera", "category": "productos"},
        {"title": "Vendo mesa", "description": "Grande", "category": "productos", "price": -5},
    ]), encoding="utf-8")
    (tmp_path / "b.json").write_text("{ not json", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    return tmp_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("UPLOADER_CONFIG", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)


def test_dry_run_prints_summary_and_exits_zero(source_dir, capsys):
    exit_code = uploader_main.main([str(source_dir), "--dry-run"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Total publications: 2" in out
    assert "Successfully processed: 1" in out
    assert "Errors: 2" in out
    assert "File: b.json, Title: N/A" in out
    assert "This was a dry run" in out


def test_run_result_is_logged_for_debugging(source_dir, caplog):
    with caplog.at_level(logging.DEBUG, logger="services.uploader.main"):
        exit_code = uploader_main.main([str(source_dir), "--dry-run"])

    assert exit_code == 0
    records = [record for record in caplog.records if record.getMessage() == "Run result"]
    assert len(records) == 1
    result = records[0].result
    assert (result["total"], result["success"], result["skipped"]) == (2, 1, 1)
    assert [error["file"] for error in result["errors"]] == ["a.json", "b.json"]


def test_missing_source_argument_is_usage_error():
    with pytest.raises(SystemExit) as exc_info:
        uploader_main.main([])
    assert exc_info.value.code == 2


def test_missing_directory_is_fatal(tmp_path):
    assert uploader_main.main([str(tmp_path / "missing"), "--dry-run"]) == 2


def test_empty_directory_is_fatal(tmp_path):
    assert uploader_main.main([str(tmp_path), "--dry-run"]) == 2


def test_import_requires_database_url(source_dir):
    assert uploader_main.main([str(source_dir), "--force"]) == 2


def test_invalid_config_is_fatal(source_dir, tmp_path):
    assert uploader_main.main([str(source_dir), "--dry-run", "--config", str(tmp_path / "nope.yml")]) == 2


def test_import_writes_through_sink(source_dir, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://test")

    with mock.patch("psycopg2.connect") as connect_mock:
        exit_code = uploader_main.main([str(source_dir), "--force"])

    assert exit_code == 0
    conn = connect_mock.return_value
    # 8 CREATE TABLE statements and one INSERT for the valid record
    cursor = conn.cursor.return_value.__enter__.return_value
    assert cursor.execute.call_count == 9
    conn.close.assert_called_once()


def test_cancelled_confirmation_is_fatal(source_dir, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://test")

    with mock.patch("builtins.input", return_value="no"), \
            mock.patch("psycopg2.connect") as connect_mock:
        exit_code = uploader_main.main([str(source_dir)])

    assert exit_code == 2
    connect_mock.assert_not_called()


def test_database_unreachable_is_fatal(source_dir, monkeypatch):
    import psycopg2

    monkeypatch.setenv("DATABASE_URL", "postgresql://test")
    with mock.patch("psycopg2.connect", side_effect=psycopg2.OperationalError("down")):
        assert uploader_main.main([str(source_dir), "--force"]) == 2
