# File: tests/test_cli.py
"""Тесты для CLI (`access_scout/cli.py`) с использованием click.testing.CliRunner.
Проверяют команды `scan`, `config`, `--version`, а также обработку ошибок.
"""
import asyncio
import json

import pytest
from click.testing import CliRunner

import access_scout.cli as cli_module
from access_scout.cli import cli
from access_scout.errors import CrawlExhausted, InvalidInput


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch, reset_logger):
    """Без configs/default.yaml в рабочем каталоге CLI берёт значения по умолчанию."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def calls(monkeypatch, sample_result):
    """Патчим start_scan для возвращения готового результата без сканирования."""
    seen = []

    async def fake_scan(cfg, url):
        seen.append((cfg, url))
        return sample_result

    monkeypatch.setattr(cli_module, "start_scan", fake_scan)
    return seen


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "AccessScout" in result.output


def test_show_config_defaults():
    runner = CliRunner()
    result = runner.invoke(cli, ["config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["crawl"]["max_pages"] == 50
    assert data["scoring"]["min_score"] == 0


def test_show_config_from_file(tmp_path):
    cfg_file = tmp_path / "custom.yaml"
    cfg_file.write_text("crawl:\n  max_pages: 7\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    assert json.loads(result.output)["crawl"]["max_pages"] == 7


def test_bad_config_reported(tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("crawl:\n  max_pages: 0\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_scan_stdout(calls):
    runner = CliRunner()
    result = runner.invoke(cli, ["scan", "example.gov"])
    assert result.exit_code == 0
    output = json.loads(result.output)
    assert output["url"] == "https://example.gov/"
    assert output["pages_sampled_count"] == 1
    assert calls[0][1] == "example.gov"


def test_scan_limit_overrides_max_pages(calls):
    runner = CliRunner()
    result = runner.invoke(cli, ["scan", "example.gov", "--limit", "3"])
    assert result.exit_code == 0
    cfg, _ = calls[0]
    assert cfg.crawl.max_pages == 3


def test_scan_json_file(tmp_path, calls):
    out = tmp_path / "reports" / "out.json"
    runner = CliRunner()
    result = runner.invoke(cli, ["scan", "example.gov", "--json", str(out), "--pretty"])
    assert result.exit_code == 0
    assert "JSON report" in result.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["url"] == "https://example.gov/"
    assert [i["id"] for i in data["issues"]] == ["missing-labels", "missing-alt"]


def test_scan_timeout(monkeypatch):
    # Патчим start_scan на долгую функцию
    async def slow(cfg, url):
        await asyncio.sleep(2)

    monkeypatch.setattr(cli_module, "start_scan", slow)

    runner = CliRunner()
    result = runner.invoke(cli, ["scan", "example.gov", "--scan-timeout", "0.2"])
    assert result.exit_code == 1
    assert "не завершено" in result.output


@pytest.mark.parametrize(
    "exc,message",
    [
        (InvalidInput("Only http/https URLs are supported."), "Only http/https URLs are supported."),
        (CrawlExhausted("https://example.gov/", CrawlExhausted.BLOCKED), "blocking automated requests"),
        (CrawlExhausted("https://example.gov/", CrawlExhausted.TIMEOUT), "Request timed out"),
    ],
)
def test_scan_errors_are_short_messages(monkeypatch, exc, message):
    async def failing(cfg, url):
        raise exc

    monkeypatch.setattr(cli_module, "start_scan", failing)

    runner = CliRunner()
    result = runner.invoke(cli, ["scan", "ftp://example.gov"])
    assert result.exit_code == 1
    assert message in result.output
    assert "Traceback" not in result.output
