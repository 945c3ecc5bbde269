from __future__ import annotations

import json
from pathlib import Path

import httpx
from typer.testing import CliRunner

from doimeta import cli

runner = CliRunner()

MESSAGE = {
    "title": ["T"],
    "author": [{"given": "A", "family": "B"}],
    "container-title": ["Journal of Tests"],
    "published-print": {"date-parts": [[2020, 5]]},
    "volume": "3",
    "DOI": "10.1/x",
    "URL": "http://x",
}


def _mock_client(status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status)
        return httpx.Response(200, json={"status": "ok", "message": MESSAGE})

    return lambda settings: httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _quiet(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DOIMETA_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("DOIMETA_VAULT_DIR", str(tmp_path))


def test_config_json_flag(tmp_path, monkeypatch):
    _quiet(monkeypatch, tmp_path)
    monkeypatch.setenv("DOIMETA_IDENTIFIER_KEY", "reference")
    monkeypatch.setenv("DOIMETA_ESCAPE_IDENTIFIER", "true")

    result = runner.invoke(cli.app, ["config", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert Path(payload["vault_dir"]) == tmp_path
    assert payload["identifier_key"] == "reference"
    assert payload["escape_identifier"] is True
    assert payload["log_level"] == "WARNING"


def test_update_rewrites_note(tmp_path, monkeypatch):
    _quiet(monkeypatch, tmp_path)
    monkeypatch.setattr(cli, "_build_client", _mock_client())
    note = tmp_path / "paper.md"
    note.write_text("---\ndoi: 10.1/x\n---\nBody\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["update", "paper.md"])

    assert result.exit_code == 0
    assert "Metadata updated successfully" in result.stdout
    assert note.read_text(encoding="utf-8") == (
        "---\n"
        "author: B, A\n"
        "doi: 10.1/x\n"
        "journal: Journal of Tests\n"
        'title: "T"\n'
        "url: http://x\n"
        "volume: 3\n"
        "year: 2020\n"
        "---\n"
        "Body\n"
    )


def test_update_dry_run_prints_block(tmp_path, monkeypatch):
    _quiet(monkeypatch, tmp_path)
    monkeypatch.setattr(cli, "_build_client", _mock_client())
    note = tmp_path / "paper.md"
    note.write_text("---\ndoi: 10.1/x\n---\nBody\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["update", "paper.md", "--dry-run"])

    assert result.exit_code == 0
    assert "journal: Journal of Tests" in result.stdout
    assert note.read_text(encoding="utf-8") == "---\ndoi: 10.1/x\n---\nBody\n"


def test_update_reports_http_error(tmp_path, monkeypatch):
    _quiet(monkeypatch, tmp_path)
    monkeypatch.setattr(cli, "_build_client", _mock_client(status=404))
    note = tmp_path / "paper.md"
    note.write_text("---\ndoi: 10.1/missing\n---\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["update", "paper.md"])

    assert result.exit_code == 1
    assert "HTTP error 404" in result.stdout
    assert note.read_text(encoding="utf-8") == "---\ndoi: 10.1/missing\n---\n"


def test_update_without_front_matter_block(tmp_path, monkeypatch):
    _quiet(monkeypatch, tmp_path)
    monkeypatch.setattr(cli, "_build_client", _mock_client())
    note = tmp_path / "plain.md"
    note.write_text("No header\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["update", "plain.md"])

    assert result.exit_code == 1
    assert "DOI not found in front matter" in result.stdout


def test_fetch_block_output(tmp_path, monkeypatch):
    _quiet(monkeypatch, tmp_path)
    monkeypatch.setattr(cli, "_build_client", _mock_client())

    result = runner.invoke(cli.app, ["fetch", "10.1/x", "--block"])

    assert result.exit_code == 0
    assert result.stdout.startswith("---\nauthor: B, A\ndoi: 10.1/x\n")


def test_fetch_json_output(tmp_path, monkeypatch):
    _quiet(monkeypatch, tmp_path)
    monkeypatch.setattr(cli, "_build_client", _mock_client())

    result = runner.invoke(cli.app, ["fetch", "10.1/x", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["title"] == ["T"]
    assert payload["container-title"] == ["Journal of Tests"]


def test_update_prints_error_text_literally(tmp_path, monkeypatch):
    _quiet(monkeypatch, tmp_path)

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused [/red] by [bold]host", request=request)

    monkeypatch.setattr(
        cli, "_build_client", lambda settings: httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    note = tmp_path / "paper.md"
    note.write_text("---\ndoi: 10.1/x\n---\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["update", "paper.md"])

    assert result.exit_code == 1
    assert "refused [/red] by [bold]host" in result.stdout
