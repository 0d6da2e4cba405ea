"""Integration tests for the section commands (save-draft -> publish -> history -> restore)"""

import json
import re

import pytest
from typer.testing import CliRunner

from modcontent.cli.cli import app


AUDIT_ID = re.compile(r"audit: ([0-9a-f-]{36})")


@pytest.fixture(name="run")
def run_fixture(tmp_path, monkeypatch):
    """Invoke the CLI against a throwaway SQLite file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MODCONTENT_DB_URL", f"sqlite:///{tmp_path}/test.db")
    runner = CliRunner()

    def run(*args):
        return runner.invoke(app, list(args))

    return run


@pytest.fixture(name="blocks_file")
def blocks_file_fixture(tmp_path):
    def write(blocks, name="blocks.json"):
        path = tmp_path / name
        path.write_text(json.dumps(blocks))
        return str(path)
    return write


def test_init_reports_counts(run, blocks_file):
    assert run("init").exit_code == 0
    run("save-draft", "returns", "roadmap", blocks_file([{"type": "prose", "content": "One"}]))
    result = run("init")
    assert result.exit_code == 0, result.output
    assert "module_sections: 1" in result.output
    assert "module_section_audit: 1" in result.output


def test_init_reset(run, blocks_file):
    run("save-draft", "returns", "roadmap", blocks_file([{"type": "prose", "content": "One"}]))
    result = run("init", "--reset")
    assert result.output.startswith("Reset:")
    assert "module_sections: 0" in result.output


def test_save_publish_history_restore(run, blocks_file):
    first = run("save-draft", "returns", "roadmap", blocks_file([{"type": "prose", "content": "One"}]))
    assert first.exit_code == 0, first.output
    assert "Saved draft returns/roadmap: 1 block(s)" in first.output
    first_id = AUDIT_ID.search(first.output).group(1)

    run("save-draft", "returns", "roadmap", blocks_file([{"type": "prose", "content": "Two"}], "two.json"))
    published = run("publish", "returns", "roadmap", "--actor-email", "editor@example.com")
    assert published.exit_code == 0, published.output
    assert "published_at:" in published.output

    history = run("history", "returns", "roadmap", "--limit", "2")
    assert history.exit_code == 0, history.output
    lines = [line for line in history.output.splitlines() if line.strip()]
    assert len(lines) == 2
    assert "publish" in lines[0] and "editor@example.com" in lines[0]

    restored = run("restore", first_id)
    assert restored.exit_code == 0, restored.output

    shown = json.loads(run("show", "returns", "--draft").output)
    roadmap = shown["sections"]["roadmap"]
    assert roadmap["draft"]["blocks"] == [{"type": "prose", "content": "One"}]
    assert roadmap["published"]["blocks"] == [{"type": "prose", "content": "Two"}]
    assert roadmap["published"]["source"] == "db"


def test_copy_published(run, blocks_file):
    run("save-draft", "sfs", "progress", blocks_file([{"type": "empty", "title": "Soon"}]))
    run("publish", "sfs", "progress")
    run("save-draft", "sfs", "progress", blocks_file([], "empty.json"))
    result = run("copy-published", "sfs", "progress")
    assert result.exit_code == 0, result.output
    shown = json.loads(run("show", "sfs", "--draft").output)
    assert shown["sections"]["progress"]["draft"]["blocks"] == [{"type": "empty", "title": "Soon"}]


def test_invalid_blocks_exit_nonzero(run, blocks_file):
    result = run("save-draft", "returns", "roadmap", blocks_file([{"type": "kpis", "items": []}]))
    assert result.exit_code == 1
    assert "[validation]" in result.output


def test_publish_without_draft(run):
    result = run("publish", "returns", "end-vision")
    assert result.exit_code == 1
    assert "No draft to publish." in result.output


def test_restore_unknown_id(run):
    result = run("restore", "00000000-0000-0000-0000-000000000000")
    assert result.exit_code == 1
    assert "[not_found]" in result.output


def test_unreadable_blocks_file(run, tmp_path):
    (tmp_path / "bad.json").write_text("{not json")
    result = run("save-draft", "returns", "roadmap", str(tmp_path / "bad.json"))
    assert result.exit_code == 1
    assert "Could not read blocks" in result.output


def test_show_falls_back_to_configured_content(run):
    shown = json.loads(run("show", "big-and-bulky").output)
    section = shown["sections"]["end-vision"]
    assert section["published"]["source"] == "config"
    assert section["draft"] is None


def test_show_unknown_module(run):
    assert run("show", "nope").exit_code == 1


def test_seed_is_non_destructive(run):
    first = run("seed", "returns", "progress")
    assert first.exit_code == 0, first.output
    assert "Sample content created." in first.output
    second = run("seed", "returns", "progress")
    assert "skipped" in second.output
