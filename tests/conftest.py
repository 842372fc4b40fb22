"""Shared pytest fixtures for convclone tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

# Keep log files out of the real home directory
os.environ.setdefault("CONVCLONE_LOG_DIR", tempfile.mkdtemp(prefix="convclone-logs-"))

from fixtures.transcripts import PROJECT_PATH, SOURCE_SESSION, to_lines  # noqa: E402


@pytest.fixture
def claude_dir(tmp_path, monkeypatch):
    """Create an empty ~/.claude layout and point convclone at it."""
    claude = tmp_path / ".claude"
    (claude / "projects").mkdir(parents=True)
    (claude / "todos").mkdir()
    monkeypatch.setenv("CONVCLONE_CLAUDE_DIR", str(claude))
    return claude


@pytest.fixture
def config(claude_dir):
    """Config rooted at the temporary Claude directory."""
    from convclone.config import Config

    return Config(claude_dir=claude_dir)


@pytest.fixture
def write_transcript(claude_dir):
    """Factory writing a transcript under a project directory."""
    from convclone.locator import encode_project_path

    def _write(records, session_id: str = SOURCE_SESSION, project_path: str = PROJECT_PATH) -> Path:
        project_dir = claude_dir / "projects" / encode_project_path(project_path)
        project_dir.mkdir(parents=True, exist_ok=True)
        path = project_dir / f"{session_id}.jsonl"
        path.write_text("".join(to_lines(records)), encoding="utf-8")
        return path

    return _write
