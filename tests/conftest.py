"""Shared fixtures: a dockerized document directory and a fake container engine."""

import os
import stat
from pathlib import Path

import pytest

from liftr.contexts.rendering.settings import RenderSettings

FAKE_ENGINE_SCRIPT = """#!/bin/sh
# Records each argument on its own line, then exits with the configured status
printf '%s\\n' "$@" > "$FAKE_ENGINE_LOG_DIR/$1.args"
case "$1" in
  build) exit "${FAKE_ENGINE_BUILD_EXIT:-0}" ;;
  run) exit "${FAKE_ENGINE_RUN_EXIT:-0}" ;;
esac
exit 0
"""


@pytest.fixture
def document(tmp_path) -> Path:
    """An R Markdown document with a Dockerfile next to it."""
    doc_dir = tmp_path.resolve() / "project"
    doc_dir.mkdir()
    (doc_dir / "Dockerfile").write_text("FROM rocker/r-ver\n")
    doc = doc_dir / "report.Rmd"
    doc.write_text("---\ntitle: Report\n---\n\n```{r}\n1 + 1\n```\n")
    return doc


@pytest.fixture
def fake_engine(tmp_path, monkeypatch) -> Path:
    """
    Put a fake `docker` first on PATH.

    Returns the directory where each invocation's arguments are written as
    `build.args` / `run.args`. Exit codes are set with FAKE_ENGINE_BUILD_EXIT
    and FAKE_ENGINE_RUN_EXIT.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    engine = bin_dir / "docker"
    engine.write_text(FAKE_ENGINE_SCRIPT)
    engine.chmod(engine.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    log_dir = tmp_path / "engine_calls"
    log_dir.mkdir()

    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.setenv("FAKE_ENGINE_LOG_DIR", str(log_dir))
    monkeypatch.setenv("LIFTR_CONTAINER_ENGINE", "docker")
    monkeypatch.delenv("LIFTR_RESERVED_OPTIONS", raising=False)
    monkeypatch.delenv("LIFTR_CONTAINER_ROOT", raising=False)
    monkeypatch.delenv("LIFTR_CONTAINER_PREFIX", raising=False)
    monkeypatch.delenv("LIFTR_RENDER_LIBRARIES", raising=False)
    return log_dir


@pytest.fixture
def settings() -> RenderSettings:
    return RenderSettings()


@pytest.fixture
def engine_args(fake_engine):
    """Arguments the fake engine received for a subcommand, one per list item."""

    def read(subcommand: str) -> list:
        return (fake_engine / f"{subcommand}.args").read_text().splitlines()

    return read
