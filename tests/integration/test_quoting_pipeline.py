"""
Integration tests for the two quoting layers - pushes escaped text through a
real shell, and through R itself when Rscript is installed.
"""

import shutil
import subprocess

import pytest

from liftr.contexts.rendering.render_args import (
    escape_r_string,
    escape_shell_double_quoted,
    to_r_literal,
)
from r_literal import parse_r

SH_AVAILABLE = shutil.which("sh") is not None
RSCRIPT_AVAILABLE = shutil.which("Rscript") is not None

skip_if_no_sh = pytest.mark.skipif(not SH_AVAILABLE, reason="POSIX sh not available")
skip_if_no_rscript = pytest.mark.skipif(
    not RSCRIPT_AVAILABLE, reason="Rscript not installed - install R to run"
)

TRICKY_STRINGS = [
    "plain",
    "it's",
    'double "quotes"',
    "$HOME and ${PATH}",
    "`uname` and $(uname)",
    "back\\slash\\",
    "new\nline\tand\rreturn",
    "!history and ; semicolon & ampersand | pipe",
    "Ünïcödé ✓",
]

# R may re-encode non-ASCII output depending on locale
ASCII_STRINGS = [text for text in TRICKY_STRINGS if text.isascii()]


def through_shell(argument_text: str) -> str:
    """What a program receives for "<argument_text>" on an sh command line."""
    completed = subprocess.run(
        ["sh", "-c", f'printf "%s" "{argument_text}"'],
        capture_output=True,
        check=True,
    )
    # bytes, so carriage returns are not translated
    return completed.stdout.decode("utf-8")


@pytest.mark.integration
@skip_if_no_sh
@pytest.mark.parametrize("text", TRICKY_STRINGS)
def test_shell_layer_round_trip(text):
    assert through_shell(escape_shell_double_quoted(text)) == text


@pytest.mark.integration
@skip_if_no_sh
@pytest.mark.parametrize("text", TRICKY_STRINGS)
def test_both_layers_round_trip(text):
    literal = escape_r_string(text)
    received = through_shell(escape_shell_double_quoted(literal))

    assert received == literal
    assert parse_r(received) == text


@pytest.mark.integration
@skip_if_no_sh
def test_nested_options_round_trip():
    value = {
        "params": {"title": "It's \"$x\"", "years": [2023, 2024]},
        "`odd` name": [None, True, 1.5, "s"],
    }
    received = through_shell(escape_shell_double_quoted(to_r_literal(value)))
    assert parse_r(received) == value


@pytest.mark.integration
@pytest.mark.rscript
@skip_if_no_sh
@skip_if_no_rscript
@pytest.mark.parametrize("text", ASCII_STRINGS)
def test_r_reads_string_back(text):
    script = escape_shell_double_quoted(f"cat({escape_r_string(text)})")
    completed = subprocess.run(
        ["sh", "-c", f'Rscript -e "{script}"'],
        capture_output=True,
        check=True,
    )
    assert completed.stdout.decode("utf-8") == text


@pytest.mark.integration
@pytest.mark.rscript
@skip_if_no_sh
@skip_if_no_rscript
def test_r_reads_nested_options_back():
    value = {"params": {"title": "Q3 'final'", "year": 2024}, "flags": [True, False]}
    r_code = (
        f"x <- {to_r_literal(value)};"
        "cat(x$params$title, x$params$year, is.integer(x$params$year), x$flags, sep = '|')"
    )
    completed = subprocess.run(
        ["sh", "-c", f'Rscript -e "{escape_shell_double_quoted(r_code)}"'],
        capture_output=True,
        text=True,
        check=True,
    )
    assert completed.stdout == "Q3 'final'|2024|TRUE|TRUE|FALSE"
