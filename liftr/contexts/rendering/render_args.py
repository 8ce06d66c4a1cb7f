"""
Render Argument Serialization

Turns pass-through render options into an R expression that rebuilds the same
options inside the container and calls rmarkdown::render() with them.

The expression ends up inside a double-quoted shell argument, so values pass
through three stages, each usable on its own:

    to_r_literal()               Python value  -> R source literal
    escape_r_string()            str           -> quoted R string literal
    escape_shell_double_quoted() R source      -> text safe inside "..." in sh

Examples:
    >>> build_render_call("report.Rmd", {})
    "render(input = 'report.Rmd')"

    >>> build_render_call("report.Rmd", {"output_format": "pdf_document", "quiet": True})
    "do.call(render, list(output_format = 'pdf_document', quiet = TRUE, input = 'report.Rmd'))"
"""

import math
import re
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional

from liftr.contexts.rendering.exceptions import (
    DuplicateInputError,
    UnsupportedOptionError,
    UnsupportedValueError,
)
from liftr.contexts.rendering.settings import DEFAULT_RESERVED_OPTIONS, RENDER_FUNCTION

# R integers are 32-bit; anything wider is written as a double
R_INT_MAX = 2**31 - 1

R_RESERVED_WORDS = {
    "if", "else", "repeat", "while", "function", "for", "in", "next", "break",
    "TRUE", "FALSE", "NULL", "Inf", "NaN", "NA",
    "NA_integer_", "NA_real_", "NA_complex_", "NA_character_",
}

R_SYNTACTIC_NAME = re.compile(r"^(?:[A-Za-z]|\.(?![0-9]))[A-Za-z0-9._]*$")

# ... and ..1, ..2 refer to function arguments
R_DOTS_NAME = re.compile(r"^\.\.(?:\.|[0-9]+)$")

R_STRING_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

SHELL_DOUBLE_QUOTE_SPECIALS = re.compile(r'([\\"$`])')


def escape_r_string(text: str) -> str:
    """
    Quote text as a single-quoted R string literal.

    Backslashes, quotes, and control characters are escaped so the literal
    stays on one line. R strings cannot hold NUL, so it is rejected.

    Args:
        text: Raw string value

    Returns:
        R string literal including the surrounding quotes

    Raises:
        UnsupportedValueError: If text contains a NUL character
    """
    if "\x00" in text:
        raise UnsupportedValueError(text, "R strings cannot contain NUL characters")

    return "'" + _escape_chars(text, "'") + "'"


def _escape_chars(text: str, quote: str) -> str:
    # shared by '...' strings and `...` names; R reads the same escapes in both
    escaped = []
    for char in text:
        if char == quote:
            escaped.append("\\" + char)
        elif char in R_STRING_ESCAPES:
            escaped.append(R_STRING_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            escaped.append(f"\\x{ord(char):02x}")
        else:
            escaped.append(char)
    return "".join(escaped)


def escape_shell_double_quoted(text: str) -> str:
    """Backslash-escape the characters that stay special inside a POSIX "..." argument."""
    return SHELL_DOUBLE_QUOTE_SPECIALS.sub(r"\\\1", text)


def r_name(name: Any) -> str:
    """Format a mapping key as an R argument name, backquoting when not syntactic."""
    if not isinstance(name, str):
        raise UnsupportedValueError(name, "mapping keys must be strings")
    if not name:
        raise UnsupportedValueError(name, "mapping keys must not be empty")
    if "\x00" in name:
        raise UnsupportedValueError(name, "R names cannot contain NUL characters")

    if (
        R_SYNTACTIC_NAME.match(name)
        and name not in R_RESERVED_WORDS
        and not R_DOTS_NAME.match(name)
    ):
        return name

    return f"`{_escape_chars(name, '`')}`"


def _scalar_kind(value: Any) -> Optional[str]:
    # bool before int: bool is a subclass of int
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "str"
    return None


def _r_number(value: Any) -> str:
    if isinstance(value, int):
        if -R_INT_MAX <= value <= R_INT_MAX:
            return f"{value}L"
        try:
            float(value)
        except OverflowError:
            raise UnsupportedValueError(value, "integer too large for an R double") from None
        return str(value)

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Inf" if value > 0 else "-Inf"
    return repr(value)


def to_r_literal(value: Any) -> str:
    """
    Serialize a Python value as R source that evaluates to an equivalent value.

    Supported shapes:
        None                          -> NULL
        bool                          -> TRUE / FALSE
        int                           -> 5L (doubles outside the 32-bit range)
        float                         -> 2.5, Inf, -Inf, NaN
        str                           -> 'text'
        list/tuple of one scalar kind -> c(...)
        other list/tuple              -> list(...)
        mapping with str keys         -> list(name = value, ...)

    Args:
        value: Value to serialize

    Returns:
        Single-line R expression

    Raises:
        UnsupportedValueError: For any other shape
    """
    if value is None:
        return "NULL"

    kind = _scalar_kind(value)
    if kind == "bool":
        return "TRUE" if value else "FALSE"
    if kind in ("int", "float"):
        return _r_number(value)
    if kind == "str":
        return escape_r_string(value)

    if isinstance(value, Mapping):
        items = [f"{r_name(key)} = {to_r_literal(item)}" for key, item in value.items()]
        return f"list({', '.join(items)})"

    if isinstance(value, (list, tuple)):
        elements = [to_r_literal(item) for item in value]
        kinds = {_scalar_kind(item) for item in value}
        if value and None not in kinds and len(kinds) == 1:
            return f"c({', '.join(elements)})"
        return f"list({', '.join(elements)})"

    raise UnsupportedValueError(value, "only scalars, sequences, and mappings are supported")


def check_render_options(
    render_options: Mapping,
    reserved_options: Iterable[str] = DEFAULT_RESERVED_OPTIONS,
) -> None:
    """
    Reject render options that this package manages or does not support.

    Raises:
        DuplicateInputError: If `input` is among the options
        UnsupportedOptionError: If any reserved option is among the options
    """
    if "input" in render_options:
        raise DuplicateInputError()

    reserved = set(reserved_options)
    unsupported = [name for name in render_options if name in reserved]
    if unsupported:
        raise UnsupportedOptionError(unsupported)


def build_render_call(
    input_name: str,
    render_options: Optional[Mapping] = None,
    reserved_options: Iterable[str] = DEFAULT_RESERVED_OPTIONS,
) -> str:
    """
    Build the R call that renders the document inside the container.

    Without options this is a direct call; otherwise the options plus the
    injected `input` are serialized into a list and applied with do.call().

    Args:
        input_name: File name of the document inside the mounted directory
        render_options: Pass-through arguments for rmarkdown::render()
        reserved_options: Option names to reject as unsupported

    Returns:
        R expression (not yet shell-escaped)
    """
    render_options = render_options or {}
    check_render_options(render_options, reserved_options)

    if not render_options:
        return f"{RENDER_FUNCTION}(input = {escape_r_string(input_name)})"

    render_args: Dict[str, Any] = dict(render_options)
    render_args["input"] = input_name

    return f"do.call({RENDER_FUNCTION}, {to_r_literal(render_args)})"
