"""Unicode property escape support for regex patterns.

The stdlib ``re`` engine does not understand ``\\p{...}`` escapes. Patterns in
this package are written with them anyway (``\\p{Han}``, ``\\p{Hiragana}``)
because they read far better than raw code point ranges. Support is detected
once at import; when the engine lacks it, :func:`compile_pattern` rewrites the
escapes into explicit ranges before compiling. ``re`` itself is never patched.
"""

from __future__ import annotations

from functools import lru_cache
import re


# Explicit ranges used when the engine cannot resolve a property escape.
_PROPERTY_RANGES: dict[str, str] = {
    "Han": (
        r"\u2E80-\u2E99\u2E9B-\u2EF3\u2F00-\u2FD5\u3005\u3007\u3021-\u3029\u3038-\u303B"
        r"\u3400-\u4DBF\u4E00-\u9FFF\uF900-\uFA6D\uFA70-\uFAD9"
        r"\U00020000-\U0002A6DF\U0002A700-\U0002EBE0\U00030000-\U0003134A"
    ),
    "Hiragana": r"\u3041-\u3096\u309D-\u309F",
    "Katakana": (
        r"\u30A1-\u30FA\u30FD-\u30FF\u31F0-\u31FF\u32D0-\u32FE\u3300-\u3357"
        r"\uFF66-\uFF6F\uFF71-\uFF9D"
    ),
    "Latin": r"A-Za-z\u00AA\u00BA\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02B8\uFF21-\uFF3A\uFF41-\uFF5A",
    "Nd": r"0-9\u0660-\u0669\u06F0-\u06F9\u0966-\u096F\uFF10-\uFF19",
}

_PROPERTY_ESCAPE = re.compile(r"\\([pP])\{(\w+)\}")


def _detect_property_escape_support() -> bool:
    try:
        re.compile(r"\p{Han}")
    except re.error:
        return False
    return True


SUPPORTS_PROPERTY_ESCAPES = _detect_property_escape_support()


def supported_properties() -> list[str]:
    """Return the property names the rewrite table understands."""

    return sorted(_PROPERTY_RANGES)


def _expand(match: re.Match[str], *, in_class: bool) -> str:
    kind, name = match.group(1), match.group(2)
    ranges = _PROPERTY_RANGES.get(name)
    if ranges is None:
        msg = f"Unsupported property escape '{match.group(0)}'. Available: {supported_properties()}"
        raise ValueError(msg)
    negated = kind == "P"
    if in_class:
        if negated:
            msg = f"Negated property escape '{match.group(0)}' cannot be rewritten inside a character class"
            raise ValueError(msg)
        return ranges
    return f"[^{ranges}]" if negated else f"[{ranges}]"


def rewrite_property_escapes(pattern: str) -> str:
    """Replace ``\\p{Name}``/``\\P{Name}`` escapes with explicit ranges.

    Escapes inside a character class are spliced into that class; escapes
    outside a class become a class of their own. Other escapes pass through
    untouched.
    """

    if "\\p{" not in pattern and "\\P{" not in pattern:
        return pattern

    parts: list[str] = []
    in_class = False
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if char == "\\":
            match = _PROPERTY_ESCAPE.match(pattern, index)
            if match:
                parts.append(_expand(match, in_class=in_class))
                index = match.end()
                continue
            parts.append(pattern[index : index + 2])
            index += 2
            continue
        if char == "[" and not in_class:
            in_class = True
        elif char == "]" and in_class:
            in_class = False
        parts.append(char)
        index += 1
    return "".join(parts)


@lru_cache(maxsize=64)
def compile_pattern(pattern: str, flags: int = 0) -> re.Pattern[str]:
    """Compile ``pattern``, rewriting property escapes when the engine needs it."""

    if SUPPORTS_PROPERTY_ESCAPES:
        return re.compile(pattern, flags)
    return re.compile(rewrite_property_escapes(pattern), flags)
