"""Glob pattern matching for repository paths.

Grammar (matched against the whole ``/``-separated path):

- literal characters match themselves
- ``*`` matches any run of characters within one path segment
- ``**`` matches any run of characters across segments; ``**/`` also matches
  zero directories, and a trailing ``/**`` also matches the directory itself
- ``?`` matches exactly one character other than ``/``
- ``[...]`` matches one character from the class, ``[!...]`` negates it;
  an unterminated or empty class is taken literally
"""

import re
from collections.abc import Iterable
from functools import lru_cache


def _translate_class(body: str) -> str | None:
    """Translate the inside of a ``[...]`` class, or None if unusable."""
    negate = body.startswith("!")
    if negate:
        body = body[1:]
    if not body:
        return None

    escaped = body.replace("\\", "\\\\").replace("[", "\\[")
    if escaped.startswith("^"):
        escaped = "\\" + escaped
    translated = f"[{'^' if negate else ''}{escaped}]"

    try:
        re.compile(translated)
    except re.error:
        return None
    return translated


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob pattern into an anchored regular expression.

    Args:
        pattern: Glob pattern, e.g. ``src/**/*.test.js``.

    Returns:
        Compiled regex matching whole paths.
    """
    parts: list[str] = []
    i = 0
    n = len(pattern)

    while i < n:
        char = pattern[i]

        if char == "*":
            if pattern.startswith("**", i):
                i += 2
                if pattern.startswith("/", i):
                    parts.append("(?:.*/)?")
                    i += 1
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")

        elif char == "?":
            parts.append("[^/]")

        elif char == "[":
            # The first body character is never the closing bracket
            body_start = i + 2 if pattern.startswith("[!", i) else i + 1
            end = pattern.find("]", body_start + 1)
            translated = _translate_class(pattern[i + 1 : end]) if end != -1 else None
            if translated is None:
                parts.append(re.escape(char))
            else:
                parts.append(translated)
                i = end + 1
                continue

        elif char == "/" and pattern[i:] == "/**":
            parts.append("(?:/.*)?")
            break

        else:
            parts.append(re.escape(char))

        i += 1

    return re.compile("^" + "".join(parts) + "$")


def matches_pattern(path: str, pattern: str) -> bool:
    """Check whether a path matches a glob pattern.

    Args:
        path: Repository-relative file path.
        pattern: Glob pattern.

    Returns:
        True if the whole path matches.
    """
    return glob_to_regex(pattern).match(path) is not None


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    """Check whether a path matches any of the given glob patterns."""
    return any(matches_pattern(path, pattern) for pattern in patterns)
