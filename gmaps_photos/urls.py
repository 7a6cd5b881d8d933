"""Recognition and normalization of Google Photos image URLs."""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Tuple

from .config import DEFAULT_SIZE_GRAMMAR, DEFAULT_TARGET_RESOLUTION

PROVIDER_HOSTS: Tuple[str, ...] = (
    "lh3.googleusercontent.com",
    "lh4.googleusercontent.com",
    "lh5.googleusercontent.com",
    "lh6.googleusercontent.com",
)
PROVIDER_PATHS: Tuple[str, ...] = ("gps-cs",)
PROVIDER_PREFIXES: Tuple[str, ...] = tuple(
    f"https://{host}/{path}/" for host in PROVIDER_HOSTS for path in PROVIDER_PATHS
)

# Size/transform directives appended after the photo id, e.g. "=w400-h300-k-no".
SIZE_DIRECTIVE_GRAMMARS: Dict[str, re.Pattern[str]] = {
    "v1": re.compile(r"=[wh]\d+(?:-[wh]\d+)*(?:-[a-z-]+)*/?$"),
    "v2": re.compile(r"=[whs]\d+(?:-[A-Za-z0-9]+)*/?$"),
}

# Templating on the host page emits "=" as %3D or as a JavaScript \u escape.
_ESCAPED_EQUALS = re.compile(r"%3[dD]|\\u003[dD]")


def resolve_size_grammar(name: str) -> re.Pattern[str]:
    """Return the compiled size-directive grammar registered under ``name``."""
    try:
        return SIZE_DIRECTIVE_GRAMMARS[name]
    except KeyError:
        known = ", ".join(sorted(SIZE_DIRECTIVE_GRAMMARS))
        raise ValueError(f"Unknown size grammar {name!r} (known: {known})") from None


def is_in_scope(candidate: Any, prefixes: Iterable[str] = PROVIDER_PREFIXES) -> bool:
    """Return True when ``candidate`` is a photo URL served by a known provider path."""
    if not isinstance(candidate, str):
        return False
    value = candidate.strip()
    if not value:
        return False
    return any(value.startswith(prefix) for prefix in prefixes)


def decode_equals(url: str) -> str:
    return _ESCAPED_EQUALS.sub("=", url)


def _strip_directives(url: str, suffix: str, grammar: re.Pattern[str]) -> str:
    while True:
        stripped = url.rstrip("/")
        if stripped.endswith(suffix):
            stripped = stripped[: -len(suffix)]
        stripped = grammar.sub("", stripped)
        if stripped == url:
            return url
        url = stripped


def to_canonical(
    url: str,
    target_resolution: str = DEFAULT_TARGET_RESOLUTION,
    grammar: str = DEFAULT_SIZE_GRAMMAR,
) -> str:
    """Rewrite ``url`` to request the maximum resolution.

    Existing size directives (and a previously applied canonical directive)
    are removed before the target directive is appended, so the rewrite is
    idempotent. URLs without a directive only gain the suffix.
    """
    suffix = f"={target_resolution}"
    clean = _strip_directives(decode_equals(url.strip()), suffix, resolve_size_grammar(grammar))
    return clean + suffix


def markup_pattern(prefixes: Iterable[str] = PROVIDER_PREFIXES) -> re.Pattern[str]:
    """Build the regex used to find provider URLs in serialized markup."""
    alternation = "|".join(re.escape(prefix) for prefix in prefixes)
    return re.compile(rf"(?:{alternation})(?:[^\"'\s<>()&\\]|\\u003[dD])+")
