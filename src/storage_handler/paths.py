"""
Path string helpers for output locations.

No filesystem access happens here: paths are composed as strings.

Conventions:
- Paths may carry a scheme and authority ('hdfs://nn:8020/wh/t', 's3a://bucket/t').
- Joining follows Hadoop Path semantics: an absolute child replaces the parent.
- Partition directory names are 'name=value' with unsafe characters escaped as '%XX'.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence

from src.constants import DEFAULT_PARTITION_NAME, PATH_SEPARATOR
from src.storage_handler.errors import DescriptorValidationError

_ROOT = re.compile(r"^(?P<prefix>[A-Za-z][A-Za-z0-9+.\-]+:(?://[^/]*)?)?(?P<path>.*)$")
_PLACEHOLDER = re.compile(r"\$\{(\w+)\}")

# Characters that cannot appear verbatim in a partition directory name.
_CHARACTERS_TO_ESCAPE = frozenset(
    [chr(code) for code in range(0x01, 0x20)]
    + ['"', "#", "%", "'", "*", "/", ":", "=", "?", "\\", "\x7f", "{", "[", "]", "^"]
)


# -----------------------------
# Joining and normalizing
# -----------------------------


def _normalize_segments(path: str, absolute: bool) -> str:
    segments = [segment for segment in path.split(PATH_SEPARATOR) if segment not in ("", ".")]
    body = PATH_SEPARATOR.join(segments)
    return PATH_SEPARATOR + body if absolute else body


def _split_root(path: str) -> tuple[str, str]:
    """Split 'scheme://authority' from the path part."""
    match = _ROOT.match(path)
    assert match is not None  # the pattern matches any string
    return match.group("prefix") or "", match.group("path")


def is_absolute(path: str) -> bool:
    """True for paths with a scheme or a leading separator."""
    prefix, rest = _split_root(path)
    return bool(prefix) or rest.startswith(PATH_SEPARATOR)


def normalize_path(path: str) -> str:
    """Collapse duplicate separators and '.' segments; drop trailing separators."""
    prefix, rest = _split_root(path)
    has_authority = "//" in prefix
    normalized = _normalize_segments(rest, rest.startswith(PATH_SEPARATOR) or has_authority)
    if has_authority and normalized == PATH_SEPARATOR:
        return prefix
    return prefix + normalized


def join_path(parent: str, child: str | None) -> str:
    """
    Join `child` under `parent`.

    Examples:
        join_path("/wh/t", "_SCRATCH_a1")            -> "/wh/t/_SCRATCH_a1"
        join_path("hdfs://nn/wh/t/", "year=2024")    -> "hdfs://nn/wh/t/year=2024"
        join_path("/wh/t", "/elsewhere")             -> "/elsewhere"
        join_path("/wh/t", "")                       -> "/wh/t"
    """
    if not child:
        return normalize_path(parent)
    if is_absolute(child):
        return normalize_path(child)
    return normalize_path(f"{parent}{PATH_SEPARATOR}{child}")


# -----------------------------
# Partition names
# -----------------------------


def escape_path_name(value: str | None) -> str:
    """Escape a partition name or value for use as a directory name.

    Missing or empty values map to the default partition name.
    """
    if value is None or value == "":
        return DEFAULT_PARTITION_NAME
    return "".join(
        f"%{ord(character):02X}" if character in _CHARACTERS_TO_ESCAPE else character
        for character in value
    )


def make_partition_name(pairs: Iterable[tuple[str, str | None]]) -> str:
    """Return 'k1=v1/k2=v2' for ordered (name, value) pairs; names are lowercased."""
    return PATH_SEPARATOR.join(
        f"{escape_path_name(name.lower())}={escape_path_name(value)}" for name, value in pairs
    )


# -----------------------------
# Custom path templates
# -----------------------------


def template_placeholders(template: str) -> tuple[str, ...]:
    """Placeholder names in order of appearance, e.g. ('year', 'month')."""
    return tuple(match.group(1) for match in _PLACEHOLDER.finditer(template))


def resolve_custom_path(
    template: str,
    partition_columns: Sequence[str],
    values: Mapping[str, str] | None = None,
) -> str:
    """
    Substitute `${column}` placeholders in a custom dynamic path template.

    Columns match case-insensitively. Placeholders whose value is not known
    yet are kept verbatim so task writers can substitute them per partition.
    The result is always relative.

    Raises:
        DescriptorValidationError: if a placeholder names a non-partition column.
    """
    by_lower_name = {name.lower(): name for name in partition_columns}
    known = values or {}

    def _substitute(match: re.Match[str]) -> str:
        column = by_lower_name.get(match.group(1).lower())
        if column is None:
            raise DescriptorValidationError(
                f"Custom path {template!r} references unknown partition column "
                f"{match.group(1)!r}; partition columns are {list(partition_columns)}."
            )
        if column in known:
            return escape_path_name(known[column])
        return match.group(0)

    resolved = _PLACEHOLDER.sub(_substitute, template)
    return _normalize_segments(resolved, absolute=False)
