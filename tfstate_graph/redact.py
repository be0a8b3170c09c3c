"""Sensitive-attribute redaction and the created-at heuristic.

Terraform has encoded ``sensitive_attributes`` in several shapes over time::

    [[{"type": "get_attr", "value": "password"}]]      # list of paths
    [{"type": "get_attr", "value": "password"}]        # list of steps
    {"type": "get_attr", "value": "password"}          # single step

Only top-level attribute names are extracted. Values nested inside a retained
attribute are never redacted.
"""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import JsonValue

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def _step_name(step: JsonValue) -> str:
    if isinstance(step, dict):
        value = step.get("value")
        if isinstance(value, str):
            return value
    return ""


def sensitive_attribute_names(sensitive: JsonValue) -> set[str]:
    """Return the top-level attribute names named by a sensitivity marker."""
    names: set[str] = set()
    if isinstance(sensitive, list):
        for entry in sensitive:
            if isinstance(entry, list):
                # a path; its first step is the top-level attribute
                if entry:
                    names.add(_step_name(entry[0]))
            else:
                names.add(_step_name(entry))
    elif isinstance(sensitive, dict):
        names.add(_step_name(sensitive))
    names.discard("")
    return names


def filter_sensitive(
    attrs: dict[str, JsonValue] | None, sensitive: JsonValue
) -> dict[str, JsonValue] | None:
    """Drop the attributes *sensitive* marks as sensitive.

    When nothing is marked, *attrs* itself is returned.
    """
    if attrs is None:
        return None
    names = sensitive_attribute_names(sensitive)
    if not names:
        return attrs
    return {k: v for k, v in attrs.items() if k not in names}


def parse_rfc3339(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp, or return None."""
    match = _RFC3339.fullmatch(value)
    if match is None:
        return None
    date, clock, _fraction, offset = match.groups()
    if offset == "Z":
        offset = "+00:00"
    try:
        return datetime.fromisoformat(f"{date}T{clock}{offset}")
    except ValueError:
        return None


def guess_created_at(attrs: dict[str, JsonValue] | None) -> str:
    """Best-effort creation timestamp for an instance.

    ``time_static`` and friends expose ``rfc3339``; failing that an ``id``
    that happens to be an RFC 3339 string is used. Returns "" otherwise.
    """
    if not attrs:
        return ""
    for key in ("rfc3339", "id"):
        value = attrs.get(key)
        if isinstance(value, str) and parse_rfc3339(value) is not None:
            return value
    return ""
