"""Terraform address helpers: base addresses, index suffixes and provider names."""

from __future__ import annotations

import json
import re

from pydantic import JsonValue

from tfstate_graph.models import DATA, Resource

# A trailing instance index such as [0], ["key"] or [key].
_BRACKET_SUFFIX = re.compile(r"\[[^\]]*\]$")
_INTEGER = re.compile(r"[+-]?[0-9]+")


def resource_base_addr(resource: Resource) -> str:
    """Return the address of *resource* without any instance index.

    e.g. ``aws_instance.bar`` or ``module.foo.data.aws_ami.bar``.
    """
    parts: list[str] = []
    if resource.module:
        parts.append(resource.module)
    if resource.mode == DATA:
        parts.append("data")
    parts.append(resource.type)
    parts.append(resource.name)
    return ".".join(parts)


def instance_index_suffix(index_key: JsonValue) -> str:
    """Render an instance key the way Terraform addresses do: ``[0]`` or ``["key"]``.

    Returns an empty string for singleton instances.
    """
    if index_key is None:
        return ""
    if isinstance(index_key, bool):
        return f"[{str(index_key).lower()}]"
    if isinstance(index_key, (int, float)):
        # count indices are always integral
        return f"[{int(index_key)}]"
    if isinstance(index_key, str):
        return f'["{index_key}"]'
    return f"[{json.dumps(index_key, separators=(',', ':'))}]"


def normalize_index(addr: str) -> str:
    """Quote a bare trailing key: ``foo.bar[key]`` becomes ``foo.bar["key"]``.

    Integer and already-quoted indices, and addresses without a well-formed
    trailing bracket, are returned unchanged.
    """
    i = addr.rfind("[")
    if i < 0 or not addr.endswith("]"):
        return addr
    inner = addr[i + 1 : -1]
    if not inner or inner[0] in "\"'" or _INTEGER.fullmatch(inner):
        return addr
    return f'{addr[:i]}["{inner}"]'


def strip_index(addr: str) -> str:
    """Remove a trailing ``[...]`` suffix, whatever it contains."""
    return _BRACKET_SUFFIX.sub("", addr)


def clean_provider(provider: str) -> str:
    """Extract the provider source from a state provider address.

    Handles ``provider["registry.terraform.io/hashicorp/random"]`` as well as
    single-quoted and unquoted variants. Strings without brackets come back
    trimmed but otherwise unchanged.
    """
    if not provider:
        return ""
    i = provider.find("[")
    j = provider.rfind("]")
    if i >= 0 and j > i:
        inside = provider[i + 1 : j].strip("'\" ")
        if inside:
            return inside
    return provider.strip("'\" ")
