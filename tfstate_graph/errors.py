"""Exceptions raised while building, encoding or exchanging state graphs."""

from __future__ import annotations


class StateGraphError(Exception):
    """Base class for every error raised by tfstate_graph."""


class DecodeError(StateGraphError):
    """The state buffer is not valid JSON or does not match the state schema."""


class EncodeError(StateGraphError):
    """The graph could not be serialized."""


class StateGraphNotFound(StateGraphError):
    """The datastore holds no graph for the requested layer."""
