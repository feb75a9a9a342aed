"""Registry mapping Pkl class names to Python types."""

from __future__ import annotations

from typing import Any

_schemas: dict[str, type] = {}


def register_mapping(name: str, value: Any) -> None:
    """Associate the Pkl class ``name`` with a Python type.

    ``value`` may be the type itself or an instance of it.
    """
    _schemas[name] = value if isinstance(value, type) else type(value)


def lookup_mapping(name: str) -> type | None:
    """Return the type registered for ``name``, or None if there is none."""
    return _schemas.get(name)