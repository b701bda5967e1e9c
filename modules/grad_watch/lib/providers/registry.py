from __future__ import annotations

from .base import BaseAdapter

# provider -> adapter class for ATS boards, portal name -> adapter class for
# direct company portals. Filled by the @register / @register_portal decorators.
_REGISTRY: dict[str, type[BaseAdapter]] = {}
_PORTALS: dict[str, type[BaseAdapter]] = {}


def _key(name: str) -> str:
    return (name or "").strip().lower()


def _add(table: dict[str, type[BaseAdapter]], key: str, cls: type[BaseAdapter]) -> None:
    if not key:
        raise ValueError(f"Cannot register adapter {cls!r}: missing/empty key.")
    if key in table and table[key] is not cls:
        raise ValueError(f"Adapter key {key!r} already registered to {table[key]!r}.")
    table[key] = cls


def register(cls: type[BaseAdapter]) -> type[BaseAdapter]:
    """Class decorator registering an ATS adapter under cls.provider."""
    _add(_REGISTRY, _key(getattr(cls, "provider", "")), cls)
    return cls


def register_portal(cls: type[BaseAdapter]) -> type[BaseAdapter]:
    """Class decorator registering a direct company portal under cls.portal."""
    _add(_PORTALS, _key(getattr(cls, "portal", "")), cls)
    return cls


def get(provider: str) -> type[BaseAdapter]:
    """
    Look up an ATS adapter class by provider (case-insensitive).
    Raises KeyError if not found.
    """
    key = _key(provider)
    if key not in _REGISTRY:
        raise KeyError(f"No adapter registered for provider {provider!r}.")
    return _REGISTRY[key]


def get_portal(name: str) -> type[BaseAdapter]:
    key = _key(name)
    if key not in _PORTALS:
        raise KeyError(f"No direct portal registered as {name!r}.")
    return _PORTALS[key]


def all_providers() -> dict[str, type[BaseAdapter]]:
    return dict(_REGISTRY)


def all_portals() -> dict[str, type[BaseAdapter]]:
    return dict(_PORTALS)
