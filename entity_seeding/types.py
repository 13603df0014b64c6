"""
Option types shared by factories, the seeding source and the data source.

Factory configuration comes from three tiers, resolved by ``resolve_option``
in this order of precedence:

1. ``FactoryOptionsOverrides`` passed when the factory instance is built
2. ``FactoryOptions`` declared on the factory class
3. a configured default (seeding source or environment)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Type, Union

if TYPE_CHECKING:
    from .factory import Factory
    from .seeding_source import SeedingSource

ContextKey = Union[str, Sequence[str]]


@dataclass(frozen=True)
class FactoryOptions:
    """Definition-time options declared as ``options`` on a Factory subclass."""
    entity: Optional[type] = None
    override: Optional[Type["Factory"]] = None
    required_context_keys: Optional[List[ContextKey]] = None
    max_depth: Optional[int] = None


@dataclass(frozen=True)
class FactoryOptionsOverrides:
    """Construction-time overrides; every set field wins over ``FactoryOptions``."""
    seeding_source: Optional["SeedingSource"] = None
    entity: Optional[type] = None
    override: Optional[Type["Factory"]] = None
    required_context_keys: Optional[List[ContextKey]] = None
    factories: Optional[Dict[type, "FactoryOptionsOverrides"]] = None
    max_depth: Optional[int] = None


@dataclass(frozen=True)
class SaveOptions:
    """
    Options forwarded to ``EntityManager.save``.

    Attributes:
        transaction: Save a list of entities inside a single transaction
        chunk: Split a list into chunks of this size, one transaction per chunk
        reload: Re-read server-generated columns after an insert
    """
    transaction: bool = True
    chunk: Optional[int] = None
    reload: bool = True

    def __post_init__(self):
        if self.chunk is not None and self.chunk < 1:
            raise ValueError("chunk must be a positive integer")


def resolve_option(*candidates: Any, default: Any = None) -> Any:
    """Return the first candidate that is not None, in precedence order."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return default


__all__ = [
    "ContextKey",
    "FactoryOptions",
    "FactoryOptionsOverrides",
    "SaveOptions",
    "resolve_option",
]
