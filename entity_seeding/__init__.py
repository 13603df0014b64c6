"""
entity_seeding: declarative factories for test and seed data.

Usage:
    from entity_seeding import DataSource, Factory, FactoryOptions, SeedingSource

    source = SeedingSource(DataSource("sqlite+aiosqlite:///seed.db", metadata=metadata))
    user = await UserFactory(seeding_source=source).create({'name': 'John Doe'})
"""

from .configuration import create_seeding_source, import_seeding_source
from .data_source import DataSource, EntityManager
from .factory import Factory
from .seeding_source import SeedingSource
from .types import FactoryOptions, FactoryOptionsOverrides, SaveOptions
from .utils.context import expect_context
from .utils.error_handling import (
    ConfigurationError,
    FactoryNotImplementedError,
    FactoryRecursionError,
    InvalidOverrideError,
    MissingCollaboratorError,
    MissingContextError,
    MissingSeedingSourceError,
    PersistenceError,
    SeedingError,
)
from .utils.resolve_factory import resolve_factory

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "DataSource",
    "EntityManager",
    "Factory",
    "FactoryNotImplementedError",
    "FactoryOptions",
    "FactoryOptionsOverrides",
    "FactoryRecursionError",
    "InvalidOverrideError",
    "MissingCollaboratorError",
    "MissingContextError",
    "MissingSeedingSourceError",
    "PersistenceError",
    "SaveOptions",
    "SeedingError",
    "SeedingSource",
    "create_seeding_source",
    "expect_context",
    "import_seeding_source",
    "resolve_factory",
]
