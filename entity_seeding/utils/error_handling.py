"""
Error handling and exception hierarchy for the seeding library.

This module defines every exception raised by the entity-construction pipeline
and its collaborators. All of them derive from ``SeedingError`` so callers can
catch the library's failures with a single ``except`` clause, while the more
specific classes also inherit from the matching built-in exception
(``NotImplementedError``, ``AttributeError``) where the failure has that shape.

Error kinds:
- MissingContextError: a required context key or key group is absent
- FactoryNotImplementedError: no entity class and no ``entity`` hook
- MissingSeedingSourceError: persistence or collaborator lookup without a seeding source
- InvalidOverrideError: override key not declared on the entity
- FactoryRecursionError: nested factory resolution exceeded the depth limit
- PersistenceError: entity type cannot be persisted by the data source
- ConfigurationError: invalid environment configuration or seeding module

Errors raised by collaborators (SQLAlchemy, user hooks) are never wrapped;
they propagate unmodified to the caller of ``make``/``create``.
"""

from enum import Enum
from typing import Any, Dict, Optional, Sequence


class ErrorCategory(Enum):
    """Error categories for classification in log output."""
    CONTEXT = "context"
    DEFINITION = "definition"
    COLLABORATOR = "collaborator"
    OVERRIDE = "override"
    PERSISTENCE = "persistence"
    CONFIGURATION = "configuration"


# ==================== CUSTOM EXCEPTION HIERARCHY ====================

class SeedingError(Exception):
    """
    Base exception class for all seeding errors.

    Carries a machine-readable error code and a details mapping so failures
    can be logged as structured events.
    """

    category: ErrorCategory = ErrorCategory.DEFINITION

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format for logging."""
        return {
            'error_code': self.error_code,
            'message': self.message,
            'category': self.category.value,
            'details': self.details,
            'type': self.__class__.__name__,
        }


class MissingContextError(SeedingError):
    """Raised when a factory's required context key (or key group) is absent."""

    category = ErrorCategory.CONTEXT

    def __init__(self, missing: Sequence[str], **kwargs):
        missing = list(missing)
        if len(missing) == 1:
            message = f"Missing required context key: {missing[0]!r}"
        else:
            message = "Missing required context keys, expected one of: " + ", ".join(
                repr(key) for key in missing
            )
        super().__init__(message, details={'missing': missing}, **kwargs)
        self.missing = missing


class FactoryNotImplementedError(SeedingError, NotImplementedError):
    """Raised when a factory has no entity class and does not override ``entity``."""

    def __init__(self, factory_name: str, **kwargs):
        super().__init__(
            f"No entity was found in {factory_name} options, "
            "so you must override the `entity` method",
            details={'factory': factory_name},
            **kwargs
        )
        self.factory_name = factory_name


class MissingSeedingSourceError(SeedingError):
    """Raised when a factory needs its seeding source but none was bound."""

    category = ErrorCategory.COLLABORATOR

    def __init__(self, factory_name: str, **kwargs):
        super().__init__(
            f"SeedingSource option was not set for factory {factory_name}",
            details={'factory': factory_name},
            **kwargs
        )
        self.factory_name = factory_name


MissingCollaboratorError = MissingSeedingSourceError


class InvalidOverrideError(SeedingError, AttributeError):
    """Raised when an override names an attribute the entity does not declare."""

    category = ErrorCategory.OVERRIDE

    def __init__(self, entity_name: str, attribute: str, **kwargs):
        super().__init__(
            f"{entity_name} has no attribute {attribute!r} to override",
            details={'entity': entity_name, 'attribute': attribute},
            **kwargs
        )
        self.entity_name = entity_name
        self.attribute = attribute


class FactoryRecursionError(SeedingError):
    """Raised when nested factory resolution goes deeper than the configured limit."""

    def __init__(self, factory_name: str, max_depth: int, **kwargs):
        super().__init__(
            f"Factory {factory_name} exceeded the maximum nesting depth of {max_depth}; "
            "check the factory graph for a cycle without a base case",
            details={'factory': factory_name, 'max_depth': max_depth},
            **kwargs
        )
        self.factory_name = factory_name
        self.max_depth = max_depth


class PersistenceError(SeedingError):
    """Raised when the data source cannot persist an entity."""

    category = ErrorCategory.PERSISTENCE


class ConfigurationError(SeedingError):
    """Raised for invalid configuration values or seeding source modules."""

    category = ErrorCategory.CONFIGURATION
