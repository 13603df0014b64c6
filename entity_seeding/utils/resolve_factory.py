"""Factory resolver: build a collaborator factory from the shared override pool."""

from dataclasses import replace
from typing import TYPE_CHECKING, Mapping, Optional, Type, TypeVar

from ..types import FactoryOptionsOverrides

if TYPE_CHECKING:
    from ..factory import Factory
    from ..seeding_source import SeedingSource

F = TypeVar("F", bound="Factory")


def resolve_factory(
    seeding_source: "SeedingSource",
    factory: Type[F],
    factories: Optional[Mapping[type, FactoryOptionsOverrides]] = None,
) -> F:
    """
    Return a ready-to-use instance of ``factory``.

    The pool entry registered for ``factory`` (if any) supplies the option
    overrides, and its ``override`` class replaces ``factory`` itself. The
    shared seeding source and the pool are always injected so the new factory
    can persist and resolve further collaborators.

    Args:
        seeding_source: Shared seeding handle
        factory: Factory class to instantiate
        factories: Override pool; defaults to the seeding source's pool
    """
    if factories is None:
        factories = seeding_source.factories

    option_overrides = factories.get(factory) or FactoryOptionsOverrides()
    factory_class = option_overrides.override or factory

    return factory_class(
        replace(option_overrides, seeding_source=seeding_source, factories=factories)
    )
