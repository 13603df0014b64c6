"""Shared seeding handle passed to every factory of a graph."""

from typing import TYPE_CHECKING, Dict, Optional, Type

from .data_source import DataSource
from .types import FactoryOptionsOverrides

if TYPE_CHECKING:
    from .factory import Factory


class SeedingSource:
    """
    Bundles the data source with the factory override pool.

    Attributes:
        data_source: Persistence collaborator used by ``Factory.save``
        factories: Override pool keyed by factory class, consulted when one
            factory obtains another through ``Factory.factory``
        max_depth: Default nesting limit for factory resolution
    """

    def __init__(
        self,
        data_source: DataSource,
        factories: Optional[Dict[type, FactoryOptionsOverrides]] = None,
        max_depth: Optional[int] = None,
    ):
        self.data_source = data_source
        self.factories: Dict[type, FactoryOptionsOverrides] = dict(factories or {})
        self.max_depth = max_depth

    def register_factory(self, factory: Type["Factory"], overrides: FactoryOptionsOverrides) -> None:
        """Add or replace the pool entry used to resolve ``factory``."""
        self.factories[factory] = overrides

    def __repr__(self) -> str:
        return f"<SeedingSource {self.data_source.safe_url} factories={len(self.factories)}>"
