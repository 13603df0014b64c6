"""
Factory base class: the entity-construction pipeline.

A factory describes how to build one kind of entity. Subclasses declare
``options`` (at least the entity class) and usually override the ``entity``
hook to fill in generated values; ``finalize`` runs last on the fully
resolved entity.

Every construction runs the same ordered pipeline:

1. required context validation
2. ``entity`` hook (with a fresh instance of the configured entity class)
3. registered map function
4. attribute overrides
5. resolution of awaitable and factory-valued attributes
6. persistence through the seeding source (``create`` only)
7. ``finalize`` hook

Example:
    class UserFactory(Factory[User]):
        options = FactoryOptions(entity=User)

        async def entity(self, user=None, context=None):
            user.name = fake.name()
            return user

    user = await UserFactory(seeding_source=source).create({'name': 'John Doe'})
"""

from contextvars import ContextVar
from dataclasses import replace
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar, overload

from .types import ContextKey, FactoryOptions, FactoryOptionsOverrides, SaveOptions, resolve_option
from .utils.attributes import entity_attributes
from .utils.awaitables import is_promise_like, maybe_await
from .utils.config import get_config
from .utils.context import expect_context
from .utils.error_handling import (
    FactoryNotImplementedError,
    FactoryRecursionError,
    MissingSeedingSourceError,
)
from .utils.logging import get_logger, log_operation
from .utils.overrides import apply_overrides
from .utils.resolve_factory import resolve_factory

logger = get_logger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound="Factory")

Context = Dict[str, Any]
MapFunction = Callable[[Any], Any]

# Nesting depth of the construction currently running in this task.
_factory_depth: ContextVar[int] = ContextVar("factory_depth", default=0)


class Factory(Generic[T]):
    """
    Base class for entity factories.

    A factory instance keeps its registered map function between calls, so
    one instance serves one construction at a time; build separate instances
    for concurrent use.
    """

    options: FactoryOptions = FactoryOptions()

    def __init__(self, option_overrides: Optional[FactoryOptionsOverrides] = None, **overrides: Any):
        """
        Args:
            option_overrides: Construction-time option overrides
            **overrides: Individual ``FactoryOptionsOverrides`` fields, applied on top
        """
        option_overrides = option_overrides or FactoryOptionsOverrides()
        if overrides:
            option_overrides = replace(option_overrides, **overrides)
        self._option_overrides = option_overrides
        self._map_function: Optional[MapFunction] = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def seeding_source(self):
        seeding_source = self._option_overrides.seeding_source
        if seeding_source is None:
            raise MissingSeedingSourceError(type(self).__name__)
        return seeding_source

    @seeding_source.setter
    def seeding_source(self, seeding_source) -> None:
        self._option_overrides = replace(self._option_overrides, seeding_source=seeding_source)

    @property
    def overrides(self) -> Type["Factory"]:
        """Factory class this definition delegates to; its own class by default."""
        return resolve_option(self._option_overrides.override, self.options.override, default=type(self))

    @property
    def required_context_keys(self) -> Optional[List[ContextKey]]:
        return resolve_option(self._option_overrides.required_context_keys, self.options.required_context_keys)

    @property
    def max_depth(self) -> Optional[int]:
        seeding_source = self._option_overrides.seeding_source
        return resolve_option(
            self._option_overrides.max_depth,
            self.options.max_depth,
            seeding_source.max_depth if seeding_source is not None else None,
            get_config().max_factory_depth,
        )

    def entity_class(self) -> Optional[type]:
        return resolve_option(self._option_overrides.entity, self.options.entity)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    async def entity(self, entity: Optional[T] = None, context: Optional[Context] = None) -> T:
        """
        Return an instance of the entity.

        Override this to populate generated values.

        Args:
            entity: A fresh instance of the configured entity class, if any
            context: The context passed to ``make``/``create``
        """
        if entity is not None:
            return entity
        raise FactoryNotImplementedError(type(self).__name__)

    async def finalize(self, entity: T, context: Optional[Context] = None) -> None:
        """
        Finalize the entity.

        Called after maps, overrides, resolution and (for ``create``)
        persistence. The return value is ignored.
        """

    def map(self: F, map_function: MapFunction) -> F:
        """Register the function run on each generated entity before overrides are applied."""
        self._map_function = map_function
        return self

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    async def make(self, override_params: Optional[Dict[str, Any]] = None, context: Optional[Context] = None) -> T:
        """Make a new entity without persisting it."""
        return await self._make_entity(override_params, context, persist=False)

    async def make_many(
        self,
        amount: int,
        override_params: Optional[Dict[str, Any]] = None,
        context: Optional[Context] = None,
    ) -> List[T]:
        """Make ``amount`` new entities without persisting them, one after another."""
        _check_amount(amount)
        entities = []
        for _ in range(amount):
            entities.append(await self.make(override_params, context))
        return entities

    async def create(
        self,
        override_params: Optional[Dict[str, Any]] = None,
        context: Optional[Context] = None,
        save_options: Optional[SaveOptions] = None,
    ) -> T:
        """Create a new entity and persist it."""
        return await self._make_entity(override_params, context, persist=True, save_options=save_options)

    async def create_many(
        self,
        amount: int,
        override_params: Optional[Dict[str, Any]] = None,
        context: Optional[Context] = None,
        save_options: Optional[SaveOptions] = None,
    ) -> List[T]:
        """Create and persist ``amount`` new entities, one after another."""
        _check_amount(amount)
        entities = []
        for _ in range(amount):
            entities.append(await self.create(override_params, context, save_options))
        return entities

    @overload
    async def save(self, entities: List[T], save_options: Optional[SaveOptions] = None) -> List[T]: ...

    @overload
    async def save(self, entities: T, save_options: Optional[SaveOptions] = None) -> T: ...

    async def save(self, entities, save_options=None):
        """Persist one or many entities, initializing the data source if needed."""
        data_source = self.seeding_source.data_source

        if not data_source.is_initialized:
            await data_source.initialize()

        return await data_source.create_entity_manager().save(entities, save_options)

    def factory(self, factory: Type[F]) -> F:
        """Return an instance of the given factory class bound to this factory's seeding source."""
        return resolve_factory(self.seeding_source, factory, self._option_overrides.factories)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _make_entity(
        self,
        override_params: Optional[Dict[str, Any]],
        context: Optional[Context],
        persist: bool,
        save_options: Optional[SaveOptions] = None,
    ) -> T:
        context = {} if context is None else context

        required_context_keys = self.required_context_keys
        if required_context_keys:
            expect_context(context, *required_context_keys)

        depth = _factory_depth.get() + 1
        max_depth = self.max_depth
        if max_depth is not None and depth > max_depth:
            raise FactoryRecursionError(type(self).__name__, max_depth)

        entity_class = self.entity_class()
        token = _factory_depth.set(depth)
        try:
            async with log_operation(
                logger,
                "factory.create" if persist else "factory.make",
                factory=type(self).__name__,
                entity=entity_class.__name__ if entity_class is not None else None,
                depth=depth,
            ):
                entity = await maybe_await(
                    self.entity(entity_class() if entity_class is not None else None, context)
                )

                if self._map_function is not None:
                    await maybe_await(self._map_function(entity))

                apply_overrides(entity, override_params)

                entity = await self._resolve_entity(entity, persist, save_options)

                if persist:
                    entity = await self.save(entity, save_options)

                await maybe_await(self.finalize(entity, context))
        finally:
            _factory_depth.reset(token)

        return entity

    async def _resolve_entity(self, entity: T, persist: bool, save_options: Optional[SaveOptions]) -> T:
        for attribute, value in entity_attributes(entity):
            if is_promise_like(value):
                value = await value
                setattr(entity, attribute, value)

            if isinstance(value, Factory):
                if persist:
                    resolved = await value.create(save_options=save_options)
                else:
                    resolved = await value.make()
                setattr(entity, attribute, resolved)

        return entity


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise ValueError(f"amount must be zero or positive, got {amount}")
