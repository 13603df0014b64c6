"""
Data source and entity manager for persisting seeded entities.

The data source owns an SQLAlchemy ``AsyncEngine``, created lazily by
``initialize()``. Entities are plain attribute bags whose class carries a
``__table__`` attribute holding an SQLAlchemy ``Table``; the entity manager
writes them with Core statements, inserting when no row with the entity's
primary key exists yet (including explicitly assigned keys) and updating
otherwise. Generated primary keys (and, with ``reload``, server-side defaults) are copied
back onto the entity.

Related entities are stored through foreign key columns named after the
attribute: an ``owner`` attribute holding a mapped entity is written to the
``owner_id`` column, saving the related entity first when it has no primary
key yet or its key matches no stored row.

Key Components:
- DataSource: engine lifecycle (initialize, destroy, drop_database)
- EntityManager: ``save`` for one entity or a list of entities
"""

import asyncio
from typing import Any, Dict, List, Optional, TypeVar, overload

from sqlalchemy import MetaData, Table, and_, select
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .types import SaveOptions
from .utils.attributes import entity_attributes
from .utils.config import get_config
from .utils.error_handling import PersistenceError
from .utils.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E")


def table_for(entity: Any) -> Table:
    """Return the table an entity instance is mapped to."""
    table = getattr(type(entity), '__table__', None)
    if not isinstance(table, Table):
        raise PersistenceError(
            f"{type(entity).__name__} is not mapped to a table; declare a __table__ attribute",
            details={'entity': type(entity).__name__},
        )
    return table


def is_mapped_entity(value: Any) -> bool:
    """Return True when ``value`` is an instance of a class mapped to a table."""
    return not isinstance(value, type) and isinstance(getattr(type(value), '__table__', None), Table)


class EntityManager:
    """
    Persists entities through the data source's engine.

    Obtained from ``DataSource.create_entity_manager()``; holds no state of
    its own besides the data source.
    """

    def __init__(self, data_source: "DataSource"):
        self.data_source = data_source

    @overload
    async def save(self, entities: List[E], save_options: Optional[SaveOptions] = None) -> List[E]: ...

    @overload
    async def save(self, entities: E, save_options: Optional[SaveOptions] = None) -> E: ...

    async def save(self, entities, save_options=None):
        """
        Persist one entity or a list of entities.

        Args:
            entities: A single entity or a list/tuple of entities
            save_options: Transaction, chunking and reload behaviour

        Returns:
            The same shape that was passed in, with generated fields populated
        """
        options = save_options or SaveOptions()
        engine = self.data_source.engine

        if not isinstance(entities, (list, tuple)):
            async with engine.begin() as connection:
                await self._persist(connection, entities, options)
            return entities

        items = list(entities)
        size = options.chunk or len(items) or 1
        for start in range(0, len(items), size):
            chunk = items[start:start + size]
            if options.transaction:
                async with engine.begin() as connection:
                    for entity in chunk:
                        await self._persist(connection, entity, options)
            else:
                for entity in chunk:
                    async with engine.begin() as connection:
                        await self._persist(connection, entity, options)

        logger.debug("entities.saved", count=len(items), chunk=options.chunk)
        return tuple(items) if isinstance(entities, tuple) else items

    async def _persist(self, connection: AsyncConnection, entity: Any, options: SaveOptions) -> None:
        table = table_for(entity)
        values = await self._column_values(connection, table, entity, options)
        primary_keys = list(table.primary_key.columns)

        if not await self._exists(connection, table, entity):
            insert_values = {
                name: value
                for name, value in values.items()
                if value is not None or not self._has_default(table, name)
            }
            result = await connection.execute(table.insert().values(**insert_values))
            for column, value in zip(primary_keys, result.inserted_primary_key):
                setattr(entity, column.name, value)
            if options.reload:
                await self._reload(connection, table, entity)
            logger.debug("entity.inserted", table=table.name)
        else:
            update_values = {
                name: value for name, value in values.items()
                if name not in table.primary_key.columns
            }
            if update_values:
                await connection.execute(
                    table.update().where(self._identity_clause(table, entity)).values(**update_values)
                )
            logger.debug("entity.updated", table=table.name)

    async def _column_values(
        self,
        connection: AsyncConnection,
        table: Table,
        entity: Any,
        options: SaveOptions,
    ) -> Dict[str, Any]:
        for name, value in entity_attributes(entity):
            foreign_key = f"{name}_id"
            if not is_mapped_entity(value) or foreign_key not in table.columns:
                continue
            related_table = table_for(value)
            related_keys = list(related_table.primary_key.columns)
            if not await self._exists(connection, related_table, value):
                await self._persist(connection, value, options)
            setattr(entity, foreign_key, getattr(value, related_keys[0].name))

        return {
            column.name: getattr(entity, column.name)
            for column in table.columns
            if hasattr(entity, column.name)
        }

    async def _exists(self, connection: AsyncConnection, table: Table, entity: Any) -> bool:
        """Return True when the entity has a complete primary key that matches a stored row."""
        if any(getattr(entity, column.name, None) is None for column in table.primary_key.columns):
            return False
        result = await connection.execute(
            select(*table.primary_key.columns).where(self._identity_clause(table, entity))
        )
        return result.first() is not None

    async def _reload(self, connection: AsyncConnection, table: Table, entity: Any) -> None:
        result = await connection.execute(select(table).where(self._identity_clause(table, entity)))
        row = result.mappings().one()
        for name, value in row.items():
            setattr(entity, name, value)

    @staticmethod
    def _identity_clause(table: Table, entity: Any):
        return and_(*[column == getattr(entity, column.name) for column in table.primary_key.columns])

    @staticmethod
    def _has_default(table: Table, name: str) -> bool:
        column = table.columns[name]
        return (
            column.primary_key
            or column.default is not None
            or column.server_default is not None
        )


class DataSource:
    """
    Lazily initialized database handle used by factories to persist entities.

    Initialization is idempotent: the first caller creates the engine (and,
    with ``synchronize``, the tables of ``metadata``); later callers reuse it.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        metadata: Optional[MetaData] = None,
        synchronize: Optional[bool] = None,
        echo: Optional[bool] = None,
        **engine_options: Any
    ):
        config = get_config()
        self.url = url or config.database_url
        self.metadata = metadata
        self.synchronize = config.synchronize if synchronize is None else synchronize
        self.echo = config.echo if echo is None else echo
        self.engine_options = engine_options
        self._engine: Optional[AsyncEngine] = None
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        """Check whether the engine has been created."""
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise PersistenceError("DataSource is not initialized; call initialize() first")
        return self._engine

    @property
    def safe_url(self) -> str:
        return make_url(self.url).render_as_string(hide_password=True)

    async def initialize(self) -> "DataSource":
        """Create the engine and synchronize the schema, once."""
        async with self._lock:
            if self._engine is not None:
                return self

            engine = create_async_engine(self.url, echo=self.echo, **self.engine_options)
            if self.synchronize and self.metadata is not None:
                async with engine.begin() as connection:
                    await connection.run_sync(self.metadata.create_all)

            self._engine = engine
            logger.info(
                "data_source.initialized",
                database_url=self.safe_url,
                synchronize=self.synchronize,
            )
        return self

    def create_entity_manager(self) -> EntityManager:
        return EntityManager(self)

    async def drop_database(self) -> None:
        """Drop every table of ``metadata``."""
        if self.metadata is None:
            return
        async with self.engine.begin() as connection:
            await connection.run_sync(self.metadata.drop_all)
        logger.info("data_source.dropped", database_url=self.safe_url)

    async def destroy(self) -> None:
        """Dispose of the engine; the data source can be initialized again afterwards."""
        async with self._lock:
            if self._engine is None:
                return
            await self._engine.dispose()
            self._engine = None
        logger.info("data_source.destroyed", database_url=self.safe_url)
