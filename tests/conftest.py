"""
Pytest configuration and fixtures for the seeding library tests.

Provides marker registration, a seeding source backed by a temporary SQLite
database (through aiosqlite) and ready-made fixture factories.

Testing Architecture:
- unit: pipeline helpers and factory behaviour that never touches a database
- integration: factories persisting through a real DataSource
"""

import pytest
import pytest_asyncio

from entity_seeding import DataSource, SeedingSource
from entity_seeding.utils.config import reset_config
from entity_seeding.utils.logging import configure_logging

from tests.fixtures.entities import metadata
from tests.fixtures.factories import PetFactory, UserFactory


# =============================================================================
# PYTEST CONFIGURATION AND MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization and set up structlog output."""
    configure_logging()
    config.addinivalue_line(
        "markers",
        "unit: Unit tests for individual components and functions"
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests exercising factories against a real database"
    )


def pytest_collection_modifyitems(config, items):
    """Apply markers based on test location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def fresh_config():
    """Make every test read the configuration from its own environment."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def database_url(tmp_path):
    """SQLite database file private to the test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'seeding.db'}"


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest_asyncio.fixture
async def seeding_source(database_url):
    """
    Provide an initialized seeding source with the fixture schema.

    Yields:
        SeedingSource whose tables are dropped and engine disposed afterwards
    """
    data_source = DataSource(database_url, metadata=metadata, synchronize=True)
    await data_source.initialize()

    yield SeedingSource(data_source)

    if data_source.is_initialized:
        await data_source.drop_database()
        await data_source.destroy()


@pytest.fixture
def user_factory(seeding_source):
    return UserFactory(seeding_source=seeding_source)


@pytest.fixture
def pet_factory(seeding_source):
    return PetFactory(seeding_source=seeding_source)
