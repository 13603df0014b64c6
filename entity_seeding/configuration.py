"""
Seeding source bootstrap.

Seeding definitions usually live in a small Python module that builds a
``SeedingSource`` (data source, metadata, factory override pool). This module
loads such a file by path, and can also build a seeding source straight from
the environment configuration.
"""

import importlib.util
import sys
from pathlib import Path
from typing import Optional, Union

from sqlalchemy import MetaData

from .data_source import DataSource
from .seeding_source import SeedingSource
from .utils.config import SeedingConfig, get_config
from .utils.error_handling import ConfigurationError
from .utils.logging import get_logger

logger = get_logger(__name__)

SEEDING_SOURCE_ATTRIBUTE = "seeding_source"


def import_seeding_source(path: Union[str, Path], root: Optional[Union[str, Path]] = None) -> SeedingSource:
    """
    Load the seeding source defined by a Python file.

    The module must expose a ``seeding_source`` attribute, or exactly one
    ``SeedingSource`` instance at module level.

    Args:
        path: Path to the module file, relative to ``root`` when not absolute
        root: Base directory for relative paths; the working directory by default

    Raises:
        ConfigurationError: if the file is missing or defines no seeding source
    """
    module_path = Path(path)
    if not module_path.is_absolute():
        module_path = Path(root or Path.cwd()) / module_path
    module_path = module_path.resolve()

    if not module_path.is_file():
        raise ConfigurationError(
            f"Seeding source module not found: {module_path}",
            details={'path': str(module_path)},
        )

    module_name = f"_seeding_source_{abs(hash(str(module_path)))}"
    spec = importlib.util.spec_from_file_location(module_name, module_path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot import seeding source module: {module_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise

    seeding_source = getattr(module, SEEDING_SOURCE_ATTRIBUTE, None)
    if not isinstance(seeding_source, SeedingSource):
        candidates = [value for value in vars(module).values() if isinstance(value, SeedingSource)]
        if len(candidates) != 1:
            raise ConfigurationError(
                f"{module_path} must define exactly one SeedingSource "
                f"(found {len(candidates)})",
                details={'path': str(module_path)},
            )
        seeding_source = candidates[0]

    logger.info("seeding_source.imported", path=str(module_path))
    return seeding_source


def create_seeding_source(
    config: Optional[SeedingConfig] = None,
    metadata: Optional[MetaData] = None,
) -> SeedingSource:
    """Build a seeding source from the environment configuration."""
    config = config or get_config()
    data_source = DataSource(
        url=config.database_url,
        metadata=metadata,
        synchronize=config.synchronize,
        echo=config.echo,
    )
    return SeedingSource(data_source, max_depth=config.max_factory_depth)
