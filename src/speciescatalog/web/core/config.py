"""Configuration loading for the web application."""

from speciescatalog.config import ConfigManager, SpeciesCatalogConfig
from speciescatalog.system.path_resolver import PathResolver


def get_config(path_resolver: PathResolver | None = None) -> SpeciesCatalogConfig:
    """Load the species catalog configuration.

    Uses the ConfigManager which internally handles environment variables
    and PathResolver integration.

    Args:
        path_resolver: Optional PathResolver instance to use. If not provided,
                      creates a new PathResolver instance.

    Returns:
        SpeciesCatalogConfig: The loaded and validated configuration.
    """
    if path_resolver is None:
        path_resolver = PathResolver()
    return ConfigManager(path_resolver).load()
