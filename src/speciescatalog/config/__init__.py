"""Species catalog configuration package.

This package provides centralized configuration management with:
- Validation through Pydantic models
- Smart defaults (including a generated session secret)
- YAML parsing and serialization
"""

from .manager import ConfigManager
from .models import LoggingConfig, SearchConfig, SpeciesCatalogConfig

__all__ = [
    "ConfigManager",
    "LoggingConfig",
    "SearchConfig",
    "SpeciesCatalogConfig",
]
