"""System domain package.

This package contains system-level components:
- PathResolver: Path resolution for configuration, database and web assets
- structlog_configurator: Structured logging setup
"""

from speciescatalog.system.path_resolver import PathResolver

__all__ = ["PathResolver"]
