import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class PathResolver:
    """Central authority for all file path resolution in the species catalog.

    Uses environment variables for configuration with sensible defaults.
    Web assets (templates, static files) always resolve inside the installed
    package; runtime data lives under the data directory.
    """

    def __init__(self) -> None:
        """Initialize PathResolver with environment-based configuration."""
        self.data_dir = Path(os.getenv("SPECIESCATALOG_DATA", "/var/lib/speciescatalog"))

    def get_config_path(self) -> Path:
        """Get the path to the main configuration file.

        Checks SPECIESCATALOG_CONFIG environment variable first, then falls back to default.
        """
        config_path = os.getenv("SPECIESCATALOG_CONFIG")
        if config_path:
            return Path(config_path)

        return self.data_dir / "config" / "speciescatalog.yaml"

    def get_data_dir(self) -> Path:
        """Get the data directory path.

        Returns:
            Path to the data directory where all runtime data is stored.
        """
        return self.data_dir

    def get_database_path(self) -> Path:
        """Get the path to the main SQLite database."""
        return self.data_dir / "database" / "speciescatalog.db"

    def get_static_dir(self) -> Path:
        """Get the directory for static web assets."""
        return PACKAGE_DIR / "web" / "static"

    def get_templates_dir(self) -> Path:
        """Get the directory for HTML templates."""
        return PACKAGE_DIR / "web" / "templates"
