"""Reader and writer for flat ``key=value`` configuration files."""

__version__ = "0.1.0"
