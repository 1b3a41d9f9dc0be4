"""dev-cli — manage local Docker development environments."""

__version__ = "0.1.0"
