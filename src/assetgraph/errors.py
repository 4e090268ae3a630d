"""Exception types shared by the store, the analysis engines and the CLI."""


class AssetGraphError(Exception):
    """Base class for application-specific exceptions."""


class StoreQueryError(AssetGraphError):
    """A graph store query failed or referenced an unknown record."""


class TypeMismatchError(AssetGraphError):
    """A resolved record does not hold the expected kind of asset."""

    def __init__(self, expected: str, record):
        self.expected = expected
        self.record = record
        actual = type(record.asset).__name__ if record is not None else "None"
        super().__init__(f"Expected {expected}, got {actual}")


class ConfigError(AssetGraphError):
    """A configuration or list file could not be loaded."""
