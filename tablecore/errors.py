"""Exception hierarchy for tablecore."""


class TableCoreError(Exception):
    """Base class for every error raised by tablecore."""


class ColumnAddressError(TableCoreError, ValueError):
    """Raised for a column number or letter address outside the valid domain."""


class WorkbookReadError(TableCoreError):
    """Raised when a workbook file cannot be opened or parsed."""


class WorkbookExportError(TableCoreError):
    """Raised when a populated workbook cannot be serialized."""


class SchemaLoadError(TableCoreError):
    """Raised when a schema file cannot be read or is not a mapping."""
