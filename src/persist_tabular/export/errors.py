"""
Export Exceptions
=================

Failures raised by the tabular export layer.
A filtered row is NOT an error: TabularWriter.write() reports it by returning False.
"""


class TabularExportError(Exception):
    """Base exception for tabular export failures."""
    pass


class TabularIoError(TabularExportError):
    """Raised when the output sink cannot be opened or written to."""
    pass


class WriterClosedError(TabularExportError):
    """Raised when a closed writer is asked to write another row."""
    pass


class CellSerializationError(TabularExportError):
    """Raised when a cell value cannot be rendered as a literal."""
    pass


class InvalidNamespaceError(TabularExportError):
    """Raised when a parent namespace is not a valid UUID."""
    pass


class InvalidColumnNameError(TabularExportError):
    """Raised when a column header would break the header line."""
    pass
