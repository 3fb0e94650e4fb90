"""
Exceptions that are used throughout
"""

from __future__ import annotations


class MissingOptionalDependencyError(ImportError):
    """
    Raised when an optional dependency is missing

    For example, plotting dependencies like matplotlib
    """

    def __init__(self, callable_name: str, requirement: str) -> None:
        """
        Initialise the error

        Parameters
        ----------
        callable_name
            The name of the callable that requires the dependency

        requirement
            The name of the requirement
        """
        error_msg = f"`{callable_name}` requires {requirement} to be installed"
        super().__init__(error_msg)


class ActivityReportError(Exception):
    """
    Base class for errors that abort the production of a report
    """


class DataStoreConnectionError(ActivityReportError):
    """
    Raised when the data store cannot be reached
    """


class SchemaDecodeError(ActivityReportError, ValueError):
    """
    Raised when a stored document cannot be decoded into our data model
    """

    def __init__(self, collection: str, document_id: object, problem: str) -> None:
        """
        Initialise the error

        Parameters
        ----------
        collection
            Collection (or other source) the document came from

        document_id
            Identifier of the offending document, `None` if it has none

        problem
            Description of what could not be decoded
        """
        error_msg = (
            f"Could not decode document {document_id!r} from {collection!r}: {problem}"
        )
        super().__init__(error_msg)


class QueryError(ActivityReportError):
    """
    Raised when the aggregation query for a person fails
    """


class ReportFinalizedError(ActivityReportError):
    """
    Raised when appending to a report table that has already been finalized
    """


class ConfigError(ActivityReportError, ValueError):
    """
    Raised when the configuration is invalid
    """
