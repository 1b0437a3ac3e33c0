"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    MappingAlreadyExistsError:
        Raised when attempting to insert a MappingModel whose identifier is taken.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, time, OOM, etc.).

Example:
    >>> from ttlshortener.dao.exceptions import MappingAlreadyExistsError
    >>> raise MappingAlreadyExistsError("Mapping with identifier 'aB3xY9' already exists.")
    Traceback (most recent call last):
        ...
    ttlshortener.dao.exceptions.MappingAlreadyExistsError: Mapping with identifier 'aB3xY9' already exists.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class MappingAlreadyExistsError(DAOError):
    """Exception raised when attempting to insert a MappingModel whose identifier already exists in the data store."""

    pass


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    pass
