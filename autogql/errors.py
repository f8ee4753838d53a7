"""
Error taxonomy.

Startup errors (UnsupportedTypeError, DuplicateEntityError) abort the build.
RequestError subclasses are raised from resolvers and reported to the caller
as GraphQL errors for that request only.
"""

from typing import Iterable


class AutoGqlError(Exception):
    """Base class for every error raised by autogql itself."""


class UnsupportedTypeError(AutoGqlError):
    def __init__(self, storage_type: str, entity: str = "", attribute: str = ""):
        self.storage_type = storage_type
        self.entity = entity
        self.attribute = attribute
        where = f" ({entity}.{attribute})" if entity else ""
        super().__init__(f"Unsupported storage type: {storage_type!r}{where}")


class DuplicateEntityError(AutoGqlError):
    def __init__(self, names: Iterable[str]):
        self.names = sorted(set(names))
        super().__init__("Duplicate entity name(s): " + ", ".join(self.names))


class RequestError(AutoGqlError):
    """Per-request failure; never affects other requests."""


class MalformedFilterError(RequestError):
    pass


class InvalidArgumentError(RequestError):
    pass


class NotFoundError(RequestError):
    def __init__(self, entity: str, key):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} with key {key!r} not found")
