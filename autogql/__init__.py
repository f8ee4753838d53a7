"""
autogql
Derives a GraphQL schema and a matching resolver map from entity descriptors
"""

from .errors import (
    AutoGqlError,
    DuplicateEntityError,
    InvalidArgumentError,
    MalformedFilterError,
    NotFoundError,
    UnsupportedTypeError,
)
from .runtime.extension_merger import SchemaExtension
from .runtime.model_introspector import AttributeDescriptor, EntityDescriptor, introspect
from .runtime.pipeline import GeneratedApi, build_api

__all__ = [
    'AutoGqlError', 'DuplicateEntityError', 'InvalidArgumentError', 'MalformedFilterError',
    'NotFoundError', 'UnsupportedTypeError', 'SchemaExtension', 'AttributeDescriptor',
    'EntityDescriptor', 'introspect', 'GeneratedApi', 'build_api',
]
