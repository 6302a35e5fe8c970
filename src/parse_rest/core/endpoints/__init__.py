"""Thin wrappers over the REST resources: objects, users, files, functions, schemas."""

from parse_rest.core.endpoints.files import FilesEndpoint
from parse_rest.core.endpoints.functions import FunctionsEndpoint
from parse_rest.core.endpoints.objects import ObjectsEndpoint
from parse_rest.core.endpoints.schemas import SchemasEndpoint
from parse_rest.core.endpoints.users import UsersEndpoint

__all__ = [
    "FilesEndpoint",
    "FunctionsEndpoint",
    "ObjectsEndpoint",
    "SchemasEndpoint",
    "UsersEndpoint",
]
