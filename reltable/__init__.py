from .config import EngineConfig, get_config, load_config, set_config
from .errors import (
    ArityMismatch,
    KeyLookupFailure,
    PersistenceFailure,
    SchemaError,
    SchemaIncompatible,
    TableError,
    TypeMismatch,
    UnknownAttribute,
    UnknownDomain,
)
from .schema import CHARACTER, INTEGER, REAL, TEXT, Attribute, Schema
from .table import Table

__all__ = [
    "CHARACTER",
    "INTEGER",
    "REAL",
    "TEXT",
    "ArityMismatch",
    "Attribute",
    "EngineConfig",
    "KeyLookupFailure",
    "PersistenceFailure",
    "Schema",
    "SchemaError",
    "SchemaIncompatible",
    "Table",
    "TableError",
    "TypeMismatch",
    "UnknownAttribute",
    "UnknownDomain",
    "get_config",
    "load_config",
    "set_config",
]
