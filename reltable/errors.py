from __future__ import annotations


class TableError(ValueError):
    """Base class for every error raised by reltable."""


class UnknownAttribute(TableError, KeyError):
    def __init__(self, name: str, table_name: str | None = None):
        self.name = name
        self.table_name = table_name
        where = f" in table '{table_name}'" if table_name else ""
        super().__init__(f"Unknown attribute '{name}'{where}")

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise.
        return str(self.args[0])


class UnknownDomain(TableError):
    pass


class SchemaError(TableError):
    pass


class SchemaIncompatible(TableError):
    pass


class ArityMismatch(TableError):
    pass


class TypeMismatch(TableError):
    pass


class KeyLookupFailure(TableError):
    pass


class PersistenceFailure(TableError):
    pass
