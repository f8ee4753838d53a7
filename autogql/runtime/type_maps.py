from types import MappingProxyType

from autogql.errors import UnsupportedTypeError

SCALARS = ("String", "Boolean", "Int", "Float", "Date")

STORAGE_TO_SCALAR = MappingProxyType({
    "STRING": "String",
    "TEXT": "String",
    "CITEXT": "String",
    "CHAR": "String",
    "VARCHAR": "String",
    "UUID": "String",

    "BOOLEAN": "Boolean",

    "INTEGER": "Int",
    "INT": "Int",
    "BIGINT": "Int",
    "SMALLINT": "Int",
    "TINYINT": "Int",
    "MEDIUMINT": "Int",

    "FLOAT": "Float",
    "REAL": "Float",
    "DOUBLE": "Float",
    "DECIMAL": "Float",

    "DATE": "Date",
    "DATEONLY": "Date",
    "TIMESTAMP": "Date",
})


def base_tag(storage_type: str) -> str:
    # VARCHAR(255) -> VARCHAR, "decimal(10, 2)" -> DECIMAL
    return str(storage_type or "").strip().upper().split("(")[0].strip()


def to_scalar(storage_type: str) -> str:
    scalar = STORAGE_TO_SCALAR.get(base_tag(storage_type))
    if scalar is None:
        raise UnsupportedTypeError(storage_type)
    return scalar
