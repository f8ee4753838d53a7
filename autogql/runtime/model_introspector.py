"""
Entity descriptors -> canonical field lists.

An EntityDescriptor is the external declaration of a record type; introspect()
turns it into a ParsedModel: the ordered CanonicalFields, the primary-key
field, and the subset accepted by the create mutation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from autogql.errors import UnsupportedTypeError
from autogql.runtime.type_maps import to_scalar

IMPLICIT_KEY = "id"


def _first(spec: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in spec:
            return spec[k]
    return default


@dataclass(frozen=True)
class AttributeDescriptor:
    type: str
    primary_key: bool = False
    allow_null: bool = True
    default_value: Any = None
    auto_increment: bool = False

    @classmethod
    def from_mapping(cls, spec: Any) -> "AttributeDescriptor":
        # Accept bare "INTEGER" or {type: INTEGER, allowNull: false, ...}
        if isinstance(spec, str):
            return cls(type=spec)
        if not isinstance(spec, Mapping):
            raise ValueError(f"attribute must be a type name or a mapping, got {type(spec).__name__}")
        if "type" not in spec:
            raise ValueError("attribute is missing 'type'")
        return cls(
            type=str(spec["type"]),
            primary_key=bool(_first(spec, "primary_key", "primaryKey", default=False)),
            allow_null=bool(_first(spec, "allow_null", "allowNull", default=True)),
            default_value=_first(spec, "default", "default_value", "defaultValue"),
            auto_increment=bool(_first(spec, "auto_increment", "autoIncrement", default=False)),
        )


@dataclass(frozen=True)
class EntityDescriptor:
    name: str
    attributes: Dict[str, AttributeDescriptor] = field(default_factory=dict)
    table: Optional[str] = None

    @property
    def table_name(self) -> str:
        return self.table or self.name

    @classmethod
    def from_mapping(cls, name: str, spec: Mapping[str, Any]) -> "EntityDescriptor":
        if not isinstance(spec, Mapping):
            raise ValueError(f"entity '{name}' must be a mapping, got {type(spec).__name__}")
        attrs = spec.get("attributes") or spec.get("columns") or {}
        if not isinstance(attrs, Mapping):
            raise ValueError(f"entity '{name}': attributes must be a mapping")
        parsed: Dict[str, AttributeDescriptor] = {}
        for attr_name, attr_spec in attrs.items():
            try:
                parsed[str(attr_name)] = AttributeDescriptor.from_mapping(attr_spec)
            except ValueError as e:
                raise ValueError(f"entity '{name}', attribute '{attr_name}': {e}") from e
        return cls(name=str(name), attributes=parsed, table=spec.get("table"))


@dataclass(frozen=True)
class CanonicalField:
    name: str
    scalar: str
    required: bool
    required_to_create: bool
    updatable: bool
    primary_key: bool = False

    def sdl(self, required: Optional[bool] = None) -> str:
        bang = self.required if required is None else required
        return f"{self.name}: {self.scalar}{'!' if bang else ''}"


@dataclass(frozen=True)
class ParsedModel:
    name: str
    primary_key: CanonicalField
    fields: Tuple[CanonicalField, ...]
    create_fields: Tuple[CanonicalField, ...]

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


def _implicit_key() -> CanonicalField:
    return CanonicalField(
        name=IMPLICIT_KEY,
        scalar="Int",
        required=True,
        required_to_create=False,
        updatable=False,
        primary_key=True,
    )


def introspect(entity: EntityDescriptor) -> ParsedModel:
    if not entity.name:
        raise ValueError("entity name must be non-empty")

    fields: List[CanonicalField] = []
    primary: Optional[CanonicalField] = None
    for attr_name, attr in entity.attributes.items():
        try:
            scalar = to_scalar(attr.type)
        except UnsupportedTypeError as e:
            raise UnsupportedTypeError(e.storage_type, entity.name, attr_name) from None

        if attr.primary_key:
            if primary is not None:
                raise ValueError(
                    f"entity '{entity.name}' declares more than one primary key "
                    f"({primary.name}, {attr_name})"
                )
            cf = CanonicalField(
                name=attr_name,
                scalar=scalar,
                required=True,
                required_to_create=False,
                updatable=False,
                primary_key=True,
            )
            primary = cf
        else:
            cf = CanonicalField(
                name=attr_name,
                scalar=scalar,
                required=not attr.allow_null and attr.default_value is None,
                required_to_create=not attr.auto_increment,
                updatable=True,
            )
        fields.append(cf)

    if primary is None:
        names = [f.name for f in fields]
        if IMPLICIT_KEY in names:
            # an unflagged "id" attribute becomes the key instead of a second id
            idx = names.index(IMPLICIT_KEY)
            primary = CanonicalField(
                name=IMPLICIT_KEY,
                scalar=fields[idx].scalar,
                required=True,
                required_to_create=False,
                updatable=False,
                primary_key=True,
            )
            fields[idx] = primary
        else:
            primary = _implicit_key()
            fields.insert(0, primary)

    return ParsedModel(
        name=entity.name,
        primary_key=primary,
        fields=tuple(fields),
        create_fields=tuple(f for f in fields if f.required_to_create),
    )
