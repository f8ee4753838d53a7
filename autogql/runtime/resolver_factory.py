import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ariadne import MutationType, QueryType, ScalarType

from autogql.errors import InvalidArgumentError, NotFoundError
from autogql.runtime.data_access import DataAccess
from autogql.runtime.filter_compiler import FilterCompiler, datetime_to_ms, ms_to_datetime
from autogql.runtime.model_introspector import EntityDescriptor, ParsedModel
from autogql.runtime.observability import get_logger, log_event
from autogql.runtime.schema_generator import create_name, read_multiple_name, read_name, update_name

LOG = get_logger("autogql.resolvers")

AccessSource = Union[Mapping[str, DataAccess], Callable[[EntityDescriptor, ParsedModel], DataAccess]]


# --------------------------------------------------------------------------------------
# Date scalar: clients exchange epoch milliseconds, resolvers see aware datetimes
# --------------------------------------------------------------------------------------

def parse_date_value(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise ValueError(f"Date expects epoch milliseconds or ISO 8601, got {value!r}")
    if isinstance(value, (int, float)):
        return ms_to_datetime(int(value))
    if isinstance(value, str):
        s = value.strip()
        try:
            return ms_to_datetime(int(s))
        except ValueError:
            pass
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
        return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    raise ValueError(f"Date expects epoch milliseconds or ISO 8601, got {type(value).__name__}")


def serialize_date(value: Any) -> int:
    if isinstance(value, datetime):
        return datetime_to_ms(value)
    if isinstance(value, date):
        return datetime_to_ms(datetime(value.year, value.month, value.day, tzinfo=timezone.utc))
    return datetime_to_ms(parse_date_value(value))


def make_date_scalar() -> ScalarType:
    return ScalarType("Date", serializer=serialize_date, value_parser=parse_date_value)


# --------------------------------------------------------------------------------------
# Resolver map
# --------------------------------------------------------------------------------------

@dataclass
class ResolverMap:
    query: Dict[str, Callable] = field(default_factory=dict)
    mutation: Dict[str, Callable] = field(default_factory=dict)
    scalars: Dict[str, ScalarType] = field(default_factory=dict)

    def bindables(self) -> List[Any]:
        out: List[Any] = list(self.scalars.values())
        q = QueryType()
        for name, fn in self.query.items():
            q.set_field(name, fn)
        out.append(q)
        if self.mutation:
            m = MutationType()
            for name, fn in self.mutation.items():
                m.set_field(name, fn)
            out.append(m)
        return out

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.scalars)
        out["Query"] = dict(self.query)
        out["Mutation"] = dict(self.mutation)
        return out


class ResolverFactory:
    def __init__(self, access: AccessSource, max_limit: Optional[int] = None, compiler: Optional[FilterCompiler] = None):
        self.access = access
        self.max_limit = max_limit
        self.compiler = compiler or FilterCompiler()

    def access_for(self, entity: EntityDescriptor, model: ParsedModel) -> DataAccess:
        if callable(self.access):
            return self.access(entity, model)
        try:
            return self.access[entity.name]
        except KeyError:
            raise ValueError(f"No data access configured for entity '{entity.name}'") from None

    def _mk_read(self, model: ParsedModel, access: DataAccess):
        pk = model.primary_key.name

        async def resolver(_, info, **kwargs):
            key = kwargs.get(pk)
            record = await access.find_by_key(key)
            if record is None:
                raise NotFoundError(model.name, key)
            return record
        return resolver

    def _mk_read_multiple(self, model: ParsedModel, access: DataAccess):
        async def resolver(_, info, offset=0, limit=0, filter_options=None, order_column=None, order_method=None):
            if offset is None or offset < 0:
                raise InvalidArgumentError(f"offset must be >= 0, got {offset}")
            if limit is None or limit < 0:
                raise InvalidArgumentError(f"limit must be >= 0, got {limit}")
            if self.max_limit is not None:
                limit = min(limit, self.max_limit)
            conditions = self.compiler.compile(filter_options)
            order = self.compiler.compile_order(order_column, order_method)
            log_event(
                LOG, "read_multiple", level=logging.DEBUG, entity=model.name,
                conditions=[(c.column, c.op, c.value) for c in conditions],
                order=order, offset=offset, limit=limit,
            )
            count, rows = await access.find_and_count(conditions, order, offset, limit)
            return {"count": count, "rows": rows}
        return resolver

    def _mk_create(self, model: ParsedModel, access: DataAccess):
        async def resolver(_, info, **kwargs):
            return await access.create(kwargs)
        return resolver

    def _mk_update(self, model: ParsedModel, access: DataAccess):
        pk = model.primary_key.name

        async def resolver(_, info, **kwargs):
            fields = dict(kwargs)
            key = fields.pop(pk, None)
            if key is None:
                raise InvalidArgumentError(f"update_{model.name} requires '{pk}'")
            # some stores only report a row count; always re-read the record
            await access.update_by_key(key, fields)
            record = await access.find_by_key(key)
            if record is None:
                raise NotFoundError(model.name, key)
            return record
        return resolver

    def handlers_for(self, model: ParsedModel, access: DataAccess) -> Tuple[Dict[str, Callable], Dict[str, Callable]]:
        ent = model.name
        query = {
            read_name(ent): self._mk_read(model, access),
            read_multiple_name(ent): self._mk_read_multiple(model, access),
        }
        mutation = {
            create_name(ent): self._mk_create(model, access),
            update_name(ent): self._mk_update(model, access),
        }
        return query, mutation

    def build(self, entities: Sequence[EntityDescriptor], models: Sequence[ParsedModel]) -> ResolverMap:
        rmap = ResolverMap(scalars={"Date": make_date_scalar()})
        for entity, model in zip(entities, models):
            q, m = self.handlers_for(model, self.access_for(entity, model))
            rmap.query.update(q)
            rmap.mutation.update(m)
        return rmap
