"""
Entity descriptors -> (SDL document, resolver map).

Runs once at startup. Any startup error aborts the whole build; there is no
partially usable result.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from ariadne import make_executable_schema

from autogql.errors import DuplicateEntityError
from autogql.runtime.extension_merger import QUERY, SchemaExtension, merge_resolvers
from autogql.runtime.model_introspector import EntityDescriptor, ParsedModel, introspect
from autogql.runtime.observability import get_logger, log_event
from autogql.runtime.resolver_factory import AccessSource, ResolverFactory, ResolverMap
from autogql.runtime.schema_generator import SchemaGenerator

LOG = get_logger("autogql.pipeline")


@dataclass
class GeneratedApi:
    sdl: str
    resolvers: ResolverMap
    models: Tuple[ParsedModel, ...]

    def executable_schema(self):
        return make_executable_schema(self.sdl, *self.resolvers.bindables())


def check_unique(entities: Sequence[EntityDescriptor]) -> None:
    counts = Counter(e.name for e in entities)
    dupes = [name for name, n in counts.items() if n > 1]
    if dupes:
        raise DuplicateEntityError(dupes)


def build_api(
    entities: Iterable[EntityDescriptor],
    access: AccessSource,
    extensions: Iterable[SchemaExtension] = (),
    custom_resolvers: Iterable[Mapping[str, Any]] = (),
    max_limit: Optional[int] = None,
) -> GeneratedApi:
    entities = list(entities)
    extensions = list(extensions or ())
    check_unique(entities)
    if not entities and not any(ext.signatures(QUERY) for ext in extensions):
        raise ValueError("Nothing to serve: no entities and no custom query operations")

    models: List[ParsedModel] = [introspect(e) for e in entities]
    sdl = SchemaGenerator().assemble(models, extensions)

    generated = ResolverFactory(access, max_limit=max_limit).build(entities, models)
    query, mutation = merge_resolvers(generated.query, generated.mutation, custom_resolvers)
    resolvers = ResolverMap(query=query, mutation=mutation, scalars=generated.scalars)

    log_event(
        LOG, "schema.built",
        entities=[m.name for m in models],
        queries=len(query),
        mutations=len(mutation),
        extensions=len(extensions),
    )
    return GeneratedApi(sdl=sdl, resolvers=resolvers, models=tuple(models))
