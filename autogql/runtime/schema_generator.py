"""
GraphQL SDL generator from parsed models:
- Emits one object type and one <Entity>_page type per entity
- Emits Query with read_<Entity> / read_multiple_<Entity>
- Emits Mutation with create_<Entity> / update_<Entity>
- Custom fragments are appended; a custom signature replaces the generated
  signature of the same operation name
"""

from typing import Dict, Iterable, List, Sequence

from autogql.runtime.extension_merger import MUTATION, QUERY, SchemaExtension, merge_signatures
from autogql.runtime.model_introspector import ParsedModel

PREAMBLE = """scalar Date

input FilterOption {
  value_type: String!
  column_name: String!
  column_key: String
  value: String!
}
"""


def read_name(entity: str) -> str:
    return f"read_{entity}"


def read_multiple_name(entity: str) -> str:
    return f"read_multiple_{entity}"


def create_name(entity: str) -> str:
    return f"create_{entity}"


def update_name(entity: str) -> str:
    return f"update_{entity}"


def page_name(entity: str) -> str:
    return f"{entity}_page"


class SchemaGenerator:
    def entity_type(self, model: ParsedModel) -> str:
        lines: List[str] = [f"  {f.sdl()}" for f in model.fields]
        body = "\n".join(lines)
        page = page_name(model.name)
        return (
            f"type {model.name} {{\n{body}\n}}\n"
            f"\n"
            f"type {page} {{\n  count: Int!\n  rows: [{model.name}]\n}}\n"
        )

    def query_fields(self, model: ParsedModel) -> Dict[str, str]:
        ent = model.name
        pk = model.primary_key
        return {
            read_name(ent): f"{read_name(ent)}({pk.sdl(required=True)}): {ent}",
            read_multiple_name(ent): (
                f"{read_multiple_name(ent)}(offset: Int!, limit: Int!, "
                f"filter_options: [FilterOption], order_column: String, "
                f"order_method: String): {page_name(ent)}"
            ),
        }

    def mutation_fields(self, model: ParsedModel) -> Dict[str, str]:
        ent = model.name
        create_args = ", ".join(f.sdl() for f in model.create_fields)
        # update is partial: only the key is mandatory
        update_args = ", ".join(f.sdl(required=f.primary_key) for f in model.fields)
        create_sig = f"{create_name(ent)}({create_args}): {ent}" if create_args else f"{create_name(ent)}: {ent}"
        return {
            create_name(ent): create_sig,
            update_name(ent): f"{update_name(ent)}({update_args}): {ent}",
        }

    def render_entity_fragment(self, model: ParsedModel) -> str:
        sigs = list(self.query_fields(model).values()) + list(self.mutation_fields(model).values())
        return self.entity_type(model) + "\n" + "\n".join(sigs) + "\n"

    def assemble(self, models: Sequence[ParsedModel], extensions: Iterable[SchemaExtension] = ()) -> str:
        extensions = list(extensions or ())
        parts: List[str] = [PREAMBLE]
        qfields: Dict[str, str] = {}
        mfields: Dict[str, str] = {}

        for model in models:
            parts.append(self.entity_type(model))
            qfields.update(self.query_fields(model))
            mfields.update(self.mutation_fields(model))

        for ext in extensions:
            if ext.types and ext.types.strip():
                parts.append(ext.types.strip() + "\n")

        qfields = merge_signatures(qfields, extensions, QUERY)
        mfields = merge_signatures(mfields, extensions, MUTATION)

        parts.append(self._block("Query", qfields.values()))
        if mfields:
            parts.append(self._block("Mutation", mfields.values()))
        return "\n".join(parts)

    @staticmethod
    def _block(name: str, signatures: Iterable[str]) -> str:
        return f"type {name} {{\n" + "\n".join(f"  {s}" for s in signatures) + "\n}\n"
