from ariadne import make_executable_schema

from autogql.runtime.extension_merger import SchemaExtension, signature_name
from autogql.runtime.model_introspector import AttributeDescriptor, EntityDescriptor, introspect
from autogql.runtime.schema_generator import PREAMBLE, SchemaGenerator

TAG_FRAGMENT = """type Tag {
  id: Int!
  label: String!
}

type Tag_page {
  count: Int!
  rows: [Tag]
}

read_Tag(id: Int!): Tag
read_multiple_Tag(offset: Int!, limit: Int!, filter_options: [FilterOption], order_column: String, order_method: String): Tag_page
create_Tag(label: String!): Tag
update_Tag(id: Int!, label: String): Tag
"""


def _block(sdl, name):
    start = sdl.index(f"type {name} {{\n") + len(f"type {name} {{\n")
    end = sdl.index("\n}", start)
    return [line.strip() for line in sdl[start:end].splitlines()]


def test_entity_fragment(tag_entity):
    assert SchemaGenerator().render_entity_fragment(introspect(tag_entity)) == TAG_FRAGMENT


def test_field_order_follows_declaration(user_entity):
    lines = _block(SchemaGenerator().assemble([introspect(user_entity)]), "User")
    assert [signature_name(l) for l in lines] == list(user_entity.attributes)
    assert "name: String!" in lines
    assert "email: String" in lines
    assert "createdAt: Date" in lines


def test_read_signature_keys_on_primary_key():
    entity = EntityDescriptor("Country", {
        "code": AttributeDescriptor("CHAR", primary_key=True),
        "name": AttributeDescriptor("STRING"),
    })
    fields = SchemaGenerator().query_fields(introspect(entity))
    assert fields["read_Country"] == "read_Country(code: String!): Country"


def test_create_takes_only_create_fields(user_entity):
    sig = SchemaGenerator().mutation_fields(introspect(user_entity))["create_User"]
    assert sig == (
        "create_User(name: String!, email: String, age: Int, score: Float, "
        "active: Boolean, createdAt: Date): User"
    )


def test_update_takes_every_field_with_only_the_key_required(user_entity):
    sig = SchemaGenerator().mutation_fields(introspect(user_entity))["update_User"]
    assert sig.startswith("update_User(id: Int!, name: String, email: String,")
    assert sig.endswith("createdAt: Date): User")


def test_document_layout(user_entity, tag_entity):
    models = [introspect(user_entity), introspect(tag_entity)]
    sdl = SchemaGenerator().assemble(models)
    assert sdl.startswith(PREAMBLE)
    assert sdl.index("type User {") < sdl.index("type Tag {") < sdl.index("type Query {") < sdl.index("type Mutation {")
    assert [signature_name(l) for l in _block(sdl, "Query")] == [
        "read_User", "read_multiple_User", "read_Tag", "read_multiple_Tag",
    ]
    assert [signature_name(l) for l in _block(sdl, "Mutation")] == [
        "create_User", "update_User", "create_Tag", "update_Tag",
    ]


def test_output_is_deterministic(user_entity, tag_entity):
    gen = SchemaGenerator()
    first = gen.assemble([introspect(user_entity), introspect(tag_entity)])
    second = gen.assemble([introspect(user_entity), introspect(tag_entity)])
    assert first == second


def test_custom_fragments_are_appended(tag_entity):
    ext = SchemaExtension(
        types="type Stats {\n  tags: Int!\n}",
        read="stats: Stats",
        create="reset_stats: Boolean",
    )
    sdl = SchemaGenerator().assemble([introspect(tag_entity)], [ext])
    assert "type Stats {\n  tags: Int!\n}\n" in sdl
    assert _block(sdl, "Query")[-1] == "stats: Stats"
    assert _block(sdl, "Mutation")[-1] == "reset_stats: Boolean"


def test_custom_signature_replaces_generated_one(tag_entity):
    ext = SchemaExtension(
        read="read_Tag(label: String!): Tag",
        update="update_Tag(id: Int!, label: String!): Tag",
    )
    sdl = SchemaGenerator().assemble([introspect(tag_entity)], [ext])
    query = _block(sdl, "Query")
    mutation = _block(sdl, "Mutation")
    assert query[0] == "read_Tag(label: String!): Tag"
    assert len(query) == 2
    assert mutation[1] == "update_Tag(id: Int!, label: String!): Tag"
    assert sdl.count("update_Tag(") == 1


def test_document_is_a_valid_schema(user_entity, tag_entity):
    sdl = SchemaGenerator().assemble([introspect(user_entity), introspect(tag_entity)])
    schema = make_executable_schema(sdl)
    assert "read_multiple_User" in schema.query_type.fields
    assert "update_Tag" in schema.mutation_type.fields
    assert set(schema.type_map["User_page"].fields) == {"count", "rows"}
