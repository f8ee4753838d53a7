import pytest

from autogql.runtime.extension_merger import (
    MUTATION, QUERY, SchemaExtension, merge_ordered, merge_resolvers, merge_signatures, signature_name,
)


def test_merge_ordered_overrides_in_place_and_appends():
    merged = merge_ordered({"a": 1, "b": 2}, {"b": 20, "c": 3})
    assert list(merged.items()) == [("a", 1), ("b", 20), ("c", 3)]


def test_merge_ordered_leaves_inputs_alone():
    generated = {"a": 1}
    merge_ordered(generated, {"a": 2})
    assert generated == {"a": 1}


@pytest.mark.parametrize("line,name", [
    ("read_User(id: Int!): User", "read_User"),
    ("  stats: Stats", "stats"),
    ("_ping: Boolean", "_ping"),
])
def test_signature_name(line, name):
    assert signature_name(line) == name


def test_signature_name_rejects_garbage():
    with pytest.raises(ValueError):
        signature_name("(id: Int): User")


def test_extension_signatures_split_lines():
    ext = SchemaExtension(read="a: Int\n\n  b: Int", read_multiple="c: [Int]", update="d: Int")
    assert ext.signatures(QUERY) == ["a: Int", "b: Int", "c: [Int]"]
    assert ext.signatures(MUTATION) == ["d: Int"]


def test_merge_signatures_applies_extensions_in_order():
    generated = {"read_User": "read_User(id: Int!): User"}
    exts = [
        SchemaExtension(read="read_User(email: String!): User"),
        SchemaExtension(read="read_User(name: String!): User\nping: Boolean"),
    ]
    merged = merge_signatures(generated, exts, QUERY)
    assert merged == {
        "read_User": "read_User(name: String!): User",
        "ping": "ping: Boolean",
    }


def test_merge_resolvers_custom_wins_in_both_namespaces():
    def gen_read(*_, **__): return "generated"
    def gen_create(*_, **__): return "generated"
    def custom_read(*_, **__): return "custom"
    def custom_create(*_, **__): return "custom"
    def extra(*_, **__): return "extra"

    query, mutation = merge_resolvers(
        {"read_User": gen_read},
        {"create_User": gen_create},
        [{"query": {"read_User": custom_read, "ping": extra}}, {"Mutation": {"create_User": custom_create}}],
    )
    assert query == {"read_User": custom_read, "ping": extra}
    assert mutation == {"create_User": custom_create}
