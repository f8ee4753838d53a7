import textwrap

import pytest

from autogql.runtime.model_introspector import AttributeDescriptor
from autogql.runtime.registry_loader import Registry


def write(path, body):
    path.write_text(textwrap.dedent(body))


def test_entities_in_file_then_declaration_order(tmp_path):
    write(tmp_path / "b_shop.yaml", """
        entities:
          Order:
            table: orders
            attributes:
              id: {type: INTEGER, primary_key: true, auto_increment: true}
              total: {type: DECIMAL, allow_null: false}
          Item:
            attributes:
              sku: STRING
    """)
    write(tmp_path / "a_people.yaml", """
        entities:
          - User:
              attributes:
                name: {type: STRING, allowNull: false}
          - name: Team
            attributes:
              title: STRING
    """)
    write(tmp_path / "_settings.yaml", "globals: {}\n")

    entities = list(Registry(str(tmp_path)).entities())
    assert [e.name for e in entities] == ["User", "Team", "Order", "Item"]
    order = entities[2]
    assert order.table_name == "orders"
    assert list(order.attributes) == ["id", "total"]
    assert order.attributes["total"] == AttributeDescriptor("DECIMAL", allow_null=False)
    assert entities[0].attributes["name"].allow_null is False


def test_malformed_document_names_the_file(tmp_path):
    write(tmp_path / "broken.yaml", """
        entities:
          User:
            attributes:
              name: {allow_null: false}
    """)
    with pytest.raises(ValueError, match="broken.yaml"):
        list(Registry(str(tmp_path)).entities())


def test_missing_directory(tmp_path):
    with pytest.raises(RuntimeError):
        Registry(str(tmp_path / "nope"))
