import pytest

from autogql.errors import UnsupportedTypeError
from autogql.runtime.type_maps import SCALARS, STORAGE_TO_SCALAR, to_scalar


@pytest.mark.parametrize("tag,scalar", [
    ("STRING", "String"),
    ("TEXT", "String"),
    ("UUID", "String"),
    ("BOOLEAN", "Boolean"),
    ("INTEGER", "Int"),
    ("BIGINT", "Int"),
    ("DOUBLE", "Float"),
    ("DECIMAL", "Float"),
    ("DATE", "Date"),
    ("DATEONLY", "Date"),
])
def test_known_tags(tag, scalar):
    assert to_scalar(tag) == scalar


def test_tags_are_case_insensitive_and_ignore_parameters():
    assert to_scalar("varchar(255)") == "String"
    assert to_scalar("Decimal(10, 2)") == "Float"


def test_unknown_tag_is_an_error():
    with pytest.raises(UnsupportedTypeError) as exc:
        to_scalar("GEOMETRY")
    assert exc.value.storage_type == "GEOMETRY"


def test_every_mapping_targets_a_known_scalar():
    assert set(STORAGE_TO_SCALAR.values()) <= set(SCALARS)


def test_table_is_read_only():
    with pytest.raises(TypeError):
        STORAGE_TO_SCALAR["JSON"] = "String"
