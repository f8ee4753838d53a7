"""Shared fixtures: a small User/Tag model and in-memory stores."""

from datetime import datetime, timezone

import pytest

from autogql.runtime.data_access import MemoryDataAccess
from autogql.runtime.model_introspector import AttributeDescriptor, EntityDescriptor


def _ts(ms):
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


@pytest.fixture
def user_entity():
    return EntityDescriptor(
        name="User",
        table="users",
        attributes={
            "id": AttributeDescriptor("INTEGER", primary_key=True, auto_increment=True),
            "name": AttributeDescriptor("STRING", allow_null=False),
            "email": AttributeDescriptor("TEXT"),
            "age": AttributeDescriptor("INTEGER"),
            "score": AttributeDescriptor("FLOAT"),
            "active": AttributeDescriptor("BOOLEAN", allow_null=False, default_value=True),
            "createdAt": AttributeDescriptor("DATE"),
        },
    )


@pytest.fixture
def tag_entity():
    # no primary key declared: gets the implicit id
    return EntityDescriptor(
        name="Tag",
        attributes={
            "label": AttributeDescriptor("STRING", allow_null=False),
        },
    )


@pytest.fixture
def user_rows():
    return [
        {"id": 1, "name": "John", "email": "john@example.com", "age": 30, "score": 1.5, "active": True, "createdAt": _ts(1000)},
        {"id": 2, "name": "Joanna", "email": None, "age": 25, "score": 2.5, "active": True, "createdAt": _ts(1500)},
        {"id": 3, "name": "Bob", "email": "bob@example.com", "age": 30, "score": 3.0, "active": False, "createdAt": _ts(2000)},
        {"id": 4, "name": "jo", "email": None, "age": 41, "score": 0.5, "active": True, "createdAt": _ts(2500)},
    ]


@pytest.fixture
def users(user_rows):
    return MemoryDataAccess("id", user_rows)


@pytest.fixture
def tags():
    return MemoryDataAccess("id", [{"id": 1, "label": "red"}, {"id": 2, "label": "blue"}])


@pytest.fixture
def access(users, tags):
    return {"User": users, "Tag": tags}
