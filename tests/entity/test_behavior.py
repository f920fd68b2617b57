"""Tests for behavior bundles: codec overrides, methods and init hooks."""

import pytest

from simplecrud import Behavior, Database, EntityNotFoundError, behaviors_from
from simplecrud.codecs import BOOLEAN, JSON, SET


def test_codec_override(db):
    behaviors = behaviors_from({"category": Behavior(codecs={"name": SET})})
    database = Database(db.connection, resolvers=[behaviors])
    category = database["category"]
    assert category.fields["name"].codec is SET
    new_id = category.set(None, {"name": {"b", "a"}})
    assert category[new_id]["name"] == {"a", "b"}
    assert db.execute("SELECT name FROM category").scalar() == "a,b"


def test_override_beats_name_patterns(db):
    database = Database(db.connection, resolvers=[behaviors_from({"post": Behavior(codecs={"isPublished": JSON})})])
    assert database["post"].fields["isPublished"].codec is JSON
    assert db["post"].fields["isPublished"].codec is BOOLEAN


def test_entity_methods(blog):
    def published(entity):
        return entity.select_all().where("isPublished = 1").get()

    database = Database(blog.connection, resolvers=[behaviors_from({"post": Behavior(entity_methods={"published": published})})])
    assert database["post"].call("published").ids() == [1, 3]
    with pytest.raises(AttributeError, match="drafts"):
        database["post"].call("drafts")


def test_init_hook_runs_once(db):
    calls = []
    database = Database(db.connection, resolvers=[behaviors_from({"post": Behavior(init=calls.append)})])
    entity = database["post"]
    assert database["post"] is entity
    assert calls == [entity]


def test_first_resolver_wins(db):
    first = Behavior(codecs={"name": SET})
    second = Behavior(codecs={"name": JSON})
    database = Database(db.connection, resolvers=[
        lambda name: None,
        behaviors_from({"category": first}),
        behaviors_from({"category": second}),
    ])
    assert database["category"].behavior is first


def test_behavior_without_table(db):
    database = Database(db.connection, resolvers=[behaviors_from({"virtual": Behavior()})])
    assert "virtual" in database
    assert database["virtual"].name == "virtual"


def test_failing_init_hook(db):
    def init(entity):
        raise RuntimeError("no way")

    database = Database(db.connection, resolvers=[behaviors_from({"post": Behavior(init=init)})])
    with pytest.raises(EntityNotFoundError) as info:
        database["post"]
    assert isinstance(info.value.__cause__, RuntimeError)
    assert "post" not in database._entities


def test_behavior_is_frozen():
    behavior = Behavior()
    with pytest.raises(ValueError):
        behavior.init = print
