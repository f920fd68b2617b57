"""Tests for placeholder/value checks done when a query is rendered."""

import pytest

from simplecrud import QueryBindingError


def test_unbound_placeholder(db, statements):
    query = db["post"].select_all().where("id = :id")
    with pytest.raises(QueryBindingError, match=":id"):
        query.bindings
    statements.clear()
    with pytest.raises(QueryBindingError):
        query.run()
    assert statements == []


def test_unused_value(db):
    query = db["post"].select_all().where("id = 1", {"id": 1})
    with pytest.raises(QueryBindingError, match="not used"):
        query.bindings


def test_conflicting_values(db):
    query = db["post"].select_all().where("id > :id", {"id": 1}).where("id < :id", {"id": 5})
    with pytest.raises(QueryBindingError, match="different values"):
        query.bindings


def test_same_value_twice_is_bound_once(db):
    query = db["post"].select_all().where("id > :id", {"id": 1}).where("points > :id", {"id": 1})
    assert query.bindings == {"id": 1}


def test_marks_bind_values_for_later_fragments(blog):
    query = blog["post"].select_all().where("user_id = :user").marks({":user": 2})
    assert query.bindings == {"user": 2}
    assert query.get().ids() == [3]


def test_binding_error_is_a_value_error(db):
    with pytest.raises(ValueError):
        db["post"].count().where("id = :missing").bindings


def test_casts_and_time_literals_are_not_placeholders(db):
    query = db["post"].select_all().where("title != '10:30'")
    assert query.bindings == {}
