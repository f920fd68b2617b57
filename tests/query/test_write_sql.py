"""Tests for simplecrud.query insert/update/delete."""

import datetime

import pytest


def test_insert(blog):
    query = blog["category"].insert().data({"name": "Sport"})
    assert query.sql == "INSERT INTO `category` (`name`) VALUES (:__name)"
    assert query.bindings == {"__name": "Sport"}
    new_id = query.get()
    assert new_id == 4
    assert blog["category"].get(4)["name"] == "Sport"


def test_insert_encodes_values(db):
    query = db["post"].insert().data({
        "title": "Hello",
        "isPublished": True,
        "pubdate": datetime.datetime(2024, 2, 3, 4, 5, 6, 789),
    })
    assert query.bindings == {
        "__title": "Hello",
        "__isPublished": 1,
        "__pubdate": "2024-02-03 04:05:06",
    }


def test_insert_with_explicit_id(db):
    assert db["category"].insert().data({"id": 42, "name": "X"}).get() == 42


def test_insert_without_data_is_an_error(db):
    query = db["category"].insert()
    with pytest.raises(ValueError, match="without data"):
        query.sql
    with pytest.raises(ValueError):
        query.run()


def test_data_with_unknown_field_is_an_error(db):
    with pytest.raises(ValueError, match="Invalid key"):
        db["category"].insert().data({"nope": 1})


def test_update(blog):
    query = blog["category"].update().data({"name": "Politics"}).by_id(1)
    assert query.sql == "UPDATE `category` SET `name` = :__name WHERE (id = :id)"
    assert query.bindings == {"__name": "Politics", "id": 1}
    assert query.get() == 1
    assert blog["category"].get(1)["name"] == "Politics"


def test_update_all_rows(blog):
    assert blog["post"].update().data({"isPublished": False}).get() == 4
    assert blog["post"].count().where("isPublished = 1").get() == 0


def test_update_without_data_is_an_error(db):
    with pytest.raises(ValueError, match="without data"):
        db["category"].update().by_id(1).sql


def test_update_limit(db):
    query = db["post"].update().data({"points": 0}).limit(2).offset(3)
    assert query.sql == "UPDATE `post` SET `points` = :__points LIMIT 3, 2"


def test_delete_by_id(blog):
    query = blog["post"].delete().by_id(23)
    assert query.sql == "DELETE FROM `post` WHERE (id = :id)"
    assert query.bindings == {"id": 23}
    assert query.run().rowcount == 0


def test_delete_reports_affected_rows(blog):
    assert blog["comment"].delete().where("post_id = :post", {"post": 1}).get() == 2
    assert blog["comment"].count().get() == 1


def test_delete_related_with_many_to_many_uses_subquery(blog):
    post = blog["post"].get(1)
    query = blog["category"].delete().related_with(post)
    assert query.sql == (
        "DELETE FROM `category` WHERE (`category`.`id` IN "
        "(SELECT `category_id` FROM `category_post` WHERE `post_id` IN (:__rel_0)))"
    )
    assert query.get() == 2
