"""Tests for simplecrud.row: field access, persistence and row collections."""

import datetime

import pytest

from simplecrud import Relation, Row, RowCollection


def test_row_field_access(blog):
    user = blog["user"][1]
    assert isinstance(user, Row)
    assert user.entity is blog["user"]
    assert user.id == 1
    assert user["name"] == "Alice"
    assert user["active"] is True
    assert user["metadata"] == {"role": "admin"}
    assert list(user) == ["id", "name", "active", "metadata"]
    assert len(user) == 4
    assert "name" in user
    assert user.to_dict() == {"id": 1, "name": "Alice", "active": True, "metadata": {"role": "admin"}}


def test_row_unknown_field(blog):
    user = blog["user"][1]
    with pytest.raises(KeyError, match="nope"):
        user["nope"]
    with pytest.raises(ValueError, match="Invalid field"):
        user["nope"] = 1


def test_row_get_returns_field_value_or_relation(blog):
    post = blog["post"][1]
    assert post.get("title") == "First"
    relation = post.get("comment")
    assert isinstance(relation, Relation)
    assert relation.target is blog["comment"]


def test_row_datetime_field_by_name_suffix(blog):
    comment = blog["comment"][1]
    assert comment["createdAt"] == datetime.datetime(2024, 1, 2, 8, 30)
    assert blog["comment"][2]["createdAt"] is None


def test_save_updates(blog):
    post = blog["post"][2]
    post["title"] = "Second, edited"
    post["isPublished"] = True
    assert post.save() is post
    fresh = blog["post"][2]
    assert fresh["title"] == "Second, edited"
    assert fresh["isPublished"] is True


def test_save_inserts_new_row(blog):
    category = blog["category"].create({"name": "Sport"})
    assert category.id is None
    category.save()
    assert category.id == 4
    assert blog["category"][4]["name"] == "Sport"


def test_delete(blog):
    post = blog["post"][4]
    post.delete()
    assert post.id is None
    assert 4 not in blog["post"]


def test_attributes_are_shared_and_read_only(blog):
    blog.set_attribute("locale", "fr")
    post = blog["post"][1]
    assert post.attributes["locale"] == "fr"
    assert blog["post"].attributes["locale"] == "fr"
    with pytest.raises(TypeError):
        post.attributes["locale"] = "en"


def test_collection_is_keyed_by_id(blog):
    posts = blog["post"].select_all().order_by("id DESC").get()
    assert posts.ids() == [4, 3, 2, 1]
    assert posts[3]["title"] == "Third"
    assert 3 in posts
    assert 9 not in posts
    assert [row.id for row in posts] == [4, 3, 2, 1]


def test_collection_ignores_duplicates(blog):
    post = blog["post"][1]
    posts = RowCollection(blog["post"], [post, post])
    posts.add(blog["post"][1])
    assert len(posts) == 1
    assert posts[1] is post


def test_collection_rejects_unsaved_rows(db):
    with pytest.raises(ValueError, match="without id"):
        RowCollection(db["category"]).add(db["category"].create({"name": "x"}))


def test_collection_get_and_filter(blog):
    posts = blog["post"].select_all().get()
    assert posts.get("points") == [10, 5, 7, 3]
    published = posts.filter(lambda row: row["isPublished"])
    assert isinstance(published, RowCollection)
    assert published.ids() == [1, 3]
    assert published.to_list()[1]["title"] == "Third"
    assert isinstance(posts.get("user"), Relation)


def test_row_methods(blog):
    from simplecrud import Behavior, Database, behaviors_from

    behavior = Behavior(row_methods={"shout": lambda row, suffix="!": row["name"].upper() + suffix})
    db = Database(blog.connection, resolvers=[behaviors_from({"user": behavior})])
    user = db["user"][1]
    assert user.call("shout") == "ALICE!"
    assert user.call("shout", "?") == "ALICE?"
    with pytest.raises(AttributeError, match="whisper"):
        user.call("whisper")


def test_assignment_normalizes_values(blog):
    post = blog["post"][2]
    post["pubdate"] = "2024-03-04 05:06:07"
    post["points"] = "8"
    post["isPublished"] = 1
    assert post["pubdate"] == datetime.datetime(2024, 3, 4, 5, 6, 7)
    assert post["points"] == 8
    assert post["isPublished"] is True
