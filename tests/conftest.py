import logging

import pytest

from simplecrud import Database

SCHEMA = [
    """CREATE TABLE `user` (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        active INTEGER,
        metadata JSON
    )""",
    """CREATE TABLE `post` (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT,
        pubdate DATETIME,
        isPublished INTEGER,
        points INTEGER,
        user_id INTEGER
    )""",
    """CREATE TABLE `comment` (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        text TEXT,
        createdAt TEXT,
        post_id INTEGER
    )""",
    """CREATE TABLE `category` (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT
    )""",
    """CREATE TABLE `category_post` (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        category_id INTEGER,
        post_id INTEGER
    )""",
]

DATA = [
    "INSERT INTO `user` (id, name, active, metadata) VALUES (1, 'Alice', 1, '{\"role\": \"admin\"}')",
    "INSERT INTO `user` (id, name, active, metadata) VALUES (2, 'Bob', 0, NULL)",
    "INSERT INTO `post` (id, title, pubdate, isPublished, points, user_id) VALUES (1, 'First', '2024-01-01 10:00:00', 1, 10, 1)",
    "INSERT INTO `post` (id, title, pubdate, isPublished, points, user_id) VALUES (2, 'Second', NULL, 0, 5, 1)",
    "INSERT INTO `post` (id, title, pubdate, isPublished, points, user_id) VALUES (3, 'Third', NULL, 1, 7, 2)",
    "INSERT INTO `post` (id, title, pubdate, isPublished, points, user_id) VALUES (4, 'Orphan', NULL, 0, 3, NULL)",
    "INSERT INTO `comment` (id, text, createdAt, post_id) VALUES (1, 'Nice', '2024-01-02 08:30:00', 1)",
    "INSERT INTO `comment` (id, text, createdAt, post_id) VALUES (2, 'Great', NULL, 1)",
    "INSERT INTO `comment` (id, text, createdAt, post_id) VALUES (3, 'Meh', NULL, 3)",
    "INSERT INTO `category` (id, name) VALUES (1, 'News')",
    "INSERT INTO `category` (id, name) VALUES (2, 'Tech')",
    "INSERT INTO `category` (id, name) VALUES (3, 'Empty')",
    "INSERT INTO `category_post` (category_id, post_id) VALUES (1, 1)",
    "INSERT INTO `category_post` (category_id, post_id) VALUES (2, 1)",
    "INSERT INTO `category_post` (category_id, post_id) VALUES (2, 3)",
]


@pytest.fixture(scope="function")
def db(tmp_path):
    """A SQLite database with the blog schema, empty."""
    path = tmp_path / "blog.sqlite3"
    logging.getLogger("simplecrud").debug(path)
    database = Database.from_url(f"sqlite:///{path}")
    for statement in SCHEMA:
        database.execute(statement)
    yield database
    database.close()


@pytest.fixture(scope="function")
def blog(db):
    """The blog database with users, posts, comments and categories."""
    for statement in DATA:
        db.execute(statement)
    return db


@pytest.fixture(scope="function")
def statements(db, monkeypatch):
    """SQL of every statement executed through the connection from now on."""
    executed: list[str] = []
    execute = db.connection.execute

    def recording_execute(sql, params=None):
        executed.append(sql)
        return execute(sql, params)

    monkeypatch.setattr(db.connection, "execute", recording_execute)
    return executed
