"""
tests/conftest.py — Shared Test Fixtures
=========================================

Every test gets a fresh in-memory MongoDB (mongomock) behind the default
mongoengine connection.
"""

from __future__ import annotations

import mongomock
import pytest
from flask_jwt_extended import create_access_token

from hubthreads import create_app
from hubthreads.db import connect_db, disconnect_db
from hubthreads.models import Community, Thread, User
from hubthreads.signals import path_invalidated

TEST_DB = "hubthreads_test"


@pytest.fixture
def db():
    client = connect_db("mongodb://localhost", TEST_DB, client_class=mongomock.MongoClient)
    yield client
    client.drop_database(TEST_DB)
    disconnect_db()


@pytest.fixture
def make_user(db):
    def _make_user(external_id, username=None, name=None, **fields):
        return User(
            external_id=external_id,
            username=username or external_id,
            name=name or external_id.title(),
            image=f"https://img.example.com/{external_id}.png",
            **fields,
        ).save()

    return _make_user


@pytest.fixture
def make_community(db):
    def _make_community(external_id, creator, name=None, username=None, **fields):
        return Community(
            external_id=external_id,
            name=name or external_id.title(),
            username=username or external_id,
            created_by=creator,
            **fields,
        ).save()

    return _make_community


@pytest.fixture
def make_thread(db):
    def _make_thread(text, author, parent=None, community=None):
        thread = Thread(text=text, author=author, parent=parent, community=community).save()
        if parent is not None:
            Thread.objects(pk=parent.pk).update_one(push__children=thread)
        else:
            User.objects(pk=author.pk).update_one(push__threads=thread)
        if community is not None:
            Community.objects(pk=community.pk).update_one(push__threads=thread)
        return thread

    return _make_thread


@pytest.fixture
def app(db):
    app = create_app({
        'TESTING': True,
        'MONGODB_URI': "mongodb://localhost",
        'MONGODB_DB': TEST_DB,
        'MONGODB_CLIENT_CLASS': mongomock.MongoClient,
        'JWT_SECRET_KEY': "test-secret-for-pytest-only-" + "x" * 40,
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def _auth_headers(external_id):
        with app.app_context():
            token = create_access_token(identity=external_id)
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers


@pytest.fixture
def invalidated():
    """Paths signalled as stale while the test runs."""
    paths = []

    def receiver(path):
        paths.append(path)

    path_invalidated.connect(receiver)
    yield paths
    path_invalidated.disconnect(receiver)
