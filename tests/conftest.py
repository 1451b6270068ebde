import os
from unittest import mock

import mongomock
import pytest
from fastapi.testclient import TestClient

# Use a dedicated database name; the client itself is in-memory
os.environ['MONGODB_URI'] = 'mongodb://localhost:27017'
os.environ['MONGODB_DB'] = 'bus_reservation_test'
os.environ.setdefault('LOG_LEVEL', 'WARNING')

# database.py builds its client at import time, so import it under the patch
with mock.patch('pymongo.MongoClient', mongomock.MongoClient):
    import database  # noqa: E402

from main import app  # noqa: E402
from tests.helpers import insert_bus, insert_user  # noqa: E402


@pytest.fixture(autouse=True)
def clean_db():
    for collection in (database.users, database.buses, database.bookings, database.seat_claims):
        collection.delete_many({})
    database.ensure_indexes()
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def user():
    return insert_user('buyer@test.com', name='Test Buyer')


@pytest.fixture
def other_user():
    return insert_user('another_buyer@test.com', name='Another Buyer')


@pytest.fixture
def admin():
    return insert_user('admin@test.com', role='admin', name='Test Admin')


@pytest.fixture
def bus():
    return insert_bus()
