import pytest
import pytest_asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from httpx import AsyncClient, ASGITransport

from smartsplit.main import app
from smartsplit.core.auth import get_current_user
from smartsplit.db.mongo import get_db
from smartsplit.models.user import UserInDB


def make_cursor(docs):
    """Motor-like cursor: find(...).sort(...).to_list(n) / aggregate(...).to_list(n)."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


def make_collection():
    collection = MagicMock()
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.find_one = AsyncMock(return_value=None)
    collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.find = MagicMock(return_value=make_cursor([]))
    collection.aggregate = MagicMock(return_value=make_cursor([]))
    return collection


def facet_totals(docs, group_id):
    """What the expenses $facet pipeline returns for the given documents."""
    paid, owed = {}, {}
    for doc in docs:
        if doc["group_id"] != group_id:
            continue
        paid[doc["payer_id"]] = paid.get(doc["payer_id"], 0) + doc["amount_cents"]
        for split in doc["splits"]:
            owed[split["user_id"]] = owed.get(split["user_id"], 0) + split["amount_cents"]
    return [{
        "paid": [{"_id": uid, "total": total} for uid, total in paid.items()],
        "owed": [{"_id": uid, "total": total} for uid, total in owed.items()],
    }]


@pytest.fixture
def cursor_factory():
    return make_cursor


@pytest.fixture
def mock_db():
    """Mock MongoDB database with the collections the API touches."""
    db = MagicMock()
    db.users = make_collection()
    db.groups = make_collection()
    db.expenses = make_collection()
    db.password_reset_tokens = make_collection()
    return db


@pytest.fixture
def ledger_db(mock_db):
    """
    mock_db whose expenses collection keeps inserted documents and answers
    the balance aggregation from them.
    """
    stored = []

    async def insert_one(doc):
        stored.append(doc)
        return MagicMock(inserted_id=doc["_id"])

    def aggregate(pipeline):
        group_id = pipeline[0]["$match"]["group_id"]
        return make_cursor(facet_totals(stored, group_id))

    mock_db.expenses.insert_one = AsyncMock(side_effect=insert_one)
    mock_db.expenses.aggregate = MagicMock(side_effect=aggregate)
    mock_db.stored_expenses = stored
    return mock_db


def make_user(username: str) -> UserInDB:
    now = datetime.now(timezone.utc)
    return UserInDB(
        _id=ObjectId(),
        username=username,
        email=f"{username.lower()}@example.com",
        hashed_password="not-a-real-hash",
        created_at=now,
        updated_at=now
    )


@pytest.fixture
def users():
    """Alice, Bob and Charlie."""
    return [make_user("Alice"), make_user("Bob"), make_user("Charlie")]


@pytest.fixture
def group_doc(users):
    """Group document with all three users as members, in join order."""
    now = datetime.now(timezone.utc)
    return {
        "_id": ObjectId(),
        "name": "Trip",
        "created_by": str(users[0].id),
        "members": [
            {"user_id": str(u.id), "username": u.username, "joined_at": now}
            for u in users
        ],
        "created_at": now,
        "updated_at": now,
    }


@pytest_asyncio.fixture
async def client(mock_db, users):
    """HTTP client authenticated as Alice, backed by mock_db."""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: users[0]
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
