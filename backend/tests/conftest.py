import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from studx.database.connection import mongo_db_dependency
from studx.main import app
from studx.repositories.conversation_repository import ConversationRepository
from studx.repositories.message_repository import MessageRepository
from studx.repositories.user_repository import UserRepository
from studx.services.chat_service import ChatService
from studx.utils.security import create_access_token


@pytest.fixture
async def db():
    database = AsyncMongoMockClient()["studx_test"]
    await ConversationRepository(database).ensure_indexes()
    await MessageRepository(database).ensure_indexes()
    return database


async def seed_user(db, email: str, full_name: str, branch: str, is_verified: bool = True) -> str:
    result = await db["users"].insert_one(
        {"email": email, "full_name": full_name, "branch": branch, "is_verified": is_verified}
    )
    return str(result.inserted_id)


@pytest.fixture
async def users(db):
    return {
        "aarav": await seed_user(db, "aarav@vit.edu", "Aarav Shah", "Computer"),
        "priya": await seed_user(db, "priya@vit.edu", "Priya", "Mechanical"),
        "rohan": await seed_user(db, "rohan@vit.edu", "Rohan Kulkarni", "E&TC"),
        "meera": await seed_user(db, "meera@vit.edu", "Meera Joshi", "IT"),
    }


@pytest.fixture
async def profiles(db, users):
    repo = UserRepository(db)
    return {name: await repo.get_user_by_id(uid) for name, uid in users.items()}


@pytest.fixture
def chat_service(db):
    return ChatService(MessageRepository(db), ConversationRepository(db), UserRepository(db))


@pytest.fixture
async def api(db):
    app.dependency_overrides[mongo_db_dependency] = lambda: db
    # unhandled errors come back as the 500 response the app rendered
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver/api") as client:
        yield client
    app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def auth():
    return auth_headers
