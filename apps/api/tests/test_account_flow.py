from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import get_db
from main import app
from models.account import Account
from models.video import Video
from services.blob_store import get_blob_store


@pytest_asyncio.fixture
async def account_client(session_maker, blob_store):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    with patch("services.crypto.settings.PASSWORD_HASH_ITERATIONS", 1000):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client, session_maker

    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_blob_store, None)


async def _register(client, name="Alice", email="alice@example.com", password="secret123"):
    resp = await client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 200, resp.text
    payload = resp.json()
    return payload["user"], {"Authorization": f"Bearer {payload['token']}"}


@pytest.mark.asyncio
async def test_register_login_and_me(account_client):
    client, _ = account_client
    user, headers = await _register(client, email="Alice@Example.com")
    assert user["email"] == "alice@example.com"
    assert user["name"] == "Alice"

    login = await client.post("/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert login.status_code == 200
    assert login.json()["user"]["id"] == user["id"]

    bad = await client.post("/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert bad.status_code == 400
    assert bad.json() == {"error": "Invalid credentials"}

    me = await client.get("/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == user["id"]


@pytest.mark.asyncio
async def test_register_rejects_duplicates_and_short_passwords(account_client):
    client, _ = account_client
    await _register(client)

    dup = await client.post(
        "/auth/register",
        json={"name": "Again", "email": "alice@example.com", "password": "secret123"},
    )
    assert dup.status_code == 400
    assert dup.json() == {"error": "Email already exists"}

    short = await client.post("/auth/register", json={"name": "Bob", "email": "bob@example.com", "password": "123"})
    assert short.status_code == 400
    assert short.json()["error"].startswith("password:")


@pytest.mark.asyncio
async def test_update_profile(account_client):
    client, _ = account_client
    _, headers = await _register(client)
    await _register(client, name="Bob", email="bob@example.com")

    resp = await client.put("/auth/profile", json={"name": "Alicia", "email": "alicia@example.com"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Profile updated successfully"
    assert resp.json()["user"]["name"] == "Alicia"

    taken = await client.put("/auth/profile", json={"name": "Alicia", "email": "bob@example.com"}, headers=headers)
    assert taken.status_code == 400
    assert taken.json() == {"error": "Email already exists"}

    too_short = await client.put("/auth/profile", json={"name": "A", "email": "a@example.com"}, headers=headers)
    assert too_short.status_code == 400


@pytest.mark.asyncio
async def test_update_profile_checks_name_length_after_trimming(account_client):
    client, session_maker = account_client
    user, headers = await _register(client)

    padded = await client.put("/auth/profile", json={"name": "  a  ", "email": "alice@example.com"}, headers=headers)
    assert padded.status_code == 400
    assert padded.json()["error"].startswith("name: ")

    trimmed = await client.put(
        "/auth/profile",
        json={"name": "  Al  ", "email": "  ALICE@Example.com "},
        headers=headers,
    )
    assert trimmed.status_code == 200
    assert trimmed.json()["user"]["name"] == "Al"
    assert trimmed.json()["user"]["email"] == "alice@example.com"

    async with session_maker() as session:
        account = await session.get(Account, user["id"])
        assert account.name == "Al"


@pytest.mark.asyncio
async def test_delete_account_cascades_file_and_link_videos(account_client, blob_store):
    client, session_maker = account_client
    user, headers = await _register(client)
    _, other_headers = await _register(client, name="Bob", email="bob@example.com")

    upload = await client.post(
        "/videos",
        data={"title": "Upload"},
        files={"video": ("x.mp4", b"fake-video", "video/mp4")},
        headers=headers,
    )
    locator = upload.json()["video"]["video_url"]
    await client.post("/videos", data={"title": "Link", "video_url": "https://example.com/v"}, headers=headers)
    other_upload = await client.post(
        "/videos",
        data={"title": "Bob's"},
        files={"video": ("y.mp4", b"other-video", "video/mp4")},
        headers=other_headers,
    )
    other_locator = other_upload.json()["video"]["video_url"]

    resp = await client.delete("/account", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Account and all associated data deleted successfully",
        "details": {"videosDeleted": 2, "filesDeleted": 1},
    }
    assert not blob_store.exists(locator)
    assert blob_store.exists(other_locator)

    async with session_maker() as session:
        videos = (await session.execute(select(Video))).scalars().all()
        assert [v.title for v in videos] == ["Bob's"]
        assert (await session.execute(select(Account).where(Account.id == user["id"]))).scalar_one_or_none() is None

    login = await client.post("/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert login.status_code == 400

    again = await client.delete("/account", headers=headers)
    assert again.status_code == 404
    assert again.json() == {"error": "User not found"}


@pytest.mark.asyncio
async def test_delete_account_with_missing_file_reports_zero_files(account_client, blob_store):
    client, _ = account_client
    _, headers = await _register(client)
    upload = await client.post(
        "/videos",
        data={"title": "Upload"},
        files={"video": ("x.mp4", b"fake-video", "video/mp4")},
        headers=headers,
    )
    blob_store.resolve(upload.json()["video"]["video_url"]).unlink()

    resp = await client.delete("/account", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["details"] == {"videosDeleted": 1, "filesDeleted": 0}


@pytest.mark.asyncio
async def test_delete_account_commit_failure_returns_500(account_client):
    client, session_maker = account_client
    user, headers = await _register(client)
    await client.post("/videos", data={"title": "Link", "video_url": "https://example.com/v"}, headers=headers)

    failure = OperationalError("COMMIT", {}, Exception("database is locked"))
    with patch.object(AsyncSession, "commit", new=AsyncMock(side_effect=failure)):
        resp = await client.delete("/account", headers=headers)
    assert resp.status_code == 500
    assert "error" in resp.json()

    async with session_maker() as session:
        assert (await session.execute(select(Account).where(Account.id == user["id"]))).scalar_one_or_none()
        assert len((await session.execute(select(Video))).scalars().all()) == 1
