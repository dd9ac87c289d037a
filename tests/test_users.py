"""
User endpoint tests: registration, login, profile, friendships and the
aggregate metrics endpoint.
"""
import uuid

import pytest
from httpx import AsyncClient


# ---------------------------------------------------------------------------
# Registration + login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_returns_token_and_user(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/users/register", json={
        "email": "New.User@Example.com",
        "password": "secret123",
        "first_name": "New",
        "last_name": "User",
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["email"] == "new.user@example.com"
    assert "hashed_password" not in data["user"]


@pytest.mark.asyncio
async def test_register_duplicate_email_returns_409(async_client: AsyncClient, register_user):
    await register_user("twin")
    resp = await async_client.post("/api/v1/users/register", json={
        "email": "TWIN@example.com",
        "password": "secret123",
        "first_name": "Twin",
        "last_name": "Again",
    })
    assert resp.status_code == 409
    assert resp.json()["detail"] == "User with this email already exists!"


@pytest.mark.asyncio
async def test_register_invalid_payload_returns_400(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/users/register", json={
        "email": "not-an-email",
        "password": "123",
        "first_name": "",
        "last_name": "x" * 16,
    })
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_login(async_client: AsyncClient, register_user):
    user_id, _ = await register_user("loginuser")
    resp = await async_client.post("/api/v1/users/login", json={
        "email": "loginuser@example.com",
        "password": "secret123",
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["id"] == user_id

    me = await async_client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["id"] == user_id


@pytest.mark.asyncio
async def test_login_wrong_password_returns_401(async_client: AsyncClient, register_user):
    await register_user("careless")
    resp = await async_client.post("/api/v1/users/login", json={
        "email": "careless@example.com",
        "password": "wrong-password",
    })
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password!"


@pytest.mark.asyncio
async def test_login_unknown_email_returns_401(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/users/login", json={
        "email": "nobody@example.com",
        "password": "secret123",
    })
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_own_profile(async_client: AsyncClient, register_user):
    _, headers = await register_user("profiled")
    resp = await async_client.put("/api/v1/users/me", json={"bio": "Hello there"}, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["bio"] == "Hello there"
    assert data["first_name"] == "Profiled"


@pytest.mark.asyncio
async def test_list_and_get_users(async_client: AsyncClient, register_user):
    first_id, headers = await register_user("first")
    await register_user("second")

    resp = await async_client.get("/api/v1/users", headers=headers)
    assert resp.status_code == 200
    assert len(resp.json()) == 2

    resp = await async_client.get(f"/api/v1/users/{first_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "first@example.com"


@pytest.mark.asyncio
async def test_get_unknown_user_returns_404(async_client: AsyncClient, register_user):
    _, headers = await register_user("looker")
    resp = await async_client.get(f"/api/v1/users/{uuid.uuid4()}", headers=headers)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Friendships
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_add_friend_is_symmetric(async_client: AsyncClient, register_user):
    alice_id, alice = await register_user("alice")
    bob_id, bob = await register_user("bob")

    resp = await async_client.post(f"/api/v1/users/{bob_id}/friend", headers=alice)
    assert resp.status_code == 200

    assert (await async_client.get(f"/api/v1/users/{bob_id}/is-friend", headers=alice)).json() == {"are_friends": True}
    assert (await async_client.get(f"/api/v1/users/{alice_id}/is-friend", headers=bob)).json() == {"are_friends": True}

    friends = (await async_client.get(f"/api/v1/users/{bob_id}/friends", headers=alice)).json()
    assert [f["id"] for f in friends] == [alice_id]


@pytest.mark.asyncio
async def test_add_self_as_friend_returns_400(async_client: AsyncClient, register_user):
    me_id, me = await register_user("narcissus")
    resp = await async_client.post(f"/api/v1/users/{me_id}/friend", headers=me)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot add yourself as a friend!"


@pytest.mark.asyncio
async def test_add_friend_twice_returns_409(async_client: AsyncClient, register_user):
    _, carol = await register_user("carol")
    dave_id, _ = await register_user("dave")
    await async_client.post(f"/api/v1/users/{dave_id}/friend", headers=carol)
    resp = await async_client.post(f"/api/v1/users/{dave_id}/friend", headers=carol)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_add_unknown_friend_returns_404(async_client: AsyncClient, register_user):
    _, headers = await register_user("hopeful")
    resp = await async_client.post(f"/api/v1/users/{uuid.uuid4()}/friend", headers=headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_remove_friend(async_client: AsyncClient, register_user):
    erin_id, erin = await register_user("erin")
    frank_id, frank = await register_user("frank")
    await async_client.post(f"/api/v1/users/{frank_id}/friend", headers=erin)

    # either side may end the friendship
    resp = await async_client.delete(f"/api/v1/users/{erin_id}/friend", headers=frank)
    assert resp.status_code == 200
    assert (await async_client.get(f"/api/v1/users/{frank_id}/is-friend", headers=erin)).json() == {"are_friends": False}

    resp = await async_client.delete(f"/api/v1/users/{erin_id}/friend", headers=frank)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_metrics(async_client: AsyncClient, register_user):
    _, headers = await register_user("counter")
    pub = (await async_client.post("/api/v1/publications", json={"content": "p"}, headers=headers)).json()
    await async_client.post(f"/api/v1/publications/{pub['id']}/comments", json={"content": "c1"}, headers=headers)
    await async_client.post(f"/api/v1/publications/{pub['id']}/comments", json={"content": "c2"}, headers=headers)
    await async_client.post(f"/api/v1/publications/{pub['id']}/likes", headers=headers)

    resp = await async_client.get("/api/v1/metrics", headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_users"] == 1
    assert data["total_publications"] == 1
    assert data["total_comments"] == 2
    assert data["total_likes"] == 1
    assert data["total_shares"] == 0
    assert data["avg_comments_per_publication"] == 2.0
    assert set(data["cache_info"]) == {"hits", "misses", "hit_rate"}


@pytest.mark.asyncio
async def test_update_extended_profile(async_client: AsyncClient, register_user):
    user_id, headers = await register_user("detailed")
    resp = await async_client.put("/api/v1/users/me", json={
        "birthday": "1994-05-17",
        "country": "Bulgaria",
        "state": "Varna",
        "gender": "female",
        "relationship_status": "married",
        "school": "Technical University",
        "phone_number": "+359 88 123 4567",
        "profile_picture_url": "https://cdn.example.com/u/avatar.png",
        "cover_photo_url": "https://cdn.example.com/u/cover.png",
    }, headers=headers)
    assert resp.status_code == 200

    data = (await async_client.get(f"/api/v1/users/{user_id}", headers=headers)).json()
    assert data["birthday"] == "1994-05-17"
    assert data["state"] == "Varna"
    assert data["gender"] == "female"
    assert data["relationship_status"] == "married"
    assert data["profile_picture_url"] == "https://cdn.example.com/u/avatar.png"
    # untouched fields keep their values
    assert data["first_name"] == "Detailed"


@pytest.mark.asyncio
async def test_update_profile_rejects_unknown_gender(async_client: AsyncClient, register_user):
    _, headers = await register_user("strict")
    resp = await async_client.put("/api/v1/users/me", json={"gender": "robot"}, headers=headers)
    assert resp.status_code == 400
