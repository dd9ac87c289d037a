"""
Like and share endpoint tests.
"""
import uuid

import pytest
from httpx import AsyncClient


async def _publication(client: AsyncClient, headers: dict) -> dict:
    resp = await client.post("/api/v1/publications", json={"content": "react to me"}, headers=headers)
    assert resp.status_code == 200
    return resp.json()


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_like_and_unlike(async_client: AsyncClient, register_user):
    _, author = await register_user("liked")
    fan_id, fan = await register_user("liker")
    pub = await _publication(async_client, author)
    url = f"/api/v1/publications/{pub['id']}/likes"

    resp = await async_client.post(url, headers=fan)
    assert resp.status_code == 200
    assert resp.json()["user_id"] == fan_id

    likes = (await async_client.get(url, headers=author)).json()
    assert [like["user_id"] for like in likes] == [fan_id]
    detail = (await async_client.get(f"/api/v1/publications/{pub['id']}", headers=author)).json()
    assert detail["likes_count"] == 1

    resp = await async_client.delete(url, headers=fan)
    assert resp.status_code == 200
    detail = (await async_client.get(f"/api/v1/publications/{pub['id']}", headers=author)).json()
    assert detail["likes_count"] == 0


@pytest.mark.asyncio
async def test_double_like_returns_409(async_client: AsyncClient, register_user):
    _, headers = await register_user("eager")
    pub = await _publication(async_client, headers)
    url = f"/api/v1/publications/{pub['id']}/likes"

    assert (await async_client.post(url, headers=headers)).status_code == 200
    resp = await async_client.post(url, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "conflict"


@pytest.mark.asyncio
async def test_unlike_without_like_returns_404(async_client: AsyncClient, register_user):
    _, headers = await register_user("neutral")
    pub = await _publication(async_client, headers)
    resp = await async_client.delete(f"/api/v1/publications/{pub['id']}/likes", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "You have not liked this publication!"


@pytest.mark.asyncio
async def test_unlike_only_removes_own_like(async_client: AsyncClient, register_user):
    _, first = await register_user("first")
    _, second = await register_user("second")
    pub = await _publication(async_client, first)
    url = f"/api/v1/publications/{pub['id']}/likes"

    await async_client.post(url, headers=first)
    resp = await async_client.delete(url, headers=second)
    assert resp.status_code == 404
    assert len((await async_client.get(url, headers=first)).json()) == 1


@pytest.mark.asyncio
async def test_like_unknown_publication_returns_404(async_client: AsyncClient, register_user):
    _, headers = await register_user("blind")
    resp = await async_client.post(f"/api/v1/publications/{uuid.uuid4()}/likes", headers=headers)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Shares
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_share_and_unshare(async_client: AsyncClient, register_user):
    _, author = await register_user("original")
    sharer_id, sharer = await register_user("sharer")
    pub = await _publication(async_client, author)
    url = f"/api/v1/publications/{pub['id']}/shares"

    resp = await async_client.post(url, headers=sharer)
    assert resp.status_code == 200
    assert resp.json()["publication_id"] == pub["id"]

    shares = (await async_client.get(url, headers=author)).json()
    assert [s["user_id"] for s in shares] == [sharer_id]

    resp = await async_client.post(url, headers=sharer)
    assert resp.status_code == 409

    assert (await async_client.delete(url, headers=sharer)).status_code == 200
    assert (await async_client.delete(url, headers=sharer)).status_code == 404
