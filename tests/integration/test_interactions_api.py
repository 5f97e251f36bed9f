"""Integration tests: the interaction ledger over HTTP."""

from __future__ import annotations

import pytest
from helpers import create_post_via_api, create_reply_via_api, fetch_post, fetch_reply, set_post_flags
from httpx import AsyncClient
from sqlalchemy import select

from inkwell.db.models import Interaction

INTERACTIONS = "/api/community/interactions"


def _body(target_id: int, kind: str, target_type: str = "post") -> dict:
    return {"targetType": target_type, "targetId": target_id, "interactionType": kind}


async def _ledger_rows(database, user_id: int, target_id: int) -> list[str]:
    async with database.session_factory() as session:
        result = await session.execute(
            select(Interaction.interaction_type).where(
                Interaction.user_id == user_id,
                Interaction.target_type == "post",
                Interaction.target_id == target_id,
            )
        )
        return sorted(result.scalars().all())


class TestAddInteraction:
    @pytest.mark.asyncio
    async def test_like_is_idempotent(self, client: AsyncClient, database, alice_headers, bob, bob_headers):
        """Liking twice keeps one ledger row."""
        post = await create_post_via_api(client, alice_headers)

        first = await client.post(INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        assert first.status_code == 200
        assert first.json()["data"]["isNewInteraction"] is True
        assert first.json()["message"] == "like added successfully"

        second = await client.post(INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        assert second.status_code == 200
        assert second.json()["data"]["isNewInteraction"] is False
        assert second.json()["message"] == "You have already liked this post"
        assert second.json()["data"]["counts"] == {"likes": 1, "dislikes": 0, "views": 0}

        assert await _ledger_rows(database, bob.id, post["id"]) == ["like"]

    @pytest.mark.asyncio
    async def test_dislike_replaces_like(self, client: AsyncClient, database, alice_headers, bob, bob_headers):
        """Dislike removes an earlier like."""
        post = await create_post_via_api(client, alice_headers)
        await client.post(INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        response = await client.post(INTERACTIONS, json=_body(post["id"], "dislike"), headers=bob_headers)

        assert response.json()["data"]["counts"] == {"likes": 0, "dislikes": 1, "views": 0}
        assert await _ledger_rows(database, bob.id, post["id"]) == ["dislike"]
        stored = await fetch_post(database, post["id"])
        assert (stored.likes_count, stored.dislikes_count) == (0, 1)

    @pytest.mark.asyncio
    async def test_bookmark_coexists_with_like(self, client: AsyncClient, database, alice_headers, bob, bob_headers):
        """Bookmarks are independent of likes."""
        post = await create_post_via_api(client, alice_headers)
        await client.post(INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        await client.post(INTERACTIONS, json=_body(post["id"], "bookmark"), headers=bob_headers)
        assert await _ledger_rows(database, bob.id, post["id"]) == ["bookmark", "like"]

    @pytest.mark.asyncio
    async def test_counts_across_users(self, client: AsyncClient, database, alice_headers, bob_headers):
        """Counts sum every user's likes."""
        post = await create_post_via_api(client, alice_headers)
        await client.post(INTERACTIONS, json=_body(post["id"], "like"), headers=alice_headers)
        response = await client.post(INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        assert response.json()["data"]["counts"]["likes"] == 2

    @pytest.mark.asyncio
    async def test_reply_target(self, client: AsyncClient, database, alice_headers, bob_headers):
        """Reply interactions update reply counters."""
        post = await create_post_via_api(client, alice_headers)
        reply = await create_reply_via_api(client, alice_headers, post["id"])

        response = await client.post(INTERACTIONS, json=_body(reply["id"], "dislike", "reply"), headers=bob_headers)
        assert response.status_code == 200
        assert response.json()["data"]["counts"] == {"likes": 0, "dislikes": 1, "views": None}
        assert (await fetch_reply(database, reply["id"])).dislikes_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("target_type", "kind"),
        [("comment", "like"), ("post", "view"), ("post", "love")],
    )
    async def test_invalid_types(self, client: AsyncClient, alice_headers, target_type, kind):
        """Unknown target or interaction types are 400."""
        post = await create_post_via_api(client, alice_headers)
        response = await client.post(INTERACTIONS, json=_body(post["id"], kind, target_type), headers=alice_headers)
        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_missing_target(self, client: AsyncClient, alice_headers):
        """Interacting with a missing post is 404."""
        response = await client.post(INTERACTIONS, json=_body(9999, "like"), headers=alice_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "post not found"

    @pytest.mark.asyncio
    async def test_deleted_target(self, client: AsyncClient, alice_headers, bob_headers):
        """Soft-deleted posts cannot be liked."""
        post = await create_post_via_api(client, alice_headers)
        await client.delete(f"/api/community/posts/{post['id']}", headers=alice_headers)
        response = await client.post(INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient, alice_headers):
        """Anonymous interactions are 401."""
        post = await create_post_via_api(client, alice_headers)
        response = await client.post(INTERACTIONS, json=_body(post["id"], "like"))
        assert response.status_code == 401


class TestRemoveInteraction:
    @pytest.mark.asyncio
    async def test_remove_existing(self, client: AsyncClient, alice_headers, bob_headers):
        """Removing a held like drops the count."""
        post = await create_post_via_api(client, alice_headers)
        await client.post(INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)

        response = await client.request("DELETE", INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["wasRemoved"] is True
        assert data["counts"]["likes"] == 0
        assert response.json()["message"] == "like removed successfully"

    @pytest.mark.asyncio
    async def test_remove_missing_is_not_an_error(self, client: AsyncClient, alice_headers, bob_headers):
        """Removing nothing is a 200 no-op."""
        post = await create_post_via_api(client, alice_headers)
        response = await client.request(
            "DELETE", INTERACTIONS, json=_body(post["id"], "bookmark"), headers=bob_headers
        )
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["data"]["wasRemoved"] is False
        assert response.json()["message"] == "No bookmark found to remove"


class TestListInteractions:
    @pytest.mark.asyncio
    async def test_grouped_by_target(self, client: AsyncClient, alice_headers, bob_headers):
        """Viewer interactions are grouped per target id."""
        first = await create_post_via_api(client, alice_headers, title="One")
        second = await create_post_via_api(client, alice_headers, title="Two")
        untouched = await create_post_via_api(client, alice_headers, title="Three")
        await client.post(INTERACTIONS, json=_body(first["id"], "like"), headers=bob_headers)
        await client.post(INTERACTIONS, json=_body(first["id"], "bookmark"), headers=bob_headers)
        await client.post(INTERACTIONS, json=_body(second["id"], "dislike"), headers=bob_headers)

        response = await client.get(
            INTERACTIONS,
            params=[
                ("targetType", "post"),
                ("targetIds", first["id"]),
                ("targetIds", second["id"]),
                ("targetIds", untouched["id"]),
            ],
            headers=bob_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert sorted(data[str(first["id"])]) == ["bookmark", "like"]
        assert data[str(second["id"])] == ["dislike"]
        assert str(untouched["id"]) not in data

    @pytest.mark.asyncio
    async def test_empty_ids(self, client: AsyncClient, alice_headers):
        """No target ids yields an empty mapping."""
        response = await client.get(INTERACTIONS, params={"targetType": "post"}, headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["data"] == {}

    @pytest.mark.asyncio
    async def test_missing_target_type(self, client: AsyncClient, alice_headers):
        """targetType is required."""
        response = await client.get(INTERACTIONS, headers=alice_headers)
        assert response.status_code == 400


class TestCounterRefresh:
    @pytest.mark.asyncio
    async def test_corrupted_counters_rederived_from_ledger(
        self, client: AsyncClient, database, alice_headers, bob_headers
    ):
        """Cached counters are recomputed from ledger rows, never bumped in place."""
        post = await create_post_via_api(client, alice_headers)
        await set_post_flags(database, post["id"], likes_count=99, dislikes_count=7)

        added = await client.post(INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        assert added.json()["data"]["counts"] == {"likes": 1, "dislikes": 0, "views": 0}
        stored = await fetch_post(database, post["id"])
        assert (stored.likes_count, stored.dislikes_count) == (1, 0)

        await set_post_flags(database, post["id"], likes_count=42, dislikes_count=3)
        removed = await client.request("DELETE", INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        assert removed.json()["data"]["counts"] == {"likes": 0, "dislikes": 0, "views": 0}
        stored = await fetch_post(database, post["id"])
        assert (stored.likes_count, stored.dislikes_count) == (0, 0)

    @pytest.mark.asyncio
    async def test_removing_nothing_still_heals_counters(
        self, client: AsyncClient, database, alice_headers, bob_headers
    ):
        """A no-op removal still rewrites stale counters."""
        post = await create_post_via_api(client, alice_headers)
        await set_post_flags(database, post["id"], likes_count=5)
        await client.request("DELETE", INTERACTIONS, json=_body(post["id"], "like"), headers=bob_headers)
        assert (await fetch_post(database, post["id"])).likes_count == 0
