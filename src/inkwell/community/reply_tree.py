"""Reply tree fetch and assembly.

Replies for a post are fetched flat, depth-capped and ordered by
(depth, created_at), which guarantees every parent is seen before its
children. :func:`build_reply_tree` then nests them in one pass.

What happens to a reply whose parent is not in the fetched set is governed
by ``orphan_reply_policy``:

``promote``
    The orphan becomes a root node.
``drop``
    The orphan and everything under it are omitted.
``tombstone``
    Soft-deleted replies are fetched too and rendered with their content
    hidden, so children keep their place. Deleted nodes with no live
    descendant are pruned.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.community.presenters import author_info
from inkwell.community.schemas import ReplyNode
from inkwell.db.models import Reply

ORPHAN_POLICIES = ("promote", "drop", "tombstone")
DELETED_PLACEHOLDER = "[deleted]"


async def fetch_reply_rows(
    db: AsyncSession,
    post_id: int,
    max_depth: int = 3,
    include_deleted: bool = False,
) -> Sequence[Reply]:
    """Load a post's replies up to ``max_depth`` in tree-building order."""
    stmt = select(Reply).where(Reply.post_id == post_id, Reply.depth <= max_depth)
    if not include_deleted:
        stmt = stmt.where(Reply.is_deleted.is_(False))
    stmt = stmt.order_by(Reply.depth, Reply.created_at, Reply.id)
    result = await db.execute(stmt)
    return result.scalars().all()


def _to_node(reply: Reply, kinds: Iterable[str]) -> ReplyNode:
    kinds = set(kinds)
    if reply.is_deleted:
        return ReplyNode(
            id=reply.id,
            post_id=reply.post_id,
            parent_reply_id=reply.parent_reply_id,
            depth=reply.depth,
            content=DELETED_PLACEHOLDER,
            author=author_info(reply.author),
            created_at=reply.created_at,
            is_deleted=True,
        )
    return ReplyNode(
        id=reply.id,
        post_id=reply.post_id,
        parent_reply_id=reply.parent_reply_id,
        depth=reply.depth,
        content=reply.content,
        author=author_info(reply.author),
        created_at=reply.created_at,
        edited_at=reply.edited_at,
        likes=reply.likes_count,
        dislikes=reply.dislikes_count,
        is_edited=reply.is_edited,
        is_liked="like" in kinds,
        is_disliked="dislike" in kinds,
    )


def _prune_dead(nodes: list[ReplyNode]) -> list[ReplyNode]:
    kept: list[ReplyNode] = []
    for node in nodes:
        node.replies = _prune_dead(node.replies)
        if node.is_deleted and not node.replies:
            continue
        kept.append(node)
    return kept


def build_reply_tree(
    replies: Iterable[Reply],
    orphan_policy: str = "promote",
    viewer_interactions: Mapping[int, Iterable[str]] | None = None,
    max_depth: int = 3,
) -> list[ReplyNode]:
    """
    Nest a flat set of replies into a forest of :class:`ReplyNode`.

    Args:
        replies: Reply rows for one post, in any order.
        orphan_policy: ``promote``, ``drop`` or ``tombstone``.
        viewer_interactions: Reply id -> interaction kinds held by the viewer,
            used to set ``isLiked`` / ``isDisliked``.
        max_depth: Rows deeper than this are ignored.

    Returns:
        Root nodes in creation order, each carrying its children in creation
        order. Empty input yields an empty list.
    """
    if orphan_policy not in ORPHAN_POLICIES:
        msg = f"Unknown orphan reply policy: {orphan_policy}"
        raise ValueError(msg)
    viewer_interactions = viewer_interactions or {}

    ordered = sorted(
        (r for r in replies if r.depth <= max_depth),
        key=lambda r: (r.depth, r.created_at, r.id),
    )

    nodes: dict[int, ReplyNode] = {}
    roots: list[ReplyNode] = []
    for reply in ordered:
        if reply.is_deleted and orphan_policy != "tombstone":
            continue
        node = _to_node(reply, viewer_interactions.get(reply.id, ()))
        parent_id = reply.parent_reply_id
        if parent_id is None:
            roots.append(node)
        elif parent_id in nodes:
            nodes[parent_id].replies.append(node)
        elif orphan_policy == "drop":
            continue
        else:
            roots.append(node)
        nodes[reply.id] = node

    if orphan_policy == "tombstone":
        roots = _prune_dead(roots)
    return roots
