"""Community forum endpoints: posts, replies, interactions, categories."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.dependencies import get_current_user, get_optional_user
from inkwell.community import gate, ledger, post_service, reply_service
from inkwell.community.categories import CategoryCatalog, list_categories
from inkwell.community.listing import PostQuery, bookmark_counts, list_posts, make_pagination
from inkwell.community.presenters import post_response, reply_response
from inkwell.community.reply_tree import build_reply_tree, fetch_reply_rows
from inkwell.community.schemas import (
    AddInteractionData,
    ApiResponse,
    CategoryResponse,
    CreatePostRequest,
    CreateReplyRequest,
    DeleteReplyRequest,
    InteractionCounts,
    InteractionRequest,
    PostDetailData,
    PostListData,
    PostResponse,
    RemoveInteractionData,
    ReplyResponse,
    UpdatePostRequest,
    UpdateReplyRequest,
)
from inkwell.config import Settings
from inkwell.db.models import User
from inkwell.dependencies import get_app_settings, get_db

router = APIRouter(prefix="/api/community", tags=["Community"])

_PAST = {"like": "liked", "dislike": "disliked", "bookmark": "bookmarked"}


def _counts(counts: ledger.Counts) -> InteractionCounts:
    return InteractionCounts(likes=counts.likes, dislikes=counts.dislikes, views=counts.views)


# ── Posts ──


@router.get("/posts", response_model=ApiResponse[PostListData])
async def list_posts_endpoint(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    category: str = Query("all"),
    sort: str = Query("recent"),
    search: str | None = Query(None),
    featured_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """List live posts. Pinned posts lead under every sort mode."""
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    query = PostQuery(
        page=page,
        limit=limit,
        category=category,
        sort=sort,
        search=search,
        featured_only=featured_only,
    )
    posts, total = await list_posts(db, query)

    catalog = await CategoryCatalog.load(db, {p.category for p in posts})
    bookmarks = await bookmark_counts(db, [p.id for p in posts])
    items = [post_response(p, catalog, bookmarks.get(p.id, 0)) for p in posts]
    return ApiResponse(
        data=PostListData(posts=items, pagination=make_pagination(page, limit, total)),
        message="Posts retrieved successfully",
    )


@router.post("/posts", response_model=ApiResponse[PostResponse], status_code=201)
async def create_post_endpoint(
    body: CreatePostRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a post as the authenticated user."""
    post = await post_service.create_post(db, user, body.title, body.content, body.category, body.tags)
    await db.commit()

    catalog = await CategoryCatalog.load(db, [post.category])
    return ApiResponse(data=post_response(post, catalog), message="Post created successfully")


@router.get("/posts/{post_id}", response_model=ApiResponse[PostDetailData])
async def get_post_endpoint(
    post_id: int,
    include_replies: bool = Query(True),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Fetch one post with its reply forest.

    For a signed-in caller the reply nodes carry the caller's like/dislike
    state, and a view is recorded once the body is built.
    """
    post = await post_service.get_post(db, post_id)
    catalog = await CategoryCatalog.load(db, [post.category])
    bookmarks = await bookmark_counts(db, [post.id])

    viewer_kinds: list[str] = []
    replies = []
    if user is not None:
        held = await ledger.list_user_interactions(db, user.id, "post", [post.id])
        viewer_kinds = held.get(post.id, [])

    if include_replies:
        policy = settings.orphan_reply_policy
        rows = await fetch_reply_rows(
            db, post.id, settings.max_reply_depth, include_deleted=policy == "tombstone"
        )
        reply_kinds = {}
        if user is not None and rows:
            reply_kinds = await ledger.list_user_interactions(db, user.id, "reply", [r.id for r in rows])
        replies = build_reply_tree(rows, policy, reply_kinds, settings.max_reply_depth)

    data = PostDetailData(
        post=post_response(post, catalog, bookmarks.get(post.id, 0)),
        replies=replies,
        viewer_interactions=viewer_kinds,
    )

    if user is not None:
        await ledger.record_view(db, user.id, post.id)

    return ApiResponse(data=data, message="Post retrieved successfully")


@router.put("/posts/{post_id}", response_model=ApiResponse[PostResponse])
async def update_post_endpoint(
    post_id: int,
    body: UpdatePostRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Edit a post's title, content or tags."""
    post = await post_service.update_post(db, user, post_id, body.title, body.content, body.tags)
    await db.commit()

    catalog = await CategoryCatalog.load(db, [post.category])
    bookmarks = await bookmark_counts(db, [post.id])
    return ApiResponse(
        data=post_response(post, catalog, bookmarks.get(post.id, 0)),
        message="Post updated successfully",
    )


@router.delete("/posts/{post_id}", response_model=ApiResponse[None])
async def delete_post_endpoint(
    post_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Soft-delete a post. Staff deletes of others' posts are audited."""
    post = await post_service.delete_post(db, user, post_id)
    await db.commit()

    if gate.needs_moderation_log(user, post.author_id):
        await post_service.log_moderator_delete(db, user.id, "post", post.id)
    return ApiResponse(message="Post deleted successfully")


# ── Replies ──


@router.post("/replies", response_model=ApiResponse[ReplyResponse], status_code=201)
async def create_reply_endpoint(
    body: CreateReplyRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Reply to a post or to another reply."""
    reply = await reply_service.create_reply(
        db, user, body.post_id, body.content, body.parent_reply_id, settings.max_reply_depth
    )
    await db.commit()
    return ApiResponse(data=reply_response(reply), message="Reply created successfully")


@router.put("/replies", response_model=ApiResponse[ReplyResponse])
async def update_reply_endpoint(
    body: UpdateReplyRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Edit a reply's content."""
    reply = await reply_service.update_reply(db, user, body.reply_id, body.content)
    await db.commit()
    return ApiResponse(data=reply_response(reply), message="Reply updated successfully")


@router.delete("/replies", response_model=ApiResponse[None])
async def delete_reply_endpoint(
    body: DeleteReplyRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Soft-delete a reply. The post's reply count is unchanged."""
    reply = await reply_service.delete_reply(db, user, body.reply_id)
    await db.commit()

    if gate.needs_moderation_log(user, reply.author_id):
        await post_service.log_moderator_delete(db, user.id, "reply", reply.id)
    return ApiResponse(message="Reply deleted successfully")


# ── Interactions ──


@router.post("/interactions", response_model=ApiResponse[AddInteractionData])
async def add_interaction_endpoint(
    body: InteractionRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Like, dislike or bookmark a post or reply. Repeats are no-ops."""
    result = await ledger.add_interaction(db, user.id, body.target_type, body.target_id, body.interaction_type)
    await db.commit()

    kind, target = body.interaction_type, body.target_type
    message = f"{kind} added successfully" if result.is_new else f"You have already {_PAST[kind]} this {target}"
    return ApiResponse(
        data=AddInteractionData(
            interaction_type=kind,
            is_new_interaction=result.is_new,
            counts=_counts(result.counts),
        ),
        message=message,
    )


@router.delete("/interactions", response_model=ApiResponse[RemoveInteractionData])
async def remove_interaction_endpoint(
    body: InteractionRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Remove one of the caller's interactions. Removing nothing is fine."""
    result = await ledger.remove_interaction(
        db, user.id, body.target_type, body.target_id, body.interaction_type
    )
    await db.commit()

    kind = body.interaction_type
    message = f"{kind} removed successfully" if result.was_removed else f"No {kind} found to remove"
    return ApiResponse(
        data=RemoveInteractionData(
            interaction_type=kind,
            was_removed=result.was_removed,
            counts=_counts(result.counts),
        ),
        message=message,
    )


@router.get("/interactions", response_model=ApiResponse[dict[int, list[str]]])
async def list_interactions_endpoint(
    target_type: str = Query(..., alias="targetType"),
    target_ids: list[int] | None = Query(None, alias="targetIds"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's interaction kinds per target id."""
    held = await ledger.list_user_interactions(db, user.id, target_type, target_ids or [])
    return ApiResponse(data=held, message="Interactions retrieved successfully")


# ── Categories ──


@router.get("/categories", response_model=ApiResponse[list[CategoryResponse]])
async def list_categories_endpoint(
    include_stats: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """Active categories in display order, optionally with live post stats."""
    entries = await list_categories(db, include_stats)
    items = [
        CategoryResponse(
            id=e.category.id,
            name=e.category.name,
            description=e.category.description,
            color=e.category.color,
            icon=e.category.icon,
            display_order=e.category.display_order,
            post_count=e.post_count if include_stats else None,
            last_activity=e.last_activity if include_stats else None,
        )
        for e in entries
    ]
    return ApiResponse(data=items, message="Categories retrieved successfully")
