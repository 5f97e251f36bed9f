"""ORM row -> response schema conversion shared by the community routes."""

from __future__ import annotations

from urllib.parse import quote

from inkwell.community.categories import CategoryCatalog
from inkwell.community.schemas import AuthorInfo, PostResponse, PostStats, ReplyResponse
from inkwell.db.models import Post, Reply, User

AVATAR_FALLBACK_URL = "https://ui-avatars.com/api/?name={name}"


def author_info(user: User) -> AuthorInfo:
    return AuthorInfo(
        id=user.id,
        name=user.name,
        avatar=user.avatar_url or AVATAR_FALLBACK_URL.format(name=quote(user.name, safe="")),
        role=user.role,
    )


def post_response(post: Post, catalog: CategoryCatalog, bookmarks: int = 0) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        author=author_info(post.author),
        category=post.category,
        category_info=catalog.display(post.category),
        tags=post.tags,
        created_at=post.created_at,
        updated_at=post.updated_at,
        last_activity=post.last_activity_at,
        stats=PostStats(
            views=post.views_count,
            replies=post.replies_count,
            likes=post.likes_count,
            dislikes=post.dislikes_count,
            bookmarks=bookmarks,
        ),
        is_pinned=post.is_pinned,
        is_locked=post.is_locked,
        is_featured=post.is_featured,
    )


def reply_response(reply: Reply) -> ReplyResponse:
    return ReplyResponse(
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
    )
