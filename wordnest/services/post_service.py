"""
Blog post operations: listing, reading, and author-only mutation.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker
from werkzeug.datastructures import FileStorage

from wordnest.assets import AssetStore
from wordnest.database import db_session
from wordnest.errors import Forbidden, InvalidInput, NotFound
from wordnest.models import Post, User, utcnow
from wordnest.security import Identity
from wordnest.utils.validators import (
    MAX_TITLE_LENGTH,
    UNSET,
    check_pagination,
    validate_content,
    validate_title,
)

logger = logging.getLogger(__name__)


@dataclass
class PostPage:
    posts: List[dict]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def to_dict(self) -> dict:
        return {
            "posts": self.posts,
            "pagination": {
                "currentPage": self.page,
                "totalPages": self.total_pages,
                "totalPosts": self.total,
                "limit": self.limit,
                "hasNextPage": self.page < self.total_pages,
                "hasPreviousPage": self.page > 1,
            },
        }


def _post_query():
    return select(Post, User.username).join(User, Post.author_id == User.id)


def _serialize(rows) -> List[dict]:
    return [post.to_dict(author_name=author_name) for post, author_name in rows]


def paginate_posts(session: Session, page: int, limit: int,
                   author_id: Optional[int] = None) -> PostPage:
    """
    Newest-first page of posts. Equal timestamps fall back to id order so
    the listing is deterministic.
    """
    check_pagination(page, limit)

    count_query = select(func.count(Post.id))
    query = _post_query()
    if author_id is not None:
        count_query = count_query.where(Post.author_id == author_id)
        query = query.where(Post.author_id == author_id)

    total = session.execute(count_query).scalar_one()
    offset = (page - 1) * limit
    if offset >= total:
        return PostPage(posts=[], page=page, limit=limit, total=total)
    rows = session.execute(
        query.order_by(Post.created_at.desc(), Post.id.desc())
        .limit(limit)
        .offset(offset)
    ).all()
    return PostPage(posts=_serialize(rows), page=page, limit=limit, total=total)


def load_post(session: Session, post_id: int) -> dict:
    row = session.execute(_post_query().where(Post.id == post_id)).first()
    if row is None:
        raise NotFound("Post not found")
    post, author_name = row
    return post.to_dict(author_name=author_name)


class PostService:
    """
    Business rules for posts. Every mutating call takes the authenticated
    caller; only a post's author may change or delete it.
    """

    def __init__(self, session_factory: sessionmaker, assets: AssetStore):
        self._sessions = session_factory
        self._assets = assets

    def list(self, page: int, limit: int) -> PostPage:
        with db_session(self._sessions) as session:
            return paginate_posts(session, page, limit)

    def get(self, post_id: int) -> dict:
        with db_session(self._sessions) as session:
            return load_post(session, post_id)

    def create(self, author: Identity, title, content,
               image: Optional[FileStorage] = None) -> dict:
        if not title or not content:
            raise InvalidInput("Title and content are required")
        validate_title(title)
        validate_content(content)
        if self._assets.is_provided(image):
            self._assets.validate(image)

        with self._assets.staged(image, kind="post") as asset:
            with db_session(self._sessions) as session:
                post = Post(
                    title=title,
                    content=content,
                    image_url=asset.url if asset else None,
                    author_id=author.id,
                )
                session.add(post)
                session.flush()
                created = load_post(session, post.id)

        logger.info(f"Post {created['id']} created by user {author.id}")
        return created

    def update(self, caller: Identity, post_id: int, title=UNSET, content=UNSET,
               image: Optional[FileStorage] = None) -> dict:
        """
        Partial-merge update: fields left UNSET (or None) keep their stored
        value. A replaced image is deleted only after the row is committed.
        """
        has_image = self._assets.is_provided(image)
        title = None if title is UNSET else title
        content = None if content is UNSET else content

        with db_session(self._sessions) as session:
            # Ownership is decided before the payload is looked at
            post = self._owned_post(session, caller, post_id, action="update")

            if title is None and content is None and not has_image:
                raise InvalidInput("Title, content or image must be provided")
            if title is not None:
                validate_title(title)
            if content is not None:
                validate_content(content)
            if has_image:
                self._assets.validate(image)

            merged_title = post.title if title is None else title
            if len(merged_title) > MAX_TITLE_LENGTH:
                raise InvalidInput(f"Title cannot exceed {MAX_TITLE_LENGTH} characters")

            previous_image = post.image_url
            with self._assets.staged(image, kind="post") as asset:
                post.title = merged_title
                if content is not None:
                    post.content = content
                if asset is not None:
                    post.image_url = asset.url
                post.updated_at = utcnow()
                session.flush()
                updated = load_post(session, post.id)
                session.commit()

        if asset is not None and previous_image:
            self._assets.discard(previous_image)
        logger.info(f"Post {post_id} updated by user {caller.id}")
        return updated

    def delete(self, caller: Identity, post_id: int) -> None:
        with db_session(self._sessions) as session:
            post = self._owned_post(session, caller, post_id, action="delete")
            if post.image_url:
                # Best effort: a stuck file never blocks the row delete
                self._assets.discard(post.image_url)
            session.delete(post)
        logger.info(f"Post {post_id} deleted by user {caller.id}")

    def _owned_post(self, session: Session, caller: Identity, post_id: int, action: str) -> Post:
        post = session.get(Post, post_id)
        if post is None:
            raise NotFound("Post not found")
        if post.author_id != caller.id:
            logger.info(f"User {caller.id} denied {action} on post {post_id}")
            raise Forbidden(f"You do not have permission to {action} this post")
        return post
