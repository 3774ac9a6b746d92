"""
Profile management for the authenticated user.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from werkzeug.datastructures import FileStorage

from wordnest.assets import AssetStore
from wordnest.database import db_session
from wordnest.errors import Conflict, InvalidInput, NoChanges, NotFound, Unauthenticated
from wordnest.models import Post, User, isoformat
from wordnest.security import Identity, hash_password, verify_password
from wordnest.services.post_service import PostPage, paginate_posts
from wordnest.utils.validators import (
    UNSET,
    validate_email,
    validate_new_password,
    validate_username,
)

logger = logging.getLogger(__name__)


class ProfileService:

    def __init__(self, session_factory: sessionmaker, assets: AssetStore, bcrypt_rounds: int = 10):
        self._sessions = session_factory
        self._assets = assets
        self._bcrypt_rounds = bcrypt_rounds

    def get_profile(self, caller: Identity) -> dict:
        with db_session(self._sessions) as session:
            user = self._load_user(session, caller)
            profile = user.to_dict()
            profile["post_count"] = self._post_count(session, user.id)
            return profile

    def update_profile(self, caller: Identity, username=None, email=None, bio=UNSET,
                       current_password=None, new_password=None) -> dict:
        """
        Apply every provided change in one write. ``bio`` distinguishes
        "not sent" (UNSET) from "cleared" (None or empty string).
        """
        with db_session(self._sessions) as session:
            user = self._load_user(session, caller)
            changes = {}

            if username and username != user.username:
                username = validate_username(username)
                if self._taken(session, User.username, username, user.id):
                    raise Conflict("Username already taken")
                changes["username"] = username

            if email and email != user.email:
                email = validate_email(email)
                if self._taken(session, User.email, email, user.id):
                    raise Conflict("Email already taken")
                changes["email"] = email

            if bio is not UNSET:
                changes["bio"] = bio or None

            if new_password:
                if not current_password:
                    raise InvalidInput("Current password is required to change password")
                if not verify_password(current_password, user.password):
                    raise Unauthenticated("Current password is incorrect")
                validate_new_password(new_password, label="New password")
                changes["password"] = hash_password(new_password, rounds=self._bcrypt_rounds)

            if not changes:
                raise NoChanges("No fields to update")

            for field, value in changes.items():
                setattr(user, field, value)
            try:
                session.flush()
            except IntegrityError:
                # Lost a race with a concurrent signup/update
                raise Conflict("Username or email already taken")

            logger.info(f"User {user.id} updated profile fields: {', '.join(sorted(changes))}")
            return user.to_dict()

    def set_profile_picture(self, caller: Identity, image: Optional[FileStorage]) -> dict:
        if not self._assets.is_provided(image):
            raise InvalidInput("No image file provided")
        self._assets.validate(image)

        with db_session(self._sessions) as session:
            user = self._load_user(session, caller)
            previous = user.profile_picture_url
            with self._assets.staged(image, kind="profile") as asset:
                user.profile_picture_url = asset.url
                session.flush()
                profile = user.to_dict()
                session.commit()

        if previous:
            self._assets.discard(previous)
        return profile

    def clear_profile_picture(self, caller: Identity) -> dict:
        with db_session(self._sessions) as session:
            user = self._load_user(session, caller)
            if not user.profile_picture_url:
                raise NoChanges("No profile picture to delete")
            self._assets.discard(user.profile_picture_url)
            user.profile_picture_url = None
            session.flush()
            return user.to_dict()

    def list_own_posts(self, caller: Identity, page: int, limit: int) -> PostPage:
        with db_session(self._sessions) as session:
            return paginate_posts(session, page, limit, author_id=caller.id)

    def stats(self, caller: Identity) -> dict:
        with db_session(self._sessions) as session:
            latest = session.execute(
                select(func.max(Post.created_at)).where(Post.author_id == caller.id)
            ).scalar_one()
            return {
                "total_posts": self._post_count(session, caller.id),
                "latest_post_date": isoformat(latest),
            }

    # Internal helpers -------------------------------------------------

    def _load_user(self, session: Session, caller: Identity) -> User:
        # The token can outlive the account it names
        user = session.get(User, caller.id)
        if user is None:
            raise NotFound("User not found")
        return user

    @staticmethod
    def _post_count(session: Session, user_id: int) -> int:
        return session.execute(
            select(func.count(Post.id)).where(Post.author_id == user_id)
        ).scalar_one()

    @staticmethod
    def _taken(session: Session, column, value, user_id: int) -> bool:
        return session.execute(
            select(User.id).where(column == value, User.id != user_id)
        ).first() is not None
