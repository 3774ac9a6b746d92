"""
Service layer exports.
"""
from dataclasses import dataclass

from flask import current_app
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from wordnest.assets import AssetStore
from wordnest.security import TokenCodec
from .auth_service import AuthService
from .post_service import PostPage, PostService
from .profile_service import ProfileService

EXTENSION_KEY = "wordnest"


@dataclass
class Services:
    """Process-wide collaborators, built once at startup and read-only after."""
    engine: Engine
    sessions: sessionmaker
    tokens: TokenCodec
    assets: AssetStore
    auth: AuthService
    posts: PostService
    profile: ProfileService


def init_services(app, engine: Engine, session_factory: sessionmaker) -> Services:
    config = app.config
    tokens = TokenCodec(config["JWT_SECRET"], expiry_days=config["TOKEN_EXPIRY_DAYS"])
    assets = AssetStore(
        config["UPLOAD_FOLDER"],
        url_prefix=config["UPLOAD_URL_PREFIX"],
        allowed_extensions=config["ALLOWED_IMAGE_EXTENSIONS"],
    )
    rounds = config["BCRYPT_ROUNDS"]
    services = Services(
        engine=engine,
        sessions=session_factory,
        tokens=tokens,
        assets=assets,
        auth=AuthService(session_factory, tokens, bcrypt_rounds=rounds),
        posts=PostService(session_factory, assets),
        profile=ProfileService(session_factory, assets, bcrypt_rounds=rounds),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "AuthService",
    "PostPage",
    "PostService",
    "ProfileService",
    "Services",
    "get_services",
    "init_services",
]
