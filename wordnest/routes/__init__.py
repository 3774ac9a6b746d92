"""
HTTP blueprints.
"""
from .auth import auth_bp
from .main import main_bp
from .posts import posts_bp
from .user import user_bp

__all__ = ["auth_bp", "main_bp", "posts_bp", "user_bp"]
