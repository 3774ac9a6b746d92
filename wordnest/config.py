"""
Application configuration.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    """Base configuration."""
    DATABASE_URL = os.environ.get('DATABASE_URL')
    JWT_SECRET = os.environ.get('JWT_SECRET')
    PORT = int(os.environ.get('PORT', 3000))
    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() == 'true'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Bearer tokens
    TOKEN_EXPIRY_DAYS = int(os.environ.get('TOKEN_EXPIRY_DAYS', 7))
    BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', 10))

    # Connection pool (shared across request threads)
    DB_POOL_SIZE = int(os.environ.get('DB_POOL_SIZE', 10))
    DB_MAX_OVERFLOW = int(os.environ.get('DB_MAX_OVERFLOW', 0))
    DB_POOL_TIMEOUT = int(os.environ.get('DB_POOL_TIMEOUT', 10))

    # Uploaded images
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or str(BASE_DIR / 'uploads')
    UPLOAD_URL_PREFIX = '/uploads'
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_UPLOAD_BYTES', 5 * 1024 * 1024))
    ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
