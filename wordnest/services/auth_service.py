"""
Account creation and credential login.
"""
import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from wordnest.database import db_session
from wordnest.errors import Conflict, InvalidInput, Unauthenticated
from wordnest.models import User
from wordnest.security import TokenCodec, hash_password, verify_password
from wordnest.utils.validators import validate_email, validate_new_password, validate_username

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session_factory: sessionmaker, tokens: TokenCodec, bcrypt_rounds: int = 10):
        self._sessions = session_factory
        self._tokens = tokens
        self._bcrypt_rounds = bcrypt_rounds

    def signup(self, username, email, password):
        """Create an account and return ``(token, user)``."""
        if not username or not email or not password:
            raise InvalidInput("Username, email, and password are required")
        username = validate_username(username)
        email = validate_email(email)
        validate_new_password(password)
        password_hash = hash_password(password, rounds=self._bcrypt_rounds)

        with db_session(self._sessions) as session:
            existing = session.execute(
                select(User.id).where(or_(User.username == username, User.email == email))
            ).first()
            if existing is not None:
                raise Conflict("Username or email already exists")

            user = User(username=username, email=email, password=password_hash)
            session.add(user)
            try:
                session.flush()
            except IntegrityError:
                # The unique constraints catch what the pre-check raced past
                raise Conflict("Username or email already exists")
            user_data = user.to_dict(include_created=False)

        logger.info(f"New account created: {user_data['username']} (id={user_data['id']})")
        return self._tokens.issue(user_data["id"], user_data["username"]), user_data

    def login(self, email, password):
        if not email or not password:
            raise InvalidInput("Email and password are required")

        with db_session(self._sessions) as session:
            user = session.execute(
                select(User).where(User.email == email.strip())
            ).scalar_one_or_none()
            if user is None or not verify_password(password, user.password):
                raise Unauthenticated("Invalid email or password")
            user_data = user.to_dict(include_created=False)

        return self._tokens.issue(user_data["id"], user_data["username"]), user_data
