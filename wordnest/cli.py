"""
Maintenance commands, available as ``flask --app wsgi <command>``.
"""
import secrets

import click
from flask import current_app
from sqlalchemy import delete, func, select

from wordnest.database import db_session, init_db
from wordnest.models import Post, User
from wordnest.security import hash_password
from wordnest.services import get_services

SAMPLE_POSTS = [
    (
        "Getting Started with Flask",
        "Flask keeps the core small and lets you pick the pieces you need: "
        "routing, request handling and a test client out of the box, with "
        "extensions for everything else.",
    ),
    (
        "Understanding JWT Authentication",
        "JSON Web Tokens let a server authenticate requests without keeping "
        "session state. The token carries signed claims and an expiry; the "
        "server only has to check the signature.",
    ),
    (
        "Choosing a Relational Database",
        "PostgreSQL and MySQL both serve a blog well. Pick the one your team "
        "can operate, then let SQLAlchemy hide most of the differences.",
    ),
    (
        "Writing Tests That Last",
        "Test behaviour rather than implementation: drive the API the way a "
        "client would and assert on what comes back.",
    ),
    (
        "Handling File Uploads Safely",
        "Never trust a client's file name. Store uploads under generated "
        "names and clean up files that no record points to.",
    ),
]


def register_commands(app):
    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables."""
        init_db(get_services().engine)
        click.echo('Database initialized')

    @app.cli.command('check-data')
    def check_data_command():
        """Print the users and posts currently stored."""
        with db_session(get_services().sessions) as session:
            users = session.execute(select(User).order_by(User.id)).scalars().all()
            click.echo('=' * 60)
            click.echo(f'USERS ({len(users)})')
            click.echo('=' * 60)
            for user in users:
                click.echo(f'  {user.id}. {user.username} <{user.email}> created {user.created_at}')

            rows = session.execute(
                select(Post, User.username)
                .outerjoin(User, Post.author_id == User.id)
                .order_by(Post.created_at.desc(), Post.id.desc())
            ).all()
            click.echo('=' * 60)
            click.echo(f'POSTS ({len(rows)})')
            click.echo('=' * 60)
            for post, author_name in rows:
                click.echo(f'  {post.id}. {post.title} by {author_name} '
                           f'({len(post.content)} chars, created {post.created_at})')

    @app.cli.command('clear-db')
    @click.confirmation_option(prompt='Delete every post and user?')
    def clear_db_command():
        """Delete all posts, then all users, along with their uploaded images."""
        services = get_services()
        with db_session(services.sessions) as session:
            urls = session.execute(select(Post.image_url).where(Post.image_url.is_not(None))).scalars().all()
            urls += session.execute(
                select(User.profile_picture_url).where(User.profile_picture_url.is_not(None))
            ).scalars().all()
            posts = session.execute(delete(Post)).rowcount
            users = session.execute(delete(User)).rowcount
        removed = sum(services.assets.discard(url) for url in urls)
        click.echo(f'Deleted {posts} posts, {users} users and {removed} images')

    @app.cli.command('seed-posts')
    @click.option('--username', default=None, help='Author of the sample posts (defaults to the first user).')
    def seed_posts_command(username):
        """Insert sample blog posts, creating a test user when none exists."""
        services = get_services()
        with db_session(services.sessions) as session:
            query = select(User).order_by(User.id).limit(1)
            if username:
                query = select(User).where(User.username == username)
            author = session.execute(query).scalar_one_or_none()

            if author is None:
                if username:
                    raise click.ClickException(f'No user named {username}')
                author = User(
                    username='testuser',
                    email='test@example.com',
                    # Nobody can log in with a random password
                    password=hash_password(
                        secrets.token_urlsafe(16), rounds=current_app.config["BCRYPT_ROUNDS"]
                    ),
                )
                session.add(author)
                session.flush()
                click.echo(f'Created test user with ID: {author.id}')
            else:
                click.echo(f'Using existing user: {author.username} (ID: {author.id})')

            for title, content in SAMPLE_POSTS:
                session.add(Post(title=title, content=content, author_id=author.id))
            session.flush()
            total = session.execute(select(func.count(Post.id))).scalar_one()

        click.echo(f'Inserted {len(SAMPLE_POSTS)} sample posts ({total} total)')
