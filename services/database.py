import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from sqlalchemy import create_engine, delete, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from models.post import Comment, Post, PostDetail
from models.schema import Base, CommentRow, LikeRow, PostRow, UserRow
from models.user import StoredUser
from utils.errors import StorageError, UsernameTakenError

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_blog_engine(database_url: str) -> Engine:
    """Create an engine for the given URL, with FK enforcement on SQLite."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False)

    kwargs = {"connect_args": {"check_same_thread": False}}
    # In-memory databases live inside one connection, so every session must share it
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, echo=False, **kwargs)
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _post_from_row(row: PostRow, username: Optional[str] = None) -> Post:
    return Post(
        id=row.id,
        created_date=row.created_date,
        title=row.title,
        content=row.content,
        author_id=row.author_id,
        username=username,
    )


def _comment_from_row(row: CommentRow, username: Optional[str] = None) -> Comment:
    return Comment(
        id=row.id,
        post_id=row.post_id,
        author_id=row.author_id,
        content=row.content,
        username=username,
    )


class BlogDB:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._sessionmaker = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str) -> "BlogDB":
        return cls(create_blog_engine(database_url))

    def create_tables(self):
        """Create the users/posts/likes/comments tables if they are missing"""
        Base.metadata.create_all(self.engine)

    def close(self):
        self.engine.dispose()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on failure"""
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error: {e}", exc_info=True)
            raise StorageError(str(e)) from e
        finally:
            session.close()

    # Users

    def get_user_by_username(self, username: str) -> Optional[StoredUser]:
        """Exact, case-sensitive lookup"""
        with self.session() as session:
            row = session.scalars(select(UserRow).where(UserRow.username == username)).first()
            if row is None:
                return None
            return StoredUser(id=row.id, username=row.username, password=row.password)

    def username_exists(self, username: str) -> bool:
        return self.get_user_by_username(username) is not None

    def create_user(self, username: str, password_hash: str) -> StoredUser:
        """Insert a user; a concurrent insert of the same name raises UsernameTakenError"""
        try:
            with self.session() as session:
                row = UserRow(username=username, password=password_hash)
                session.add(row)
                session.flush()
                return StoredUser(id=row.id, username=row.username, password=row.password)
        except StorageError as e:
            # users.username is the only constraint an insert here can violate
            if isinstance(e.__cause__, IntegrityError):
                raise UsernameTakenError(username) from e
            raise

    # Posts

    def get_all_posts(self) -> List[Post]:
        """Get all posts with author usernames, newest first"""
        stmt = (
            select(PostRow, UserRow.username)
            .join(UserRow, PostRow.author_id == UserRow.id)
            .order_by(PostRow.created_date.desc(), PostRow.id.desc())
        )
        with self.session() as session:
            return [_post_from_row(row, username) for row, username in session.execute(stmt)]

    def get_user_posts(self, user_id: int) -> List[Post]:
        """Get one author's posts, newest first"""
        stmt = (
            select(PostRow)
            .where(PostRow.author_id == user_id)
            .order_by(PostRow.created_date.desc(), PostRow.id.desc())
        )
        with self.session() as session:
            return [_post_from_row(row) for row in session.scalars(stmt)]

    def get_post(self, post_id: int) -> Optional[Post]:
        """Get a post by ID, joined with its author's username"""
        stmt = (
            select(PostRow, UserRow.username)
            .join(UserRow, PostRow.author_id == UserRow.id)
            .where(PostRow.id == post_id)
        )
        with self.session() as session:
            result = session.execute(stmt).first()
            if result is None:
                return None
            row, username = result
            return _post_from_row(row, username)

    def create_post(self, title: str, content: str, author_id: int,
                    created_date: Optional[str] = None) -> Post:
        """Insert a post stamped with the current UTC time"""
        if created_date is None:
            created_date = datetime.now(timezone.utc).isoformat()
        with self.session() as session:
            row = PostRow(title=title, content=content, author_id=author_id, created_date=created_date)
            session.add(row)
            session.flush()
            return _post_from_row(row)

    def update_post(self, post_id: int, title: str, content: str) -> bool:
        with self.session() as session:
            row = session.get(PostRow, post_id)
            if row is None:
                return False
            row.title = title
            row.content = content
            return True

    def delete_post(self, post_id: int) -> bool:
        """Delete a post together with its comments and likes"""
        with self.session() as session:
            row = session.get(PostRow, post_id)
            if row is None:
                return False
            session.execute(delete(CommentRow).where(CommentRow.post_id == post_id))
            session.execute(delete(LikeRow).where(LikeRow.post_id == post_id))
            session.delete(row)
            return True

    # Comments

    def get_all_comments(self) -> List[Comment]:
        stmt = (
            select(CommentRow, UserRow.username)
            .join(UserRow, CommentRow.author_id == UserRow.id)
            .order_by(CommentRow.id.desc())
        )
        with self.session() as session:
            return [_comment_from_row(row, username) for row, username in session.execute(stmt)]

    def get_comments(self, post_id: int) -> List[Comment]:
        """Get comments for a post, newest first"""
        stmt = (
            select(CommentRow, UserRow.username)
            .join(UserRow, CommentRow.author_id == UserRow.id)
            .where(CommentRow.post_id == post_id)
            .order_by(CommentRow.id.desc())
        )
        with self.session() as session:
            return [_comment_from_row(row, username) for row, username in session.execute(stmt)]

    def add_comment(self, post_id: int, author_id: int, content: str) -> int:
        with self.session() as session:
            row = CommentRow(post_id=post_id, author_id=author_id, content=content)
            session.add(row)
            session.flush()
            return row.id

    # Likes

    def count_likes(self, post_id: int) -> int:
        stmt = select(func.count(LikeRow.id)).where(LikeRow.post_id == post_id)
        with self.session() as session:
            return session.scalar(stmt) or 0

    def user_has_liked_post(self, post_id: int, user_id: int) -> bool:
        """Check if a specific user has liked a post"""
        stmt = select(LikeRow.id).where(LikeRow.post_id == post_id, LikeRow.author_id == user_id)
        with self.session() as session:
            return session.scalars(stmt).first() is not None

    def toggle_like(self, post_id: int, user_id: int) -> bool:
        """Like the post, or remove the user's like if one exists. Returns the new like state."""
        with self.session() as session:
            existing = session.scalars(
                select(LikeRow).where(LikeRow.post_id == post_id, LikeRow.author_id == user_id)
            ).all()
            if existing:
                for like in existing:
                    session.delete(like)
                return False
            session.add(LikeRow(post_id=post_id, author_id=user_id))
            return True

    def get_post_detail(self, post_id: int, user_id: int) -> Optional[PostDetail]:
        post = self.get_post(post_id)
        if post is None:
            return None
        return PostDetail(
            post=post,
            comments=self.get_comments(post_id),
            like_count=self.count_likes(post_id),
            user_has_liked=self.user_has_liked_post(post_id, user_id),
        )
