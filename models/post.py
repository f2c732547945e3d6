from typing import List, Optional

from pydantic import BaseModel


class Post(BaseModel):
    id: int
    created_date: Optional[str] = None
    title: str
    content: str
    author_id: int
    username: Optional[str] = None


class Comment(BaseModel):
    id: int
    post_id: int
    author_id: int
    content: str
    username: Optional[str] = None


class PostDetail(BaseModel):
    """Everything the single-post page shows."""
    post: Post
    comments: List[Comment] = []
    like_count: int = 0
    user_has_liked: bool = False
