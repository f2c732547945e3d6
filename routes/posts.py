import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Form, Request

from dependencies import BlogStore, CurrentIdentity, CurrentUser
from models.post import Post
from models.user import User
from services.authorization import AccessOutcome, check_ownership, require
from services.database import BlogDB
from services.validation import validate_comment, validate_post
from utils.rendering import redirect, render

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_post_id(raw: str) -> Optional[int]:
    """Only canonical ASCII digit strings name a post; anything else matches no row"""
    if not isinstance(raw, str) or not (raw.isascii() and raw.isdigit()):
        return None
    post_id = int(raw)
    return post_id if post_id > 0 else None


def load_owned_post(db: BlogDB, raw_id: str, user: User) -> Post:
    """Fetch a post the caller is allowed to mutate, or raise AccessDenied"""
    post_id = parse_post_id(raw_id)
    post = db.get_post(post_id) if post_id is not None else None
    require(check_ownership(post, user), post_id)
    return post


@router.get("/")
async def home(request: Request, db: BlogStore, identity: CurrentIdentity):
    """Landing page for visitors, the full feed for logged-in users"""
    if isinstance(identity, User):
        posts = db.get_all_posts()
        comments = db.get_all_comments()
        return render(request, "allposts.html", posts=posts, comments=comments)
    return render(request, "homepage.html")


@router.get("/dashboard")
async def dashboard(request: Request, db: BlogStore, identity: CurrentIdentity):
    """Only the caller's own posts, newest first"""
    if isinstance(identity, User):
        posts = db.get_user_posts(identity.user_id)
        return render(request, "dashboard.html", posts=posts)
    return render(request, "homepage.html")


@router.get("/create-post")
async def create_post_form(request: Request, current_user: CurrentUser):
    return render(request, "create-post.html")


@router.post("/create-post")
async def create_post(
        request: Request,
        db: BlogStore,
        current_user: CurrentUser,
        title: Annotated[str, Form()] = "",
        body: Annotated[str, Form()] = "",
):
    """Create a new post"""
    post_input = validate_post(title, body)
    if post_input.errors:
        return render(request, "create-post.html", errors=post_input.errors,
                      title=post_input.title, body=post_input.content)

    post = db.create_post(post_input.title, post_input.content, current_user.user_id)
    logger.info("Created post", extra={"post_id": post.id})
    return redirect(f"/post/{post.id}")


@router.get("/edit-post/{post_id}")
async def edit_post_form(request: Request, post_id: str, db: BlogStore, current_user: CurrentUser):
    post = load_owned_post(db, post_id, current_user)
    return render(request, "edit-post.html", post=post, title=post.title, body=post.content)


@router.post("/edit-post/{post_id}")
async def edit_post(
        request: Request,
        post_id: str,
        db: BlogStore,
        current_user: CurrentUser,
        title: Annotated[str, Form()] = "",
        body: Annotated[str, Form()] = "",
):
    """Update title and content of the caller's own post"""
    post = load_owned_post(db, post_id, current_user)

    post_input = validate_post(title, body)
    if post_input.errors:
        return render(request, "edit-post.html", post=post, errors=post_input.errors,
                      title=post_input.title, body=post_input.content)

    db.update_post(post.id, post_input.title, post_input.content)
    logger.info("Edited post", extra={"post_id": post.id})
    return redirect(f"/post/{post.id}")


@router.post("/delete-post/{post_id}")
async def delete_post(post_id: str, db: BlogStore, current_user: CurrentUser):
    """Delete the caller's own post along with its comments and likes"""
    post = load_owned_post(db, post_id, current_user)
    db.delete_post(post.id)
    logger.info("Deleted post", extra={"post_id": post.id})
    return redirect("/")


@router.get("/post/{post_id}")
async def view_post(request: Request, post_id: str, db: BlogStore, current_user: CurrentUser):
    """Show a post, its comments (newest first) and its likes"""
    pid = parse_post_id(post_id)
    detail = db.get_post_detail(pid, current_user.user_id) if pid is not None else None
    if detail is None:
        require(AccessOutcome.NOT_FOUND, pid)

    is_author = detail.post.author_id == current_user.user_id
    return render(
        request,
        "single-post.html",
        post=detail.post,
        comments=detail.comments,
        is_author=is_author,
        like_count=detail.like_count,
        user_has_liked=detail.user_has_liked,
    )


@router.post("/add-comment")
async def add_comment(
        db: BlogStore,
        current_user: CurrentUser,
        postId: Annotated[str, Form()] = "",
        body: Annotated[str, Form()] = "",
):
    """Add a comment to a post"""
    pid = parse_post_id(postId)
    if pid is None or db.get_post(pid) is None:
        require(AccessOutcome.NOT_FOUND, pid)

    comment = validate_comment(body)
    if comment.errors:
        return redirect(f"/post/{pid}")

    comment_id = db.add_comment(pid, current_user.user_id, comment.content)
    logger.info(f"Added comment {comment_id}", extra={"post_id": pid})
    return redirect(f"/post/{pid}")


@router.post("/like-post/{post_id}")
async def toggle_like(post_id: str, db: BlogStore, current_user: CurrentUser):
    """Toggle like status for a post"""
    pid = parse_post_id(post_id)
    if pid is None or db.get_post(pid) is None:
        require(AccessOutcome.NOT_FOUND, pid)

    liked = db.toggle_like(pid, current_user.user_id)
    logger.info("Liked post" if liked else "Unliked post", extra={"post_id": pid})
    return redirect(f"/post/{pid}")
