import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_user
from app.models.post import Comment, Post
from app.models.project import Project
from app.schemas.post import CommentCreate, CommentResponse, PostCreate, PostResponse
from app.services import membership_service
from app.utils.clock import utcnow

router = APIRouter(prefix="/project/{project_id}/posts", tags=["posts"])


def _comment_to_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        user_id=comment.user_id,
        name=comment.author.name,
        avatar=comment.author.avatar,
        text=comment.text,
        created_at=comment.created_at,
    )


def _post_to_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        project_id=post.project_id,
        user_id=post.user_id,
        name=post.author.name,
        avatar=post.author.avatar,
        title=post.title,
        text=post.text,
        created_at=post.created_at,
        comments=[_comment_to_response(c) for c in post.comments],
    )


def _member_project(db: Session, project_id: str, user_id: str) -> Project:
    project = membership_service.get_project(db, project_id)
    profile = membership_service.get_profile(db, user_id)
    if profile.current_job_id != project.id:
        raise HTTPException(status_code=403, detail="user not part of project")
    return project


def _find_post(project: Project, post_id: str) -> Post:
    post = next((p for p in project.posts if p.id == post_id), None)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    project_id: str,
    req: PostCreate,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not req.title.strip() or not req.text.strip():
        raise HTTPException(status_code=400, detail="title and text are required")
    project = _member_project(db, project_id, user_id)
    post = Post(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=req.title.strip(),
        text=req.text,
        created_at=utcnow(),
    )
    project.posts.append(post)
    db.commit()
    db.refresh(post)
    return _post_to_response(post)


@router.get("", response_model=list[PostResponse])
async def list_posts(project_id: str, user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    project = _member_project(db, project_id, user_id)
    return [_post_to_response(p) for p in project.posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    project_id: str,
    post_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return _post_to_response(_find_post(_member_project(db, project_id, user_id), post_id))


@router.delete("/{post_id}")
async def delete_post(
    project_id: str,
    post_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    project = _member_project(db, project_id, user_id)
    post = _find_post(project, post_id)
    if post.user_id != user_id:
        raise HTTPException(status_code=403, detail="User not authorized")
    project.posts.remove(post)
    db.commit()
    return {"message": "Post removed"}


@router.post("/comment/{post_id}", response_model=PostResponse, status_code=201)
async def add_comment(
    project_id: str,
    post_id: str,
    req: CommentCreate,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not req.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    post = _find_post(_member_project(db, project_id, user_id), post_id)
    post.comments.append(
        Comment(id=str(uuid.uuid4()), user_id=user_id, text=req.text, created_at=utcnow())
    )
    db.commit()
    db.refresh(post)
    return _post_to_response(post)


@router.delete("/comment/{post_id}/{comment_id}", response_model=PostResponse)
async def delete_comment(
    project_id: str,
    post_id: str,
    comment_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    post = _find_post(_member_project(db, project_id, user_id), post_id)
    comment = next((c for c in post.comments if c.id == comment_id), None)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment does not exist")
    if comment.user_id != user_id:
        raise HTTPException(status_code=403, detail="User not authorized")
    post.comments.remove(comment)
    db.commit()
    db.refresh(post)
    return _post_to_response(post)
