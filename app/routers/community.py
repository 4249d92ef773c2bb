from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime, timezone
from app.database import get_db
from app.models.community import (
    Article, Comment, Reaction, Bookmark, ForumThread, ForumPost, Question, Answer
)
from app.middleware.auth import get_current_user_id, is_admin
from app.schemas.community import (
    ArticleCreate, ArticleUpdate, ArticleResponse,
    CommentCreate, CommentResponse,
    ReactionCreate, ReactionResponse,
    BookmarkCreate, BookmarkResponse,
    ThreadCreate, ThreadResponse, PostCreate, PostResponse,
    QuestionCreate, QuestionResponse, AnswerCreate, AnswerResponse,
)
from app.services.error_hints import friendly_error_message, status_for_error
import re
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api/community", tags=["community"])


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "article"


def _save(db: Session, instance, action: str, **context):
    """Add, commit and refresh one row, translating database errors."""
    try:
        db.add(instance)
        db.commit()
        db.refresh(instance)
        return instance
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to {action}", error=str(e), **context)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to {action}: {friendly_error_message(e)}"
        )


def _get_or_404(db: Session, model, item_id: int, name: str):
    item = db.query(model).filter(model.id == item_id).first()
    if not item:
        raise HTTPException(status_code=404, detail=f"{name} not found")
    return item


# Articles

@router.get("/articles", response_model=List[ArticleResponse])
async def list_articles(
    category: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Published articles, newest first."""
    query = db.query(Article).filter(Article.status == "published")
    if category:
        query = query.filter(Article.category == category)
    return query.order_by(Article.published_at.desc(), Article.id.desc()).limit(limit).all()


@router.post("/articles", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    article_data: ArticleCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        article = Article(author_id=current_user_id, **article_data.model_dump())
        if article.status == "published":
            article.published_at = datetime.now(timezone.utc)
        db.add(article)
        db.flush()
        article.slug = f"{slugify(article.title)}-{article.id}"
        db.commit()
        db.refresh(article)

        logger.info("Article created", article_id=article.id, author_id=current_user_id, status=article.status)
        return article

    except Exception as e:
        db.rollback()
        logger.error("Failed to create article", error=str(e), author_id=current_user_id)
        raise HTTPException(
            status_code=status_for_error(e),
            detail=f"Failed to create article: {friendly_error_message(e)}"
        )


@router.get("/articles/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Fetch an article and count the view. Drafts are visible to their author only."""
    article = _get_or_404(db, Article, article_id, "Article")
    if article.status != "published" and article.author_id != current_user_id:
        raise HTTPException(status_code=404, detail="Article not found")

    article.views = (article.views or 0) + 1
    db.commit()
    db.refresh(article)
    return article


@router.put("/articles/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: int,
    article_data: ArticleUpdate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    article = _get_or_404(db, Article, article_id, "Article")
    if article.author_id != current_user_id:
        raise HTTPException(status_code=403, detail="Access denied: Article does not belong to current user")

    updates = article_data.model_dump(exclude_unset=True)
    for field, value in updates.items():
        setattr(article, field, value)
    if updates.get("status") == "published" and article.published_at is None:
        article.published_at = datetime.now(timezone.utc)

    return _save(db, article, "update article", article_id=article_id)


@router.delete("/articles/{article_id}")
async def delete_article(
    article_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    article = _get_or_404(db, Article, article_id, "Article")
    if article.author_id != current_user_id and not is_admin(db, current_user_id):
        raise HTTPException(status_code=403, detail="Access denied: Article does not belong to current user")

    db.delete(article)
    db.commit()
    logger.info("Article deleted", article_id=article_id, deleted_by=current_user_id)
    return {"message": "Article deleted successfully", "articleId": article_id}


@router.get("/articles/{article_id}/comments", response_model=List[CommentResponse])
async def list_comments(article_id: int, db: Session = Depends(get_db)):
    _get_or_404(db, Article, article_id, "Article")
    return (
        db.query(Comment)
        .filter(Comment.article_id == article_id)
        .order_by(Comment.is_pinned.desc(), Comment.id.asc())
        .all()
    )


@router.post("/articles/{article_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    article_id: int,
    comment_data: CommentCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    _get_or_404(db, Article, article_id, "Article")
    if comment_data.parent_id is not None:
        parent = db.query(Comment).filter(
            Comment.id == comment_data.parent_id,
            Comment.article_id == article_id
        ).first()
        if not parent:
            raise HTTPException(status_code=404, detail="Parent comment not found")

    comment = Comment(article_id=article_id, author_id=current_user_id, **comment_data.model_dump())
    return _save(db, comment, "create comment", article_id=article_id)


# Reactions and bookmarks

@router.post("/reactions", response_model=ReactionResponse, status_code=status.HTTP_201_CREATED)
async def create_reaction(
    reaction_data: ReactionCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """One reaction per user per piece of content; a second one is a 409."""
    reaction = Reaction(user_id=current_user_id, **reaction_data.model_dump())
    return _save(db, reaction, "create reaction", user_id=current_user_id)


@router.get("/reactions", response_model=List[ReactionResponse])
async def list_reactions(
    content_type: str,
    content_id: int,
    db: Session = Depends(get_db)
):
    return (
        db.query(Reaction)
        .filter(Reaction.content_type == content_type, Reaction.content_id == content_id)
        .order_by(Reaction.id.asc())
        .all()
    )


@router.delete("/reactions/{reaction_id}")
async def delete_reaction(
    reaction_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    reaction = _get_or_404(db, Reaction, reaction_id, "Reaction")
    if reaction.user_id != current_user_id:
        raise HTTPException(status_code=403, detail="Access denied: Reaction does not belong to current user")

    db.delete(reaction)
    db.commit()
    return {"message": "Reaction removed", "reactionId": reaction_id}


@router.get("/bookmarks", response_model=List[BookmarkResponse])
async def list_bookmarks(
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return (
        db.query(Bookmark)
        .filter(Bookmark.user_id == current_user_id)
        .order_by(Bookmark.id.desc())
        .all()
    )


@router.post("/bookmarks", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
async def create_bookmark(
    bookmark_data: BookmarkCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    bookmark = Bookmark(user_id=current_user_id, **bookmark_data.model_dump())
    return _save(db, bookmark, "create bookmark", user_id=current_user_id)


@router.delete("/bookmarks/{bookmark_id}")
async def delete_bookmark(
    bookmark_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    bookmark = _get_or_404(db, Bookmark, bookmark_id, "Bookmark")
    if bookmark.user_id != current_user_id:
        raise HTTPException(status_code=403, detail="Access denied: Bookmark does not belong to current user")

    db.delete(bookmark)
    db.commit()
    return {"message": "Bookmark removed", "bookmarkId": bookmark_id}


# Forum

@router.get("/threads", response_model=List[ThreadResponse])
async def list_threads(
    category: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Pinned threads first, then by most recent activity."""
    query = db.query(ForumThread)
    if category:
        query = query.filter(ForumThread.category == category)
    return (
        query.order_by(ForumThread.is_pinned.desc(), ForumThread.last_activity_at.desc(), ForumThread.id.desc())
        .limit(limit)
        .all()
    )


@router.post("/threads", response_model=ThreadResponse, status_code=status.HTTP_201_CREATED)
async def create_thread(
    thread_data: ThreadCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    thread = ForumThread(author_id=current_user_id, **thread_data.model_dump())
    return _save(db, thread, "create thread", author_id=current_user_id)


@router.get("/threads/{thread_id}", response_model=ThreadResponse)
async def get_thread(thread_id: int, db: Session = Depends(get_db)):
    thread = _get_or_404(db, ForumThread, thread_id, "Thread")
    thread.views = (thread.views or 0) + 1
    db.commit()
    db.refresh(thread)
    return thread


@router.get("/threads/{thread_id}/posts", response_model=List[PostResponse])
async def list_posts(thread_id: int, db: Session = Depends(get_db)):
    _get_or_404(db, ForumThread, thread_id, "Thread")
    return (
        db.query(ForumPost)
        .filter(ForumPost.thread_id == thread_id)
        .order_by(ForumPost.id.asc())
        .all()
    )


@router.post("/threads/{thread_id}/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    thread_id: int,
    post_data: PostCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    thread = _get_or_404(db, ForumThread, thread_id, "Thread")
    if thread.status == "closed":
        raise HTTPException(status_code=400, detail="Thread is closed")

    post = ForumPost(thread_id=thread_id, author_id=current_user_id, **post_data.model_dump())
    thread.last_activity_at = datetime.now(timezone.utc)
    return _save(db, post, "create post", thread_id=thread_id)


# Questions and answers

@router.get("/questions", response_model=List[QuestionResponse])
async def list_questions(
    category: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    query = db.query(Question)
    if category:
        query = query.filter(Question.category == category)
    return query.order_by(Question.created_at.desc(), Question.id.desc()).limit(limit).all()


@router.post("/questions", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
async def create_question(
    question_data: QuestionCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    question = Question(author_id=current_user_id, **question_data.model_dump())
    return _save(db, question, "create question", author_id=current_user_id)


@router.get("/questions/{question_id}", response_model=QuestionResponse)
async def get_question(question_id: int, db: Session = Depends(get_db)):
    question = _get_or_404(db, Question, question_id, "Question")
    question.views = (question.views or 0) + 1
    db.commit()
    db.refresh(question)
    return question


@router.get("/questions/{question_id}/answers", response_model=List[AnswerResponse])
async def list_answers(question_id: int, db: Session = Depends(get_db)):
    """Accepted answer first, then oldest first."""
    _get_or_404(db, Question, question_id, "Question")
    return (
        db.query(Answer)
        .filter(Answer.question_id == question_id)
        .order_by(Answer.is_accepted.desc(), Answer.id.asc())
        .all()
    )


@router.post("/questions/{question_id}/answers", response_model=AnswerResponse, status_code=status.HTTP_201_CREATED)
async def create_answer(
    question_id: int,
    answer_data: AnswerCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    _get_or_404(db, Question, question_id, "Question")
    answer = Answer(question_id=question_id, author_id=current_user_id, **answer_data.model_dump())
    return _save(db, answer, "create answer", question_id=question_id)


@router.post("/answers/{answer_id}/accept", response_model=AnswerResponse)
async def accept_answer(
    answer_id: int,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Mark an answer as the accepted one. Only the question's author may do this;
    any previously accepted answer is unmarked.
    """
    answer = _get_or_404(db, Answer, answer_id, "Answer")
    question = answer.question
    if question.author_id != current_user_id:
        raise HTTPException(status_code=403, detail="Only the question author can accept an answer")

    try:
        db.query(Answer).filter(
            Answer.question_id == question.id,
            Answer.id != answer_id
        ).update({Answer.is_accepted: False}, synchronize_session=False)
        answer.is_accepted = True
        question.has_accepted_answer = True
        question.status = "answered"
        db.commit()
        db.refresh(answer)

        logger.info("Answer accepted", answer_id=answer_id, question_id=question.id)
        return answer

    except Exception as e:
        db.rollback()
        logger.error("Failed to accept answer", error=str(e), answer_id=answer_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to accept answer: {friendly_error_message(e)}"
        )
