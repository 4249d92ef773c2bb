from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal, Optional

ContentType = Literal["article", "comment", "thread", "post", "question", "answer"]


class ArticleCreate(BaseModel):
    title: str
    content: str
    category: Optional[str] = None
    tags: List[str] = []
    status: Literal["draft", "published"] = "draft"


class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[Literal["draft", "published"]] = None


class ArticleResponse(BaseModel):
    id: int
    author_id: str
    title: str
    content: str
    slug: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    status: str
    views: int
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)
    parent_id: Optional[int] = None


class CommentResponse(CommentCreate):
    id: int
    article_id: int
    author_id: str
    is_pinned: bool
    edited_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReactionCreate(BaseModel):
    content_type: ContentType
    content_id: int
    reaction_type: str = "like"


class ReactionResponse(ReactionCreate):
    id: int
    user_id: str

    class Config:
        from_attributes = True


class BookmarkCreate(BaseModel):
    content_type: ContentType
    content_id: int


class BookmarkResponse(BookmarkCreate):
    id: int
    user_id: str

    class Config:
        from_attributes = True


class ThreadCreate(BaseModel):
    title: str = Field(..., max_length=200)
    content: str
    category: Optional[str] = None


class ThreadResponse(ThreadCreate):
    id: int
    author_id: str
    status: str
    is_pinned: bool
    views: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1)
    parent_id: Optional[int] = None


class PostResponse(PostCreate):
    id: int
    thread_id: int
    author_id: str
    is_solution: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class QuestionCreate(BaseModel):
    title: str = Field(..., max_length=200)
    content: str
    category: Optional[str] = None
    tags: List[str] = []


class QuestionResponse(QuestionCreate):
    id: int
    author_id: str
    status: str
    views: int
    has_accepted_answer: bool
    tags: Optional[List[str]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AnswerCreate(BaseModel):
    content: str = Field(..., min_length=1)


class AnswerResponse(AnswerCreate):
    id: int
    question_id: int
    author_id: str
    is_accepted: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
