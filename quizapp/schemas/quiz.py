from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from quizapp.models import QuizDifficulty, QuizVisibility, QuestionType

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class QuestionOptionCreate(BaseModel):
    option_text: str
    is_correct: bool = False


class QuestionCreate(BaseModel):
    question_text: str = Field(..., min_length=1)
    question_type: QuestionType
    points: int = Field(1, ge=1)
    options: List[QuestionOptionCreate] = []


class QuestionUpdate(QuestionCreate):
    pass


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: QuizDifficulty = QuizDifficulty.MEDIUM
    time_limit_minutes: Optional[int] = Field(None, ge=1)
    release_at: Optional[datetime] = None
    visibility: QuizVisibility = QuizVisibility.PUBLIC
    organizer_name: Optional[str] = None
    slug: Optional[str] = Field(None, max_length=255, pattern=SLUG_PATTERN)
    questions: List[QuestionCreate] = []


class QuizUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[QuizDifficulty] = None
    time_limit_minutes: Optional[int] = Field(None, ge=1)
    release_at: Optional[datetime] = None
    visibility: Optional[QuizVisibility] = None
    organizer_name: Optional[str] = None
    slug: Optional[str] = Field(None, max_length=255, pattern=SLUG_PATTERN)


class QuizCreateResponse(BaseModel):
    id: UUID
    title: str
    slug: Optional[str]
    is_published: bool
    total_questions: int

    model_config = {"from_attributes": True}


class QuizLite(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    category: Optional[str]
    difficulty: QuizDifficulty
    visibility: QuizVisibility
    is_published: bool
    total_questions: int
    time_limit_minutes: Optional[int]
    organizer_name: Optional[str]
    slug: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class ReorderItem(BaseModel):
    id: UUID
    position: int = Field(..., ge=1)


class QuestionReorderRequest(BaseModel):
    questions: List[ReorderItem]


# Quiz and its questions as shown to readers.
# is_correct stays None unless the reader owns the quiz.

class QuestionOptionView(BaseModel):
    id: UUID
    option_text: str
    is_correct: Optional[bool] = None


class QuestionView(BaseModel):
    id: UUID
    question_text: str
    question_type: QuestionType
    points: int
    position: int
    options: List[QuestionOptionView]


class QuizDetailView(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    category: Optional[str]
    difficulty: QuizDifficulty
    time_limit_minutes: Optional[int]
    release_at: Optional[datetime]
    visibility: QuizVisibility
    is_published: bool
    total_questions: int
    organizer_name: Optional[str]
    slug: Optional[str]
    questions: List[QuestionView]
