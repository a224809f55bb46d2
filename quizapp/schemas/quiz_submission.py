from pydantic import BaseModel, Field
from typing import List, Optional, Union
from uuid import UUID
from datetime import datetime

from quizapp.models import SubmissionStatus, QuestionType


#for takers
class AnswerSubmit(BaseModel):
    question_id: UUID
    # option id, list of option ids, or free text
    user_answer: Union[List[str], str, None] = None


class QuizSubmitRequest(BaseModel):
    answers: Optional[List[AnswerSubmit]] = None


class AnswerRecordResponse(BaseModel):
    submission_id: UUID
    question_id: UUID
    recorded: bool = True


class QuizSubmissionRead(BaseModel):
    id: UUID
    quiz_id: UUID
    user_id: Optional[UUID]
    submitted_by_name: Optional[str]
    submitted_by_email: Optional[str]
    status: SubmissionStatus
    score: int
    total_points: int
    time_taken: Optional[int]
    created_at: datetime
    submitted_at: Optional[datetime]

    model_config = {"from_attributes": True}


class AnswerResult(BaseModel):
    question_id: UUID
    question_text: str
    question_type: QuestionType
    points: int
    user_answer: Union[List[str], str, None]
    is_correct: bool
    points_earned: int
    # filled in for the quiz creator only
    correct_answers: Optional[List[str]] = None


class QuizSubmissionDetailView(QuizSubmissionRead):
    quiz_title: str
    answers: List[AnswerResult]


#for creators
class RegradeRequest(BaseModel):
    manual_score: Optional[int] = Field(None, ge=0)
