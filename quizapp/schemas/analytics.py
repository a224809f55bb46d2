from pydantic import BaseModel
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime

from quizapp.models import QuizDifficulty, QuizVisibility, QuestionType


class ScoreDistribution(BaseModel):
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0


class ScoreSummary(BaseModel):
    total_attempts: int
    unique_users: int
    avg_score: int
    highest_score: int
    lowest_score: int
    score_distribution: ScoreDistribution
    avg_time_taken: int
    last_attempt: Optional[datetime]


class RecentSubmission(BaseModel):
    submission_id: UUID
    submitted_by_name: Optional[str]
    submitted_by_email: Optional[str]
    score: int
    total_points: int
    score_percentage: int
    time_taken: Optional[int]
    submitted_at: Optional[datetime]


class QuestionStat(BaseModel):
    question_id: UUID
    question_text: str
    question_type: QuestionType
    points: int
    answered: int
    correct: int
    correct_rate: int


class QuizAnalytics(ScoreSummary):
    quiz_id: UUID
    title: str
    total_questions: int
    recent_submissions: List[RecentSubmission]
    submissions_by_day: Dict[str, int]
    questions: List[QuestionStat]


class CreatorQuizAnalytics(ScoreSummary):
    rank: int
    quiz_id: UUID
    title: str
    slug: Optional[str]
    category: Optional[str]
    difficulty: QuizDifficulty
    visibility: QuizVisibility
    is_published: bool
    total_questions: int
    created_at: datetime


class CreatorAnalytics(BaseModel):
    total_quizzes: int
    published_quizzes: int
    total_attempts: int
    total_unique_users: int
    overall_avg_score: int
    overall_weighted_avg_score: int
    quizzes: List[CreatorQuizAnalytics]
