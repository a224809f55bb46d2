from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime


class LeaderboardEntry(BaseModel):
    rank: int
    submission_id: UUID
    display_name: str
    submitted_by_email: Optional[str]
    score: int
    total_points: int
    score_percentage: int
    time_taken: Optional[int]
    submitted_at: Optional[datetime]
