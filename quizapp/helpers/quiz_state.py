import logging
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.models import Quiz, Question

logger = logging.getLogger(__name__)


async def sync_question_count(quiz: Quiz, db: AsyncSession) -> int:
    """Recounts the quiz's questions into total_questions. Caller must have flushed."""
    count = await db.scalar(
        select(func.count(Question.id)).where(Question.quiz_id == quiz.id)
    )
    quiz.total_questions = count or 0
    return quiz.total_questions


async def apply_structural_change(quiz: Quiz, db: AsyncSession):
    """
    Runs after every question add, edit, delete or reorder.

    A published quiz is a snapshot of its question set, so any structural
    edit takes it back to draft and it has to be published again.
    """
    await db.flush()
    await sync_question_count(quiz, db)

    if quiz.is_published:
        quiz.is_published = False
        logger.info("Quiz %s unpublished after a question change", quiz.id)
