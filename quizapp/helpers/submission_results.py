from typing import Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quizapp.models import Quiz, Question, QuizSubmission, QuestionType
from quizapp.helpers.answer_grader import deserialize_answer, question_points
from quizapp.helpers.errors import NotFound
from quizapp.schemas.quiz_submission import AnswerResult, QuizSubmissionDetailView, QuizSubmissionRead

TEXT_TYPES = (QuestionType.SHORT_ANSWER, QuestionType.FILL_IN_BLANK)


def _correct_answers(question: Question):
    correct = [opt for opt in question.options if opt.is_correct]
    if question.question_type in TEXT_TYPES:
        return [opt.option_text for opt in correct]
    return [str(opt.id) for opt in correct]


async def load_submission_detail(
    submission_id: UUID,
    db: AsyncSession,
    include_correct_answers: bool = False,
) -> Tuple[QuizSubmission, QuizSubmissionDetailView]:
    """
    Submission with one row per current question; unanswered questions
    show as incorrect with no answer.
    """
    result = await db.execute(
        select(QuizSubmission)
        .options(
            selectinload(QuizSubmission.answers),
            selectinload(QuizSubmission.quiz)
            .selectinload(Quiz.questions)
            .selectinload(Question.options),
        )
        .where(QuizSubmission.id == submission_id)
    )
    submission = result.scalar_one_or_none()

    if not submission:
        raise NotFound("Submission not found")

    answers_map = {a.question_id: a for a in submission.answers}

    answers = []
    for question in submission.quiz.questions:
        answer = answers_map.get(question.id)
        answers.append(
            AnswerResult(
                question_id=question.id,
                question_text=question.question_text,
                question_type=question.question_type,
                points=question_points(question),
                user_answer=deserialize_answer(answer.user_answer) if answer else None,
                is_correct=answer.is_correct if answer else False,
                points_earned=answer.points_earned if answer else 0,
                correct_answers=_correct_answers(question) if include_correct_answers else None,
            )
        )

    base = QuizSubmissionRead.model_validate(submission).model_dump()
    view = QuizSubmissionDetailView(
        **base,
        quiz_title=submission.quiz.title,
        answers=answers,
    )
    return submission, view
