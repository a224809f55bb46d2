from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.models import Quiz, Question, QuestionOption, QuestionType
from quizapp.schemas.quiz import QuestionCreate, QuestionView, QuestionOptionView, QuizDetailView
from quizapp.helpers.errors import InvalidInput

CHOICE_TYPES = (QuestionType.MULTIPLE_CHOICE, QuestionType.MULTIPLE_SELECT, QuestionType.TRUE_FALSE)


def validate_question_payload(q: QuestionCreate):
    """Every question must be gradable: at least one correct option it can be checked against."""
    correct = [opt for opt in q.options if opt.is_correct]

    if q.question_type in CHOICE_TYPES:
        if len(q.options) < 2:
            raise InvalidInput(f"Question '{q.question_text}' needs at least two options")
        if not correct:
            raise InvalidInput(f"Question '{q.question_text}' must have at least one correct option")
        if q.question_type == QuestionType.TRUE_FALSE and len(correct) != 1:
            raise InvalidInput(f"Question '{q.question_text}' must have exactly one correct option")
    elif not any(opt.option_text.strip() for opt in correct):
        raise InvalidInput(f"Question '{q.question_text}' must store its correct answer text")


def build_options(question: Question, q: QuestionCreate):
    question.options = [
        QuestionOption(
            option_text=opt.option_text,
            is_correct=opt.is_correct,
            position=index,
        )
        for index, opt in enumerate(q.options, start=1)
    ]


def new_question(quiz: Quiz, q: QuestionCreate, position: int) -> Question:
    validate_question_payload(q)
    question = Question(
        quiz_id=quiz.id,
        question_text=q.question_text,
        question_type=q.question_type,
        points=q.points,
        position=position,
    )
    build_options(question, q)
    return question


async def add_questions(quiz: Quiz, payload, db: AsyncSession, start_position: int = 1):
    for position, q in enumerate(payload, start=start_position):
        db.add(new_question(quiz, q, position))
    await db.flush()


def question_view(question: Question, include_answers: bool) -> QuestionView:
    return QuestionView(
        id=question.id,
        question_text=question.question_text,
        question_type=question.question_type,
        points=question.points or 1,
        position=question.position,
        options=[
            QuestionOptionView(
                id=opt.id,
                option_text=opt.option_text,
                is_correct=opt.is_correct if include_answers else None,
            )
            for opt in question.options
        ],
    )


def quiz_detail_view(quiz: Quiz, include_answers: bool) -> QuizDetailView:
    """`quiz.questions` and their options must be loaded."""
    return QuizDetailView(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        category=quiz.category,
        difficulty=quiz.difficulty,
        time_limit_minutes=quiz.time_limit_minutes,
        release_at=quiz.release_at,
        visibility=quiz.visibility,
        is_published=quiz.is_published,
        total_questions=quiz.total_questions,
        organizer_name=quiz.organizer_name,
        slug=quiz.slug,
        questions=[question_view(q, include_answers) for q in quiz.questions],
    )
