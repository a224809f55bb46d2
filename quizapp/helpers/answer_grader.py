import json
from typing import List, NamedTuple, Optional, Set, Union

from quizapp.models import Question, QuestionType


RawAnswer = Union[str, List[str], None]


class GradeResult(NamedTuple):
    is_correct: bool
    points_earned: int


def question_points(question: Question) -> int:
    """Points a question is worth; unset or zero falls back to 1."""
    return question.points or 1


def _normalize_id(value) -> str:
    return str(value).strip().lower()


def _normalize_text(value) -> str:
    return str(value).strip().lower()


def _selected_ids(raw_answer: RawAnswer) -> Set[str]:
    if raw_answer is None:
        return set()
    if isinstance(raw_answer, (list, tuple, set)):
        return {_normalize_id(v) for v in raw_answer if v is not None}
    return {_normalize_id(raw_answer)}


def _is_correct(question: Question, raw_answer: RawAnswer) -> bool:
    correct_options = [opt for opt in question.options if opt.is_correct]

    # nothing marked correct: never award points
    if not correct_options:
        return False

    qtype = question.question_type

    if qtype in (QuestionType.MULTIPLE_CHOICE, QuestionType.MULTIPLE_SELECT):
        correct_ids = {_normalize_id(opt.id) for opt in correct_options}
        return _selected_ids(raw_answer) == correct_ids

    if qtype == QuestionType.TRUE_FALSE:
        if raw_answer is None or isinstance(raw_answer, (list, tuple, set)):
            return False
        return _normalize_id(raw_answer) == _normalize_id(correct_options[0].id)

    if qtype in (QuestionType.SHORT_ANSWER, QuestionType.FILL_IN_BLANK):
        if raw_answer is None or isinstance(raw_answer, (list, tuple, set)):
            return False
        submitted = _normalize_text(raw_answer)
        return any(
            _normalize_text(opt.option_text) == submitted
            for opt in correct_options
            if opt.option_text and opt.option_text.strip()
        )

    return False


def grade(question: Question, raw_answer: RawAnswer) -> GradeResult:
    """
    Decides correctness of one raw answer and the points it earns.

    `question.options` must be loaded. `raw_answer` is what the client sent:
    an option id, a list of option ids, or free text. There is no partial
    credit: a correct answer earns the full question points, anything else 0.
    """
    if _is_correct(question, raw_answer):
        return GradeResult(True, question_points(question))
    return GradeResult(False, 0)


def serialize_answer(raw_answer: RawAnswer) -> Optional[str]:
    """List answers are stored JSON-encoded, scalars as-is."""
    if isinstance(raw_answer, (list, tuple)):
        return json.dumps([str(v) for v in raw_answer])
    if raw_answer is None:
        return None
    return str(raw_answer)


def deserialize_answer(stored: Optional[str]) -> RawAnswer:
    if stored is None:
        return None
    if stored.startswith("["):
        try:
            value = json.loads(stored)
        except ValueError:
            return stored
        if isinstance(value, list):
            return value
    return stored
