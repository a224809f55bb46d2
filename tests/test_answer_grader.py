import uuid

import pytest

from quizapp.helpers.answer_grader import grade, serialize_answer, deserialize_answer
from quizapp.models import Question, QuestionOption, QuestionType


def make_question(qtype, options, points=1):
    question = Question(question_text="q", question_type=qtype, points=points)
    question.options = [
        QuestionOption(id=uuid.uuid4(), option_text=text, is_correct=correct, position=i)
        for i, (text, correct) in enumerate(options, start=1)
    ]
    return question


def option_ids(question, correct=None):
    return [
        str(opt.id) for opt in question.options
        if correct is None or opt.is_correct == correct
    ]


class TestMultipleChoice:
    def test_exact_single_correct_option(self):
        q = make_question(QuestionType.MULTIPLE_CHOICE, [("A", True), ("B", False)], points=10)
        result = grade(q, option_ids(q, correct=True)[0])
        assert result.is_correct is True
        assert result.points_earned == 10

    def test_wrong_option_scores_zero(self):
        q = make_question(QuestionType.MULTIPLE_CHOICE, [("A", True), ("B", False)], points=10)
        result = grade(q, option_ids(q, correct=False)[0])
        assert result == (False, 0)

    def test_exact_set_of_several_correct_options(self):
        q = make_question(QuestionType.MULTIPLE_CHOICE, [("A", True), ("B", True), ("C", False)], points=4)
        assert grade(q, option_ids(q, correct=True)).points_earned == 4

    def test_order_of_submitted_ids_does_not_matter(self):
        q = make_question(QuestionType.MULTIPLE_CHOICE, [("A", True), ("B", True), ("C", False)], points=4)
        assert grade(q, list(reversed(option_ids(q, correct=True)))).is_correct is True

    def test_strict_subset_scores_zero(self):
        q = make_question(QuestionType.MULTIPLE_CHOICE, [("A", True), ("B", True), ("C", False)], points=4)
        assert grade(q, option_ids(q, correct=True)[:1]) == (False, 0)

    def test_strict_superset_scores_zero(self):
        q = make_question(QuestionType.MULTIPLE_CHOICE, [("A", True), ("B", True), ("C", False)], points=4)
        assert grade(q, option_ids(q)) == (False, 0)

    def test_duplicated_ids_do_not_fake_a_full_match(self):
        q = make_question(QuestionType.MULTIPLE_CHOICE, [("A", True), ("B", True), ("C", False)])
        first = option_ids(q, correct=True)[0]
        assert grade(q, [first, first]).is_correct is False

    def test_uppercase_ids_are_accepted(self):
        q = make_question(QuestionType.MULTIPLE_CHOICE, [("A", True), ("B", False)])
        assert grade(q, option_ids(q, correct=True)[0].upper()).is_correct is True

    def test_multiple_select_uses_the_same_rule(self):
        q = make_question(QuestionType.MULTIPLE_SELECT, [("A", True), ("B", True), ("C", False)], points=2)
        assert grade(q, option_ids(q, correct=True)).points_earned == 2
        assert grade(q, option_ids(q, correct=True)[:1]).points_earned == 0

    def test_empty_answer_is_wrong(self):
        q = make_question(QuestionType.MULTIPLE_CHOICE, [("A", True), ("B", False)])
        assert grade(q, []).is_correct is False
        assert grade(q, None).is_correct is False


class TestTrueFalse:
    def test_matches_correct_option(self):
        q = make_question(QuestionType.TRUE_FALSE, [("True", True), ("False", False)], points=3)
        assert grade(q, option_ids(q, correct=True)[0]) == (True, 3)

    def test_other_option_is_wrong(self):
        q = make_question(QuestionType.TRUE_FALSE, [("True", True), ("False", False)], points=3)
        assert grade(q, option_ids(q, correct=False)[0]) == (False, 0)

    def test_list_answer_is_wrong(self):
        q = make_question(QuestionType.TRUE_FALSE, [("True", True), ("False", False)])
        assert grade(q, option_ids(q, correct=True)).is_correct is False


class TestTextAnswers:
    @pytest.mark.parametrize("answer", ["Paris", " paris ", "PARIS", "\tParis\n"])
    def test_short_answer_ignores_case_and_whitespace(self, answer):
        q = make_question(QuestionType.SHORT_ANSWER, [("Paris", True)], points=5)
        assert grade(q, answer) == (True, 5)

    def test_any_accepted_phrasing_counts(self):
        q = make_question(QuestionType.FILL_IN_BLANK, [("colour", True), ("color", True)], points=2)
        assert grade(q, "Color").is_correct is True
        assert grade(q, "COLOUR").is_correct is True

    def test_incorrect_option_text_is_not_accepted(self):
        q = make_question(QuestionType.SHORT_ANSWER, [("Paris", True), ("Lyon", False)])
        assert grade(q, "Lyon").is_correct is False

    def test_blank_answer_never_matches(self):
        q = make_question(QuestionType.SHORT_ANSWER, [("Paris", True)])
        assert grade(q, "   ").is_correct is False
        assert grade(q, None).is_correct is False


@pytest.mark.parametrize("qtype", list(QuestionType))
def test_question_without_correct_options_never_awards_points(qtype):
    q = make_question(qtype, [("A", False), ("B", False)], points=5)
    for answer in ([], None, "", "A", option_ids(q), option_ids(q)[0]):
        assert grade(q, answer) == (False, 0)


def test_unset_points_fall_back_to_one():
    q = make_question(QuestionType.SHORT_ANSWER, [("Paris", True)], points=None)
    assert grade(q, "paris").points_earned == 1


def test_list_answers_are_stored_as_json():
    stored = serialize_answer(["a", "b"])
    assert stored == '["a", "b"]'
    assert deserialize_answer(stored) == ["a", "b"]
    assert deserialize_answer(serialize_answer("Paris")) == "Paris"
