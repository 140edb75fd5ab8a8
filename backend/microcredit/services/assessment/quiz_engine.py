"""
Quiz Engine

Weekly financial literacy quiz run as a WhatsApp dialogue.

States:
    NotStarted -> InProgress (0 <= asked < 4) -> Completed (Passed | Failed)

Each week draws 4 distinct questions from that week's bank. Every correct
answer is worth 25%; the week is passed at QUIZ_PASSING_SCORE (70% by
default, i.e. 3 of 4). The score of every finished quiz is persisted, and
the session is removed after the fourth answer whatever the outcome.

Error semantics:
- Answer without a live session -> NO_ACTIVE_SESSION result (recoverable)
- Week without enough questions -> MissingQuizContentError (operator error)
"""
import logging
import random
from typing import Any, Dict, List, Optional, Sequence

from ...config import QUIZ_PASSING_SCORE
from ...models.assessment import (
    AnswerStatus,
    Question,
    QuizAnswerResult,
    QuizSessionState,
    QuizStartResult,
    QuizStartStatus,
    Session,
    WeekInfo,
)
from .numeric import round_half_up
from .records import week_key
from .session_store import SessionStore

logger = logging.getLogger(__name__)


QUESTIONS_PER_QUIZ = 4
TOTAL_WEEKS = 15

ALL_WEEKS_COMPLETE_MESSAGE = (
    "🎉 Selamat! Anda telah menyelesaikan semua 15 minggu literasi keuangan!"
)


class MissingQuizContentError(Exception):
    """Raised when a literacy week has no usable question bank."""
    pass


class QuizEngine:
    """
    Runs quiz sessions for the literacy programme.

    Args:
        store: SessionStore holding quiz sessions
        literacy_records: provides get_literacy_record / set_week_score
        question_bank: provides get_module(week_number)
        rng: random source for question selection (seed it in tests)
        passing_score: percentage needed to pass a week
    """

    def __init__(
        self,
        store: SessionStore,
        literacy_records: Any,
        question_bank: Any,
        rng: Optional[random.Random] = None,
        passing_score: float = QUIZ_PASSING_SCORE,
    ):
        self.store = store
        self.literacy_records = literacy_records
        self.question_bank = question_bank
        self.rng = rng or random.Random()
        self.passing_score = passing_score

    # =========================================================================
    # DIALOGUE
    # =========================================================================

    def start_quiz(self, user: str) -> QuizStartResult:
        """
        Resume the user's quiz or start the lowest incomplete week.

        Raises:
            MissingQuizContentError: the week's bank has fewer than 4
                distinct questions
        """
        with self.store.locked(user):
            session = self.store.get(user)
            if session is not None:
                return self._resume(user, session)

            literacy = self.literacy_records.get_literacy_record(user)
            week = self.find_next_incomplete_week(literacy)
            if week is None:
                return QuizStartResult(
                    status=QuizStartStatus.ALL_WEEKS_COMPLETE,
                    message=ALL_WEEKS_COMPLETE_MESSAGE,
                )

            module = self.question_bank.get_module(week)
            if module is None or not module.questions:
                logger.error(f"No questions found for week {week}")
                raise MissingQuizContentError(f"No questions found for week {week}")

            bank = _distinct_by_text(module.questions)
            if len(bank) < QUESTIONS_PER_QUIZ:
                logger.error(f"Week {week} has only {len(bank)} distinct questions")
                raise MissingQuizContentError(
                    f"Week {week} has only {len(bank)} distinct questions, "
                    f"{QUESTIONS_PER_QUIZ} are required"
                )

            pool = self.select_random_questions(bank, QUESTIONS_PER_QUIZ)
            self.store.create(
                user,
                QuizSessionState(week_number=week, questions_pool=pool, module_name=module.module_name),
            )
            question = self._next_question(user)
            logger.info(f"Quiz week {week} started for {user}")

            return QuizStartResult(
                status=QuizStartStatus.STARTED,
                question=question,
                week_info=WeekInfo(
                    week_number=week,
                    module_name=module.module_name,
                    total_questions=QUESTIONS_PER_QUIZ,
                ),
            )

    def next_question(self, user: str) -> Optional[Question]:
        """Issue an unused question from the pool, or None when exhausted."""
        with self.store.locked(user):
            return self._next_question(user)

    def check_answer(self, user: str, chosen_index: int) -> QuizAnswerResult:
        """Grade the answer to the current question and move the quiz on."""
        with self.store.locked(user):
            session = self.store.get(user)
            if session is None or session.state.current_question is None:
                logger.warning(f"Quiz answer from {user} without an active quiz")
                return QuizAnswerResult(status=AnswerStatus.NO_ACTIVE_SESSION)

            state: QuizSessionState = session.state
            question = state.current_question
            is_correct = chosen_index == question.correct_index

            total_asked = state.total_asked + 1
            correct_count = state.correct_count + (1 if is_correct else 0)
            progress = correct_count / QUESTIONS_PER_QUIZ * 100

            result = QuizAnswerResult(
                status=AnswerStatus.ACCEPTED,
                correct=is_correct,
                explanation=question.explanation,
                progress=progress,
                correct_count=correct_count,
                total_asked=total_asked,
                week_number=state.week_number,
            )

            if total_asked >= QUESTIONS_PER_QUIZ:
                score = round_half_up(progress)
                passed = progress >= self.passing_score
                self.literacy_records.set_week_score(user, state.week_number, score, passed)
                self.store.delete(user)
                logger.info(
                    f"Quiz week {state.week_number} completed for {user}: "
                    f"{correct_count}/{QUESTIONS_PER_QUIZ}, passed={passed}"
                )
                result.status = AnswerStatus.COMPLETED
                result.completed = True
                result.passed = passed
                result.score = score
                return result

            self.store.update(
                user,
                total_asked=total_asked,
                correct_count=correct_count,
                current_question=None,
            )
            result.next_question = self._next_question(user)
            return result

    def stop_quiz(self, user: str) -> bool:
        with self.store.locked(user):
            return self.store.delete(user)

    # =========================================================================
    # PROGRESS
    # =========================================================================

    def get_progress(self, user: str) -> Dict[str, Any]:
        """Summarise which literacy weeks the user has passed or attempted."""
        literacy = self.literacy_records.get_literacy_record(user)
        completed: List[Dict[str, Any]] = []
        in_progress: List[Dict[str, Any]] = []

        for week in range(1, TOTAL_WEEKS + 1):
            week_data = literacy.get(week_key(week))
            if not week_data or not week_data.get("score"):
                continue

            info = {
                "week": week,
                "score": week_data["score"],
                "completed": self._is_week_passed(week_data),
                "last_updated": week_data.get("last_updated"),
            }
            if info["completed"]:
                completed.append(info)
            else:
                in_progress.append(info)

        return {
            "completed": completed,
            "in_progress": in_progress,
            "total_completed": len(completed),
            "total_weeks": TOTAL_WEEKS,
            "percentage": round_half_up(len(completed) / TOTAL_WEEKS * 100),
        }

    def find_next_incomplete_week(self, literacy: Dict[str, Any]) -> Optional[int]:
        for week in range(1, TOTAL_WEEKS + 1):
            week_data = literacy.get(week_key(week))
            if not week_data or not self._is_week_passed(week_data):
                return week
        return None

    def select_random_questions(self, questions: Sequence[Question], count: int) -> List[Question]:
        """Uniform draw without replacement; all of them when fewer than count."""
        return self.rng.sample(list(questions), min(count, len(questions)))

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _resume(self, user: str, session: Session) -> QuizStartResult:
        state: QuizSessionState = session.state
        question = state.current_question
        if question is None:
            question = self._next_question(user)
        else:
            self.store.touch(user)
        logger.info(f"Quiz week {state.week_number} resumed for {user}")

        return QuizStartResult(
            status=QuizStartStatus.RESUMED,
            question=question,
            week_info=WeekInfo(
                week_number=state.week_number,
                module_name=state.module_name,
                total_questions=QUESTIONS_PER_QUIZ,
            ),
        )

    def _next_question(self, user: str) -> Optional[Question]:
        session = self.store.get(user)
        if session is None:
            return None
        state: QuizSessionState = session.state

        unused = [q for q in state.questions_pool if q.text not in state.questions_asked]
        if not unused:
            return None

        question = self.rng.choice(unused)
        self.store.update(
            user,
            current_question=question,
            questions_asked=[*state.questions_asked, question.text],
        )
        return question

    def _is_week_passed(self, week_data: Dict[str, Any]) -> bool:
        return bool(week_data.get("completed")) and (week_data.get("score") or 0) >= self.passing_score


def _distinct_by_text(questions: Sequence[Question]) -> List[Question]:
    seen = set()
    distinct = []
    for q in questions:
        if q.text not in seen:
            seen.add(q.text)
            distinct.append(q)
    return distinct
