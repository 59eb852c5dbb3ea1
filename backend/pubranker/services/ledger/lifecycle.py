from flask import current_app

from pubranker.models import Quiz, Round


def start_quiz(quiz: Quiz) -> None:
    quiz.is_active = True
    current_app.logger.info(f"[quiz-start] quiz={quiz.id}")


def complete_quiz(quiz: Quiz) -> None:
    quiz.is_active = False
    quiz.is_completed = True
    current_app.logger.info(f"[quiz-complete] quiz={quiz.id}")


def cancel_quiz(quiz: Quiz) -> bool:
    """Revert an active quiz to its created state.

    Round completion flags are reset; recorded scores are left as they are.
    Returns False without touching anything if the quiz is not active.
    """
    if not quiz.is_active:
        return False
    quiz.is_active = False
    quiz.is_completed = False
    for round_ in quiz.rounds:
        round_.is_completed = False
    current_app.logger.info(f"[quiz-cancel] quiz={quiz.id} rounds_reset={len(quiz.rounds)}")
    return True


def complete_round(round_: Round) -> None:
    round_.is_completed = True
    current_app.logger.info(f"[round-complete] quiz={round_.quiz_id} round={round_.id}")
