"""Quiz / Round / Team structure.

Quiz -> Round is owning (rounds die with their quiz). Quiz <-> Team is a
non-owning association: removing it, or deleting the quiz, leaves the
team and its snapshot records untouched.
"""

from datetime import datetime
from typing import Optional

from flask import current_app
from sqlalchemy import inspect

from pubranker import db
from pubranker.models import Quiz, Round, Team
from . import snapshots


def _discard(obj) -> None:
    # Pending objects were never written; transient ones were already
    # dropped by the delete-orphan cascade
    state = inspect(obj)
    if state.pending:
        db.session.expunge(obj)
    elif state.persistent:
        db.session.delete(obj)


def create_quiz(name: str, venue: str = '', date: Optional[datetime] = None,
                max_teams: Optional[int] = None) -> Quiz:
    quiz = Quiz(name=name, venue=venue or '', date=date, max_teams=max_teams)
    db.session.add(quiz)
    current_app.logger.info(f"[quiz-create] quiz={quiz.id} name={name!r}")
    return quiz


def delete_quiz(quiz: Quiz) -> None:
    """Delete the quiz and its rounds; teams are only detached."""
    current_app.logger.info(
        f"[quiz-delete] quiz={quiz.id} rounds={len(quiz.rounds)} teams={len(quiz.teams)}"
    )
    quiz.teams = []
    _discard(quiz)


def add_round(quiz: Quiz, name: str, max_points: Optional[int] = None,
              order_index: Optional[int] = None) -> Round:
    if order_index is None:
        order_index = len(quiz.rounds)
    round_ = Round(name=name, max_points=max_points, order_index=order_index)
    quiz.rounds.append(round_)
    db.session.add(round_)
    current_app.logger.info(f"[round-add] quiz={quiz.id} round={round_.id} order={order_index}")
    return round_


def reorder_rounds(quiz: Quiz) -> None:
    """Renumber order_index as 0..n-1, keeping the current relative order."""
    for index, round_ in enumerate(quiz.sorted_rounds):
        round_.order_index = index


def delete_round(quiz: Quiz, round_: Round) -> None:
    """Remove a round from its quiz. Recorded scores for it are kept."""
    if round_ in quiz.rounds:
        quiz.rounds.remove(round_)
    _discard(round_)
    reorder_rounds(quiz)
    current_app.logger.info(f"[round-delete] quiz={quiz.id} round={round_.id}")


def rename_round(round_: Round, name: str) -> None:
    # Existing snapshot records keep the name they were recorded with
    round_.name = name


def set_round_max_points(round_: Round, max_points: Optional[int]) -> None:
    round_.max_points = max_points


def create_team(name: str, color: Optional[str] = None, contact_person: str = '',
                email: str = '', is_confirmed: bool = False,
                image_data: Optional[bytes] = None) -> Team:
    team = Team(
        name=name,
        color=color or current_app.config.get('DEFAULT_TEAM_COLOR', '#007AFF'),
        contact_person=contact_person or '',
        email=email or '',
        is_confirmed=bool(is_confirmed),
        image_data=image_data,
    )
    db.session.add(team)
    current_app.logger.info(f"[team-create] team={team.id} name={name!r}")
    return team


def delete_team(team: Team) -> None:
    team.quizzes = []
    _discard(team)
    current_app.logger.info(f"[team-delete] team={team.id}")


def rename_team(team: Team, name: str) -> None:
    team.name = name
    team.last_modified = datetime.utcnow()


def update_team_details(team: Team, contact_person: str, email: str, is_confirmed: bool,
                        quiz: Optional[Quiz] = None) -> None:
    """Update contact fields and confirmation.

    With a quiz the confirmation is recorded for that quiz only; without one
    the team's global flag is set.
    """
    team.contact_person = contact_person or ''
    team.email = email or ''
    if quiz is not None:
        snapshots.record_confirmation(team, quiz, is_confirmed)
    else:
        team.is_confirmed = bool(is_confirmed)
        team.last_modified = datetime.utcnow()


def attach_team(quiz: Quiz, team: Team) -> bool:
    """Associate an existing team with a quiz. False if already attached."""
    if any(t.id == team.id for t in quiz.teams):
        return False
    quiz.teams.append(team)
    current_app.logger.info(f"[team-attach] quiz={quiz.id} team={team.id}")
    return True


def detach_team(quiz: Quiz, team: Team) -> bool:
    """Remove the association only; the team stays in the global list."""
    if not any(t.id == team.id for t in quiz.teams):
        return False
    quiz.teams.remove(team)
    current_app.logger.info(f"[team-detach] quiz={quiz.id} team={team.id}")
    return True
