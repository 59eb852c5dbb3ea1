"""Per-team snapshot store for round scores and quiz confirmations.

Each team carries two flat JSON collections of value records, matched by
foreign id rather than by relationship. A write never patches an element
in place: the collection is rebuilt and assigned as a new list, so any
observer comparing whole field values (the ORM's change tracking, an
external replicator) sees the update.

Records whose round or quiz has since been deleted stay in the collection
and simply never match again.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from pubranker.models import Quiz, Round, Team
from .aggregation import global_total


@dataclass(frozen=True)
class RoundScore:
    round_id: str
    round_name: str
    points: int

    @classmethod
    def from_dict(cls, data: dict) -> "RoundScore":
        return cls(
            round_id=data['round_id'],
            round_name=data.get('round_name', ''),
            points=int(data.get('points', 0)),
        )


@dataclass(frozen=True)
class QuizConfirmation:
    quiz_id: str
    quiz_name: str
    is_confirmed: bool

    @classmethod
    def from_dict(cls, data: dict) -> "QuizConfirmation":
        return cls(
            quiz_id=data['quiz_id'],
            quiz_name=data.get('quiz_name', ''),
            is_confirmed=bool(data.get('is_confirmed', False)),
        )


def round_scores(team: Team) -> list[RoundScore]:
    return [RoundScore.from_dict(e) for e in team.round_scores or []]


def quiz_confirmations(team: Team) -> list[QuizConfirmation]:
    return [QuizConfirmation.from_dict(e) for e in team.quiz_confirmations or []]


def _publish_round_scores(team: Team, records: list[RoundScore]) -> None:
    team.round_scores = [asdict(r) for r in records]
    team.last_modified = datetime.utcnow()
    team.total_score = global_total(team)


def record_score(team: Team, round_: Round, points: int) -> None:
    """Upsert the team's score for a round.

    An existing record (matched by round id) keeps its position and its
    stored round name; only the points change. A new record copies the
    round's current name.
    """
    records = round_scores(team)
    for i, record in enumerate(records):
        if record.round_id == round_.id:
            records[i] = RoundScore(record.round_id, record.round_name, int(points))
            break
    else:
        records.append(RoundScore(round_.id, round_.name, int(points)))
    _publish_round_scores(team, records)


def clear_score(team: Team, round_: Round) -> bool:
    """Drop the team's score for a round. Returns whether a record was removed."""
    records = round_scores(team)
    kept = [r for r in records if r.round_id != round_.id]
    if len(kept) == len(records):
        return False
    _publish_round_scores(team, kept)
    return True


def score(team: Team, round_: Round) -> Optional[int]:
    for record in round_scores(team):
        if record.round_id == round_.id:
            return record.points
    return None


def has_score(team: Team, round_: Round) -> bool:
    return score(team, round_) is not None


def record_confirmation(team: Team, quiz: Quiz, is_confirmed: bool) -> None:
    """Upsert the team's confirmation for one quiz (keyed by quiz id)."""
    records = quiz_confirmations(team)
    for i, record in enumerate(records):
        if record.quiz_id == quiz.id:
            records[i] = QuizConfirmation(record.quiz_id, record.quiz_name, bool(is_confirmed))
            break
    else:
        records.append(QuizConfirmation(quiz.id, quiz.name, bool(is_confirmed)))
    team.quiz_confirmations = [asdict(r) for r in records]
    team.last_modified = datetime.utcnow()


def is_confirmed(team: Team, quiz: Quiz) -> bool:
    """Per-quiz confirmation; False when never recorded. Ignores the global flag."""
    for record in quiz_confirmations(team):
        if record.quiz_id == quiz.id:
            return record.is_confirmed
    return False
