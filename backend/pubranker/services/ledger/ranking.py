"""Dense-rank standings for a quiz.

Tied totals share a rank and the next lower total gets the next integer,
so ``[50, 50, 40, 10]`` ranks as ``[1, 1, 2, 3]``.
"""

from typing import Any, Iterable, List, Tuple

from pubranker.models import Quiz, Team
from .aggregation import quiz_total


def dense_rank(scored: Iterable[Tuple[Any, int]]) -> List[Tuple[Any, int]]:
    """Assign dense ranks to ``(item, score)`` pairs already sorted descending."""
    ranked = []
    rank = 1
    previous = None
    for item, value in scored:
        if previous is not None and value != previous:
            rank += 1
        ranked.append((item, rank))
        previous = value
    return ranked


def _tie_break_key(team: Team):
    return (team.name.casefold(), team.created_at, team.id)


def sorted_teams(quiz: Quiz) -> List[Tuple[Team, int]]:
    """Quiz teams with their quiz totals, best first.

    Equal totals are ordered by case-folded name, then creation time, then id.
    """
    totals = [(team, quiz_total(team, quiz)) for team in quiz.teams]
    totals.sort(key=lambda pair: _tie_break_key(pair[0]))
    totals.sort(key=lambda pair: pair[1], reverse=True)
    return totals


def team_rankings(quiz: Quiz) -> List[Tuple[Team, int]]:
    return dense_rank(sorted_teams(quiz))


def team_rank(team: Team, quiz: Quiz) -> int:
    """Rank of the team in the quiz; 1 when the team is not participating."""
    for ranked_team, rank in team_rankings(quiz):
        if ranked_team.id == team.id:
            return rank
    return 1


def standings(quiz: Quiz) -> list:
    """Serializable standings rows for presentation consumers."""
    totals = sorted_teams(quiz)
    rows = []
    for (team, total), (_, rank) in zip(totals, dense_rank(totals)):
        rows.append({
            'rank': rank,
            'team_id': team.id,
            'team_name': team.name,
            'color': team.color,
            'quiz_total': total,
            'total_score': team.total_score,
        })
    return rows
