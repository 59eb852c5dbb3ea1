from pubranker.models import Quiz, Team


def global_total(team: Team) -> int:
    """Sum of every recorded round score, orphaned rounds included."""
    return sum(int(e.get('points', 0)) for e in team.round_scores or [])


def quiz_total(team: Team, quiz: Quiz) -> int:
    """Sum of the team's scores for rounds currently in the quiz.

    Not cached: the quiz's round set can change independently of the
    scoring history.
    """
    round_ids = {r.id for r in quiz.rounds}
    return sum(
        int(e.get('points', 0))
        for e in team.round_scores or []
        if e.get('round_id') in round_ids
    )


def round_breakdown(team: Team, quiz: Quiz) -> list:
    """(round, points) pairs in round order, for scored rounds only."""
    points_by_round = {e.get('round_id'): int(e.get('points', 0)) for e in team.round_scores or []}
    return [
        (r, points_by_round[r.id])
        for r in quiz.sorted_rounds
        if r.id in points_by_round
    ]
