"""Quiz export as JSON or CSV."""

import csv
import io
import json
from datetime import datetime
from typing import Optional

from pubranker.models import Quiz
from pubranker.services.ledger import snapshots
from pubranker.services.ledger.ranking import dense_rank, sorted_teams

EXPORT_FORMATS = ('json', 'csv')


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def quiz_export_data(quiz: Quiz) -> dict:
    totals = sorted_teams(quiz)
    teams = []
    for (team, total), (_, rank) in zip(totals, dense_rank(totals)):
        teams.append({
            'id': team.id,
            'name': team.name,
            'color': team.color,
            'rank': rank,
            'quiz_total': total,
            'total_score': team.total_score,
            'is_confirmed': snapshots.is_confirmed(team, quiz),
            'round_scores': [
                {'round_id': r.round_id, 'round_name': r.round_name, 'points': r.points}
                for r in snapshots.round_scores(team)
            ],
        })
    return {
        'id': quiz.id,
        'name': quiz.name,
        'venue': quiz.venue,
        'date': _iso(quiz.date),
        'is_active': quiz.is_active,
        'is_completed': quiz.is_completed,
        'created_at': _iso(quiz.created_at),
        'teams': teams,
        'rounds': [
            {
                'id': r.id,
                'name': r.name,
                'max_points': r.max_points,
                'order_index': r.order_index,
                'is_completed': r.is_completed,
            }
            for r in quiz.sorted_rounds
        ],
    }


def export_quiz_json(quiz: Quiz) -> str:
    return json.dumps(quiz_export_data(quiz), indent=2, sort_keys=True)


def export_quiz_csv(quiz: Quiz) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    rounds = quiz.sorted_rounds
    totals = sorted_teams(quiz)

    writer.writerow(['Quiz', quiz.name])
    writer.writerow(['Venue', quiz.venue])
    writer.writerow(['Date', _iso(quiz.date) or ''])
    writer.writerow(['Completed', 'Yes' if quiz.is_completed else 'No'])
    writer.writerow([])

    writer.writerow(['Final ranking'])
    writer.writerow(['Rank', 'Team', 'Total', 'Color'])
    for (team, total), (_, rank) in zip(totals, dense_rank(totals)):
        writer.writerow([rank, team.name, total, team.color])
    writer.writerow([])

    writer.writerow(['Rounds'])
    writer.writerow(['Round', 'Max points', 'Completed'])
    for r in rounds:
        writer.writerow([r.name, '' if r.max_points is None else r.max_points,
                         'Yes' if r.is_completed else 'No'])
    writer.writerow([])

    writer.writerow(['Scores per round'])
    writer.writerow(['Team'] + [r.name for r in rounds] + ['Total'])
    for team, total in totals:
        row = [team.name]
        for r in rounds:
            points = snapshots.score(team, r)
            row.append('-' if points is None else points)
        row.append(total)
        writer.writerow(row)

    return buf.getvalue()


def export_quiz(quiz: Quiz, fmt: str) -> str:
    if fmt == 'json':
        return export_quiz_json(quiz)
    if fmt == 'csv':
        return export_quiz_csv(quiz)
    raise ValueError(f"Unsupported export format: {fmt}")


def export_filename(quiz: Quiz, fmt: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime('%Y-%m-%d_%H%M')
    return f"{quiz.name.replace(' ', '_')}_{stamp}.{fmt}"
