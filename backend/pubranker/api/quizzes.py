from datetime import datetime
from flask import Blueprint, Response, jsonify, request
from pubranker.api.params import json_bool, optional_int
from pubranker.models import Quiz, Round, Team
from pubranker.services.ledger import graph, lifecycle, snapshots
from pubranker.services.ledger.aggregation import quiz_total, round_breakdown
from pubranker.services.ledger.ranking import standings, team_rank
from pubranker.services.export import EXPORT_FORMATS, export_filename, export_quiz
from pubranker.services.persistence import save
from pubranker.socketio_events import broadcast_standings


quizzes = Blueprint('quizzes', __name__)

NOT_SAVED = {'error': 'Changes not saved'}


def _get_quiz(quiz_id):
    return Quiz.query.filter_by(id=quiz_id).first_or_404()


def _get_round(quiz, round_id):
    return Round.query.filter_by(id=round_id, quiz_id=quiz.id).first_or_404()


def _get_quiz_team(quiz, team_id):
    team = Team.query.filter_by(id=team_id).first_or_404()
    if not any(t.id == team.id for t in quiz.teams):
        return team, (jsonify({'error': 'Team is not part of this quiz'}), 400)
    return team, None


def _saved_quiz(quiz, status=200):
    if not save():
        return jsonify(NOT_SAVED), 500
    broadcast_standings(quiz)
    return jsonify(quiz.to_dict()), status


@quizzes.route('', methods=['POST'])
def create_quiz():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Quiz name is required'}), 400
    try:
        date = datetime.fromisoformat(data['date']) if data.get('date') else None
        max_teams = optional_int(data.get('max_teams'))
    except (TypeError, ValueError):
        return jsonify({'error': 'Invalid date or max_teams'}), 400
    if max_teams is not None and max_teams < 1:
        return jsonify({'error': 'max_teams must be positive'}), 400

    quiz = graph.create_quiz(name, venue=data.get('venue') or '', date=date, max_teams=max_teams)
    if not save():
        return jsonify(NOT_SAVED), 500
    return jsonify(quiz.to_dict()), 201


@quizzes.route('', methods=['GET'])
def list_quizzes():
    all_quizzes = Quiz.query.order_by(Quiz.date.desc()).all()
    return jsonify([q.to_dict() for q in all_quizzes])


@quizzes.route('/<string:quiz_id>', methods=['GET'])
def get_quiz(quiz_id):
    return jsonify(_get_quiz(quiz_id).to_dict())


@quizzes.route('/<string:quiz_id>', methods=['DELETE'])
def delete_quiz(quiz_id):
    quiz = _get_quiz(quiz_id)
    graph.delete_quiz(quiz)
    if not save():
        return jsonify(NOT_SAVED), 500
    return jsonify({'message': 'Quiz deleted'})


@quizzes.route('/<string:quiz_id>/start', methods=['POST'])
def start_quiz(quiz_id):
    quiz = _get_quiz(quiz_id)
    lifecycle.start_quiz(quiz)
    return _saved_quiz(quiz)


@quizzes.route('/<string:quiz_id>/complete', methods=['POST'])
def complete_quiz(quiz_id):
    quiz = _get_quiz(quiz_id)
    lifecycle.complete_quiz(quiz)
    return _saved_quiz(quiz)


@quizzes.route('/<string:quiz_id>/cancel', methods=['POST'])
def cancel_quiz(quiz_id):
    quiz = _get_quiz(quiz_id)
    if not lifecycle.cancel_quiz(quiz):
        return jsonify({'error': 'Only an active quiz can be cancelled'}), 400
    return _saved_quiz(quiz)


@quizzes.route('/<string:quiz_id>/rounds', methods=['POST'])
def add_round(quiz_id):
    quiz = _get_quiz(quiz_id)
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Round name is required'}), 400
    try:
        max_points = optional_int(data.get('max_points'))
        order_index = optional_int(data.get('order_index'))
    except (TypeError, ValueError):
        return jsonify({'error': 'max_points and order_index must be integers'}), 400

    round_ = graph.add_round(quiz, name, max_points=max_points, order_index=order_index)
    if not save():
        return jsonify(NOT_SAVED), 500
    broadcast_standings(quiz)
    return jsonify(round_.to_dict()), 201


@quizzes.route('/<string:quiz_id>/rounds/<string:round_id>', methods=['PATCH'])
def update_round(quiz_id, round_id):
    quiz = _get_quiz(quiz_id)
    round_ = _get_round(quiz, round_id)
    data = request.get_json(silent=True) or {}
    if 'name' in data:
        name = (data.get('name') or '').strip()
        if not name:
            return jsonify({'error': 'Round name cannot be empty'}), 400
        graph.rename_round(round_, name)
    if 'max_points' in data:
        try:
            graph.set_round_max_points(round_, optional_int(data.get('max_points')))
        except (TypeError, ValueError):
            return jsonify({'error': 'max_points must be an integer'}), 400
    if not save():
        return jsonify(NOT_SAVED), 500
    return jsonify(round_.to_dict())


@quizzes.route('/<string:quiz_id>/rounds/<string:round_id>', methods=['DELETE'])
def delete_round(quiz_id, round_id):
    quiz = _get_quiz(quiz_id)
    round_ = _get_round(quiz, round_id)
    graph.delete_round(quiz, round_)
    return _saved_quiz(quiz)


@quizzes.route('/<string:quiz_id>/rounds/<string:round_id>/complete', methods=['POST'])
def complete_round(quiz_id, round_id):
    quiz = _get_quiz(quiz_id)
    round_ = _get_round(quiz, round_id)
    lifecycle.complete_round(round_)
    return _saved_quiz(quiz)


@quizzes.route('/<string:quiz_id>/teams', methods=['POST'])
def add_team(quiz_id):
    """Attach an existing team (``team_id``) or create one (``name``) for the quiz."""
    quiz = _get_quiz(quiz_id)
    data = request.get_json(silent=True) or {}
    if quiz.is_full:
        return jsonify({'error': f'Quiz is limited to {quiz.max_teams} teams'}), 409
    confirmed = None
    if 'is_confirmed' in data:
        try:
            confirmed = json_bool(data['is_confirmed'])
        except ValueError:
            return jsonify({'error': 'is_confirmed must be true or false'}), 400

    if data.get('team_id'):
        team = Team.query.filter_by(id=data['team_id']).first_or_404()
        if not graph.attach_team(quiz, team):
            return jsonify({'error': 'Team is already part of this quiz'}), 400
    else:
        name = (data.get('name') or '').strip()
        if not name:
            return jsonify({'error': 'team_id or name is required'}), 400
        team = graph.create_team(
            name,
            color=data.get('color'),
            contact_person=data.get('contact_person') or '',
            email=data.get('email') or '',
        )
        graph.attach_team(quiz, team)

    if confirmed is not None:
        snapshots.record_confirmation(team, quiz, confirmed)

    if not save():
        return jsonify(NOT_SAVED), 500
    broadcast_standings(quiz)
    return jsonify(team.to_dict()), 201


@quizzes.route('/<string:quiz_id>/teams/<string:team_id>', methods=['DELETE'])
def remove_team(quiz_id, team_id):
    quiz = _get_quiz(quiz_id)
    team, error = _get_quiz_team(quiz, team_id)
    if error:
        return error
    graph.detach_team(quiz, team)
    return _saved_quiz(quiz)


@quizzes.route('/<string:quiz_id>/teams/<string:team_id>/confirmation', methods=['PUT'])
def set_confirmation(quiz_id, team_id):
    quiz = _get_quiz(quiz_id)
    team, error = _get_quiz_team(quiz, team_id)
    if error:
        return error
    data = request.get_json(silent=True) or {}
    if 'is_confirmed' not in data:
        return jsonify({'error': 'is_confirmed is required'}), 400
    try:
        confirmed = json_bool(data['is_confirmed'])
    except ValueError:
        return jsonify({'error': 'is_confirmed must be true or false'}), 400
    snapshots.record_confirmation(team, quiz, confirmed)
    if not save():
        return jsonify(NOT_SAVED), 500
    return jsonify({'quiz_id': quiz.id, 'team_id': team.id, 'is_confirmed': snapshots.is_confirmed(team, quiz)})


@quizzes.route('/<string:quiz_id>/rounds/<string:round_id>/scores/<string:team_id>', methods=['PUT'])
def record_score(quiz_id, round_id, team_id):
    quiz = _get_quiz(quiz_id)
    round_ = _get_round(quiz, round_id)
    team, error = _get_quiz_team(quiz, team_id)
    if error:
        return error
    data = request.get_json(silent=True) or {}
    try:
        points = optional_int(data.get('points'))
    except (TypeError, ValueError):
        points = None
    if points is None:
        return jsonify({'error': 'points must be an integer'}), 400

    snapshots.record_score(team, round_, points)
    if not save():
        return jsonify(NOT_SAVED), 500
    broadcast_standings(quiz)
    return jsonify(_score_payload(team, quiz, round_))


@quizzes.route('/<string:quiz_id>/rounds/<string:round_id>/scores/<string:team_id>', methods=['DELETE'])
def clear_score(quiz_id, round_id, team_id):
    quiz = _get_quiz(quiz_id)
    round_ = _get_round(quiz, round_id)
    team, error = _get_quiz_team(quiz, team_id)
    if error:
        return error
    if not snapshots.clear_score(team, round_):
        return jsonify({'error': 'No score recorded for this round'}), 404
    if not save():
        return jsonify(NOT_SAVED), 500
    broadcast_standings(quiz)
    return jsonify(_score_payload(team, quiz, round_))


def _score_payload(team, quiz, round_):
    return {
        'team_id': team.id,
        'round_id': round_.id,
        'points': snapshots.score(team, round_),
        'quiz_total': quiz_total(team, quiz),
        'total_score': team.total_score,
        'rank': team_rank(team, quiz),
    }


@quizzes.route('/<string:quiz_id>/standings', methods=['GET'])
def get_standings(quiz_id):
    quiz = _get_quiz(quiz_id)
    rows = standings(quiz)
    teams_by_id = {t.id: t for t in quiz.teams}
    for row in rows:
        team = teams_by_id[row['team_id']]
        row['rounds'] = [
            {'round_id': r.id, 'round_name': r.name, 'points': points}
            for r, points in round_breakdown(team, quiz)
        ]
    current = quiz.current_round
    return jsonify({
        'quiz_id': quiz.id,
        'standings': rows,
        'progress': quiz.progress,
        'current_round_id': current.id if current else None,
    })


@quizzes.route('/<string:quiz_id>/export', methods=['GET'])
def export(quiz_id):
    quiz = _get_quiz(quiz_id)
    fmt = (request.args.get('format') or 'json').lower()
    if fmt not in EXPORT_FORMATS:
        return jsonify({'error': f'Unsupported format: {fmt}'}), 400
    mimetype = 'application/json' if fmt == 'json' else 'text/csv'
    return Response(
        export_quiz(quiz, fmt),
        mimetype=mimetype,
        headers={'Content-Disposition': f'attachment; filename="{export_filename(quiz, fmt)}"'},
    )
