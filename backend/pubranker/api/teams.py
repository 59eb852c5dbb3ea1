from flask import Blueprint, jsonify, request
from pubranker.api.params import json_bool
from pubranker.models import Quiz, Team
from pubranker.services.ledger import graph
from pubranker.services.persistence import save
from pubranker.socketio_events import broadcast_standings


teams = Blueprint('teams', __name__)

NOT_SAVED = {'error': 'Changes not saved'}


@teams.route('', methods=['POST'])
def create_team():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Team name is required'}), 400
    try:
        confirmed = json_bool(data.get('is_confirmed', False))
    except ValueError:
        return jsonify({'error': 'is_confirmed must be true or false'}), 400
    team = graph.create_team(
        name,
        color=data.get('color'),
        contact_person=data.get('contact_person') or '',
        email=data.get('email') or '',
        is_confirmed=confirmed,
    )
    if not save():
        return jsonify(NOT_SAVED), 500
    return jsonify(team.to_dict()), 201


@teams.route('', methods=['GET'])
def list_teams():
    """Global team list, best overall score first."""
    all_teams = Team.query.order_by(Team.total_score.desc(), Team.name).all()
    return jsonify([t.to_dict() for t in all_teams])


@teams.route('/<string:team_id>', methods=['GET'])
def get_team(team_id):
    return jsonify(Team.query.filter_by(id=team_id).first_or_404().to_dict())


@teams.route('/<string:team_id>', methods=['PATCH'])
def update_team(team_id):
    """Update name, color and contact details.

    ``is_confirmed`` together with ``quiz_id`` sets the per-quiz confirmation;
    without ``quiz_id`` it sets the team's global flag.
    """
    team = Team.query.filter_by(id=team_id).first_or_404()
    data = request.get_json(silent=True) or {}
    try:
        confirmed = json_bool(data.get('is_confirmed', team.is_confirmed))
    except ValueError:
        return jsonify({'error': 'is_confirmed must be true or false'}), 400

    if 'name' in data:
        name = (data.get('name') or '').strip()
        if not name:
            return jsonify({'error': 'Team name cannot be empty'}), 400
        graph.rename_team(team, name)
    if data.get('color'):
        team.color = data['color']

    quiz = None
    if data.get('quiz_id'):
        quiz = Quiz.query.filter_by(id=data['quiz_id']).first_or_404()
    if any(k in data for k in ('contact_person', 'email', 'is_confirmed')):
        graph.update_team_details(
            team,
            contact_person=data.get('contact_person', team.contact_person),
            email=data.get('email', team.email),
            is_confirmed=confirmed,
            quiz=quiz if 'is_confirmed' in data else None,
        )

    if not save():
        return jsonify(NOT_SAVED), 500
    for q in team.quizzes:
        broadcast_standings(q)
    return jsonify(team.to_dict())


@teams.route('/<string:team_id>', methods=['DELETE'])
def delete_team(team_id):
    team = Team.query.filter_by(id=team_id).first_or_404()
    affected = list(team.quizzes)
    graph.delete_team(team)
    if not save():
        return jsonify(NOT_SAVED), 500
    for q in affected:
        broadcast_standings(q)
    return jsonify({'message': 'Team deleted'})
