import json

from pubranker.models import Quiz
from pubranker.services.ledger import graph, snapshots
from pubranker.services.persistence import save


def test_export_quiz_command(flask_app):
    quiz = graph.create_quiz('CLI Night')
    round_ = graph.add_round(quiz, 'Music')
    team = graph.create_team('Alpha')
    graph.attach_team(quiz, team)
    snapshots.record_score(team, round_, 5)
    assert save()

    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['export-quiz', quiz.id])
    assert result.exit_code == 0
    assert json.loads(result.output)['teams'][0]['quiz_total'] == 5

    result = runner.invoke(args=['export-quiz', quiz.id, '--format', 'csv'])
    assert result.exit_code == 0
    assert 'Alpha' in result.output


def test_export_unknown_quiz(flask_app):
    result = flask_app.test_cli_runner().invoke(args=['export-quiz', 'nope'])
    assert result.exit_code != 0
    assert 'not found' in result.output


def test_db_reset_command(flask_app):
    graph.create_quiz('Soon gone')
    assert save()

    result = flask_app.test_cli_runner().invoke(args=['db-reset'])
    assert result.exit_code == 0
    assert Quiz.query.count() == 0
