from flask_socketio import join_room, leave_room, emit
from pubranker import socketio
from pubranker.models import Quiz
from pubranker.services.ledger.ranking import standings


def quiz_room(quiz_id: str) -> str:
    return f"quiz:{quiz_id}"


def standings_payload(quiz: Quiz) -> dict:
    current = quiz.current_round
    return {
        'quiz_id': quiz.id,
        'standings': standings(quiz),
        'progress': quiz.progress,
        'current_round_id': current.id if current else None,
    }


def broadcast_standings(quiz: Quiz) -> None:
    """Push fresh standings and progress to everyone watching the quiz."""
    socketio.emit(
        'standings_update',
        standings_payload(quiz),
        to=quiz_room(quiz.id),
        namespace='/ws',
    )


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_quiz(data):
    quiz_id = (data or {}).get('quiz_id')
    if not quiz_id:
        emit('error', {'message': 'quiz_id is required'})
        return
    room = quiz_room(quiz_id)
    join_room(room)
    emit('joined', {'room': room})
    # Late joiners get the current standings right away
    quiz = Quiz.query.filter_by(id=quiz_id).first()
    if quiz:
        emit('standings_update', standings_payload(quiz))


def handle_leave_quiz(data):
    quiz_id = (data or {}).get('quiz_id')
    if not quiz_id:
        emit('error', {'message': 'quiz_id is required'})
        return
    room = quiz_room(quiz_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_quiz', handle_join_quiz, namespace='/ws')
    socketio.on_event('leave_quiz', handle_leave_quiz, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_quiz', handle_join_quiz, namespace='/')
        socketio.on_event('leave_quiz', handle_leave_quiz, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
