from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from pubranker.routes import main
    flask_app.register_blueprint(main)

    from pubranker.api.quizzes import quizzes
    from pubranker.api.teams import teams
    from pubranker.api.sync import sync
    flask_app.register_blueprint(quizzes, url_prefix='/api/quizzes')
    flask_app.register_blueprint(teams, url_prefix='/api/teams')
    flask_app.register_blueprint(sync, url_prefix='/api/sync')

    from pubranker.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # One monitor per app, handed to consumers through app.extensions
    from pubranker.services.sync import SyncMonitor
    flask_app.extensions['sync_monitor'] = SyncMonitor(db, socketio)

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database schema."""
        import pubranker.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('export-quiz')
    @click.argument('quiz_id')
    @click.option('--format', 'fmt', type=click.Choice(['json', 'csv']), default='json')
    def export_quiz_command(quiz_id, fmt):
        """Prints a quiz export (standings, rounds, scores)."""
        from pubranker.models import Quiz
        from pubranker.services.export import export_quiz
        with flask_app.app_context():
            quiz = db.session.get(Quiz, quiz_id)
            if quiz is None:
                raise click.ClickException(f'Quiz {quiz_id} not found')
            click.echo(export_quiz(quiz, fmt))

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(export_quiz_command)

    return flask_app
