import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///pubranker.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma-separated list of frontend origins allowed by CORS and Socket.IO
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173',
        ).split(',') if o.strip()
    ]
    # Color assigned to teams created without one
    DEFAULT_TEAM_COLOR = os.environ.get('DEFAULT_TEAM_COLOR', '#007AFF')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
