from pubranker import db
from datetime import datetime
import uuid


def generate_id():
    """Generate a stable, globally unique entity identifier."""
    return str(uuid.uuid4())


# Non-owning Quiz <-> Team association. Deleting either side only removes rows here.
quiz_team = db.Table(
    'quiz_team',
    db.Column('quiz_id', db.String(36), db.ForeignKey('quiz.id', ondelete='CASCADE'), primary_key=True),
    db.Column('team_id', db.String(36), db.ForeignKey('team.id', ondelete='CASCADE'), primary_key=True),
)


class Quiz(db.Model):
    __tablename__ = 'quiz'
    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    name = db.Column(db.String(128), nullable=False)
    venue = db.Column(db.String(128), nullable=False, default='')
    date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    is_active = db.Column(db.Boolean, nullable=False, default=False)
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    max_teams = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    rounds = db.relationship(
        'Round', back_populates='quiz', cascade='all, delete-orphan', order_by='Round.order_index'
    )
    teams = db.relationship('Team', secondary=quiz_team, back_populates='quizzes')

    def __init__(self, **kwargs):
        super(Quiz, self).__init__(**kwargs)
        if not self.id:
            self.id = generate_id()
        if self.venue is None:
            self.venue = ''
        if self.is_active is None:
            self.is_active = False
        if self.is_completed is None:
            self.is_completed = False
        if self.created_at is None:
            self.created_at = datetime.utcnow()
        if self.date is None:
            self.date = self.created_at

    @property
    def sorted_rounds(self):
        return sorted(self.rounds, key=lambda r: r.order_index)

    @property
    def current_round(self):
        """First round (by order_index) that is not completed yet."""
        return next((r for r in self.sorted_rounds if not r.is_completed), None)

    @property
    def completed_rounds_count(self):
        return sum(1 for r in self.rounds if r.is_completed)

    @property
    def progress(self):
        if not self.rounds:
            return 0.0
        return self.completed_rounds_count / len(self.rounds)

    @property
    def is_full(self):
        return self.max_teams is not None and len(self.teams) >= self.max_teams

    def to_dict(self):
        current = self.current_round
        return {
            'id': self.id,
            'name': self.name,
            'venue': self.venue,
            'date': self.date.isoformat() if self.date else None,
            'is_active': self.is_active,
            'is_completed': self.is_completed,
            'max_teams': self.max_teams,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'rounds': [r.to_dict() for r in self.sorted_rounds],
            'team_ids': [t.id for t in self.teams],
            'current_round_id': current.id if current else None,
            'progress': self.progress,
        }


class Round(db.Model):
    __tablename__ = 'round'
    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    name = db.Column(db.String(128), nullable=False, default='')
    max_points = db.Column(db.Integer, nullable=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    quiz_id = db.Column(db.String(36), db.ForeignKey('quiz.id'), nullable=False, index=True)
    quiz = db.relationship('Quiz', back_populates='rounds')

    def __init__(self, **kwargs):
        super(Round, self).__init__(**kwargs)
        if not self.id:
            self.id = generate_id()
        if self.order_index is None:
            self.order_index = 0
        if self.is_completed is None:
            self.is_completed = False

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'max_points': self.max_points,
            'order_index': self.order_index,
            'is_completed': self.is_completed,
            'quiz_id': self.quiz_id,
        }


class Team(db.Model):
    __tablename__ = 'team'
    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    name = db.Column(db.String(128), nullable=False)
    color = db.Column(db.String(16), nullable=False, default='#007AFF')
    image_data = db.Column(db.LargeBinary, nullable=True)
    contact_person = db.Column(db.String(128), nullable=False, default='')
    email = db.Column(db.String(256), nullable=False, default='')
    # Global flag, independent of the per-quiz confirmations below
    is_confirmed = db.Column(db.Boolean, nullable=False, default=False)
    # Cached sum of round_scores points; recomputed on every score write
    total_score = db.Column(db.Integer, nullable=False, default=0)
    # Snapshot collections. Always assigned a new list, never mutated in place:
    # JSON columns only register a change on assignment.
    round_scores = db.Column(db.JSON, nullable=False, default=list)
    quiz_confirmations = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    last_modified = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    quizzes = db.relationship('Quiz', secondary=quiz_team, back_populates='teams')

    def __init__(self, **kwargs):
        super(Team, self).__init__(**kwargs)
        # Column defaults only apply on flush; the ledger reads these before that
        if not self.id:
            self.id = generate_id()
        if self.round_scores is None:
            self.round_scores = []
        if self.quiz_confirmations is None:
            self.quiz_confirmations = []
        if self.total_score is None:
            self.total_score = 0
        if self.is_confirmed is None:
            self.is_confirmed = False
        if self.created_at is None:
            self.created_at = datetime.utcnow()
        if self.last_modified is None:
            self.last_modified = self.created_at

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'has_image': self.image_data is not None,
            'contact_person': self.contact_person,
            'email': self.email,
            'is_confirmed': self.is_confirmed,
            'total_score': self.total_score,
            'round_scores': list(self.round_scores or []),
            'quiz_confirmations': list(self.quiz_confirmations or []),
            'quiz_ids': [q.id for q in self.quizzes],
            'last_modified': self.last_modified.isoformat() if self.last_modified else None,
        }
