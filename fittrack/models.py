from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class Workout(db.Model):
    __tablename__ = 'workouts'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    workout_date = db.Column(db.DateTime, nullable=False, index=True)
    workout_type = db.Column(db.String(120), nullable=False)
    # Nullable: template sessions only record type and time
    duration = db.Column(db.Integer)
    notes = db.Column(db.Text)
    image = db.Column(db.String(255))
    source = db.Column(db.String(16), nullable=False, default='form')
