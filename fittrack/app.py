import logging
import os

from flask import Flask, render_template, redirect, url_for, session
from sqlalchemy.exc import SQLAlchemyError

from .auth import auth_bp, current_identity
from .dashboard import dashboard_bp
from .errors import AuthenticationFailure, StorageFailure
from .feedback import feedback_bp
from .models import db
from .training import training_bp
from .workouts import workouts_bp

UPLOAD_EXTENSIONS = frozenset({'png', 'jpg', 'jpeg', 'gif', 'webp'})


def _settings(app):
    return {
        'SECRET_KEY': os.getenv('SECRET_KEY', 'dev-secret-key-change-me'),
        'SQLALCHEMY_DATABASE_URI': os.getenv('DATABASE_URL', 'sqlite:///fittrack.db'),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'UPLOAD_FOLDER': os.getenv('UPLOAD_FOLDER', os.path.join(app.instance_path, 'uploads')),
        'UPLOAD_EXTENSIONS': UPLOAD_EXTENSIONS,
        'MAX_CONTENT_LENGTH': 8 * 1024 * 1024,
        'DAILY_WORKOUT_GOAL': int(os.getenv('DAILY_WORKOUT_GOAL', '2')),
        'FEEDBACK_RECIPIENT': os.getenv('FEEDBACK_RECIPIENT', 'feedback@localhost'),
        'MAIL_SERVER': os.getenv('MAIL_SERVER', 'localhost'),
        'MAIL_PORT': int(os.getenv('MAIL_PORT', '25')),
        'MAIL_SENDER': os.getenv('MAIL_SENDER', 'noreply@localhost'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
    }


def create_app(config=None):
    app = Flask(__name__, instance_relative_config=True)
    os.makedirs(app.instance_path, exist_ok=True)
    app.config.update(_settings(app))
    if config:
        app.config.update(config)

    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    db.init_app(app)
    with app.app_context():
        db.create_all()

    # ---------------- Routes ----------------
    @app.route('/')
    def index():
        if current_identity() is not None:
            return redirect(url_for('dashboard.dashboard'))
        return render_template('index.html')

    # ---------------- Errors ----------------
    @app.errorhandler(SQLAlchemyError)
    @app.errorhandler(StorageFailure)
    def storage_failure(e):
        db.session.rollback()
        app.logger.error('Database failure: %s', e, exc_info=e)
        return 'Could not reach the database.', 500, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.errorhandler(AuthenticationFailure)
    def stale_session(e):
        app.logger.info('Dropping session for unknown user id=%s', session.get('user_id'))
        session.clear()
        return redirect(url_for('auth.login'))

    # ---------------- Blueprints ----------------
    app.register_blueprint(auth_bp)
    app.register_blueprint(workouts_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(training_bp)
    app.register_blueprint(feedback_bp)

    app.logger.info('FitTrack started with database %s', app.config['SQLALCHEMY_DATABASE_URI'])
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
