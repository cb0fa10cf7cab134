import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from fittrack import create_app
from fittrack.models import db


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///' + str(tmp_path / 'test.db'),
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'FEEDBACK_RECIPIENT': 'owner@example.com',
        'MAIL_SERVER': 'smtp.example.com',
        'MAIL_PORT': 2525,
    })
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, username='alice', password='secret'):
    return client.post('/register', data={'username': username, 'password': password})


def login(client, username='alice', password='secret'):
    return client.post('/login', data={'username': username, 'password': password})


@pytest.fixture
def logged_in(client):
    register(client)
    return client
