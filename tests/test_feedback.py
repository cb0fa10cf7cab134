import smtplib

import pytest

from fittrack import feedback
from fittrack.feedback import build_message


class FakeSMTP:
    sent = []

    def __init__(self, host, port):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def send_message(self, msg):
        FakeSMTP.sent.append((self.host, self.port, msg))


class RefusingSMTP(FakeSMTP):
    def send_message(self, msg):
        raise smtplib.SMTPRecipientsRefused({})


@pytest.fixture(autouse=True)
def fake_smtp(monkeypatch):
    FakeSMTP.sent = []
    monkeypatch.setattr(feedback.smtplib, 'SMTP', FakeSMTP)


def test_feedback_is_mailed(client):
    resp = client.post('/send_feedback', data={'name': 'Ann', 'email': 'ann@example.com',
                                               'message': 'Great app'})
    assert resp.status_code == 200
    assert b'Thanks for your message!' in resp.data
    assert len(FakeSMTP.sent) == 1
    host, port, msg = FakeSMTP.sent[0]
    assert (host, port) == ('smtp.example.com', 2525)
    assert msg['To'] == 'owner@example.com'
    assert msg['Subject'] == 'Message from Ann'
    assert msg['Reply-To'] == 'ann@example.com'
    assert 'Great app' in msg.get_content()


def test_feedback_requires_all_fields(client):
    resp = client.post('/send_feedback', data={'name': 'Ann', 'email': '', 'message': 'hi'})
    assert resp.status_code == 400
    assert FakeSMTP.sent == []


def test_feedback_delivery_failure(client, monkeypatch):
    monkeypatch.setattr(feedback.smtplib, 'SMTP', RefusingSMTP)
    resp = client.post('/send_feedback', data={'name': 'Ann', 'email': 'ann@example.com',
                                               'message': 'hi'})
    assert resp.status_code == 502
    assert b'Please try again.' in resp.data


def test_feedback_get_redirects_home(client):
    resp = client.get('/send_feedback')
    assert resp.status_code == 302
    assert resp.headers['Location'].endswith('/')


def test_header_values_stay_on_one_line():
    msg = build_message('Eve\r\nBcc: victim@example.com', 'eve@example.com', 'body',
                        'owner@example.com', 'noreply@example.com')
    assert msg['Subject'] == 'Message from Eve Bcc: victim@example.com'
    assert msg['Bcc'] is None
