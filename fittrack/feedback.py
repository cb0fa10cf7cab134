import smtplib
from email.message import EmailMessage

from flask import Blueprint, current_app, render_template, request, redirect, url_for

feedback_bp = Blueprint('feedback', __name__)


def _one_line(value):
    return ' '.join((value or '').split())


def build_message(name, email, message, recipient, sender):
    msg = EmailMessage()
    msg['Subject'] = f'Message from {_one_line(name)}'
    msg['From'] = sender
    msg['To'] = recipient
    msg['Reply-To'] = _one_line(email)
    msg.set_content(f'Name: {name}\nEmail: {email}\n\nMessage:\n{message}')
    return msg


def send_feedback_mail(name, email, message):
    cfg = current_app.config
    msg = build_message(name, email, message, cfg['FEEDBACK_RECIPIENT'], cfg['MAIL_SENDER'])
    with smtplib.SMTP(cfg['MAIL_SERVER'], cfg['MAIL_PORT']) as smtp:
        smtp.send_message(msg)


@feedback_bp.route('/send_feedback', methods=['GET', 'POST'])
def send_feedback():
    if request.method == 'GET':
        return redirect(url_for('index'))
    name = (request.form.get('name') or '').strip()
    email = (request.form.get('email') or '').strip()
    message = (request.form.get('message') or '').strip()
    if not name or not email or not message:
        return render_template('feedback_result.html', ok=False,
                               text='Name, email and message are required.'), 400
    try:
        send_feedback_mail(name, email, message)
    except (smtplib.SMTPException, OSError):
        current_app.logger.exception('Could not deliver feedback from %s', email)
        return render_template('feedback_result.html', ok=False,
                               text='Could not send your message. Please try again.'), 502
    current_app.logger.info('Feedback from %s delivered', email)
    return render_template('feedback_result.html', ok=True,
                           text="Thanks for your message! We'll get back to you soon.")
