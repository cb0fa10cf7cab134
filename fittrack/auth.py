from dataclasses import dataclass
from functools import wraps

from flask import Blueprint, current_app, render_template, request, redirect, url_for, flash, session
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash

from .errors import ValidationError, ConflictError, AuthenticationFailure
from .models import db, User

auth_bp = Blueprint('auth', __name__)

GUEST_NAME = 'Guest'


@dataclass(frozen=True)
class Identity:
    """The authenticated user a request acts on behalf of."""
    user_id: int
    username: str


def current_identity():
    user_id = session.get('user_id')
    if not user_id:
        return None
    username = session.get('username')
    if not username:
        user = db.session.get(User, user_id)
        username = user.username if user else GUEST_NAME
        session['username'] = username
    return Identity(user_id=user_id, username=username)


def login_required(view):
    """Decorator for route handlers that require an authenticated user.

    The handler receives the caller as the ``identity`` keyword argument.
    """
    @wraps(view)
    def wrapped(*args, **kwargs):
        identity = current_identity()
        if identity is None:
            # preserve requested path in `next` so user can return after login
            return redirect(url_for('auth.login', next=request.full_path.rstrip('?')))
        kwargs['identity'] = identity
        return view(*args, **kwargs)
    return wrapped


def register_user(username, password):
    username = (username or '').strip()
    password = password or ''
    if not username or not password:
        raise ValidationError('Username and password cannot be empty.')
    user = User(username=username, password_hash=generate_password_hash(password))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('A user with that name already exists.')
    return user


def authenticate(username, password):
    username = (username or '').strip()
    user = User.query.filter_by(username=username).first() if username else None
    if not user or not check_password_hash(user.password_hash, password or ''):
        raise AuthenticationFailure('Incorrect username or password.')
    return user


def _start_session(user):
    session.clear()
    session['user_id'] = user.id
    session['username'] = user.username


def _safe_next(target):
    # only local paths, never another host
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('dashboard.dashboard')


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    if request.method == 'GET':
        return render_template('register.html')
    username = request.form.get('username')
    try:
        user = register_user(username, request.form.get('password'))
    except (ValidationError, ConflictError) as e:
        return render_template('register.html', error=e.message, username=username), e.status_code
    _start_session(user)
    current_app.logger.info('Registered user %s (id=%s)', user.username, user.id)
    return redirect(url_for('dashboard.dashboard'))


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        return render_template('login.html', next=request.args.get('next', ''))
    username = request.form.get('username')
    next_url = request.form.get('next') or request.args.get('next')
    try:
        user = authenticate(username, request.form.get('password'))
    except AuthenticationFailure as e:
        current_app.logger.info('Failed login for %r', username)
        return render_template('login.html', error=e.message, username=username, next=next_url or ''), e.status_code
    _start_session(user)
    current_app.logger.info('User %s logged in', user.username)
    return redirect(_safe_next(next_url))


@auth_bp.route('/logout')
def logout():
    user_id = session.get('user_id')
    session.clear()
    if user_id:
        current_app.logger.info('User id=%s logged out', user_id)
    flash('Logged out.', 'info')
    return redirect(url_for('index'))
