import hashlib
import os
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from flask import Blueprint, current_app, render_template, request, redirect, url_for, flash, send_from_directory
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import RequestEntityTooLarge

from .auth import login_required
from .errors import AuthenticationFailure, ValidationError, StorageFailure
from .models import db, User, Workout

workouts_bp = Blueprint('workouts', __name__)


@dataclass(frozen=True)
class FullEntry:
    """A workout logged through the full form."""
    workout_date: datetime
    workout_type: str
    duration: Optional[int] = None
    notes: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_form(cls, form):
        workout_type = (form.get('workout_type') or '').strip()
        if not workout_type:
            raise ValidationError('Workout type is required.')
        try:
            day = datetime.strptime((form.get('date') or '').strip(), '%Y-%m-%d')
        except ValueError:
            raise ValidationError('Date must be given as YYYY-MM-DD.')
        try:
            duration = int(form.get('duration'))
        except (TypeError, ValueError):
            duration = None
        notes = (form.get('notes') or '').strip() or None
        return cls(workout_date=day, workout_type=workout_type,
                   duration=duration, notes=notes)


@dataclass(frozen=True)
class TemplateEntry:
    """A workout recorded when a guided training session is finished."""
    workout_type: str


def create_workout(identity, entry):
    if db.session.get(User, identity.user_id) is None:
        raise AuthenticationFailure('Your account no longer exists. Please log in again.')
    if isinstance(entry, FullEntry):
        workout = Workout(user_id=identity.user_id, workout_date=entry.workout_date,
                          workout_type=entry.workout_type, duration=entry.duration,
                          notes=entry.notes, image=entry.image, source='form')
    elif isinstance(entry, TemplateEntry):
        workout = Workout(user_id=identity.user_id, workout_date=datetime.now(),
                          workout_type=entry.workout_type, source='template')
    else:
        raise TypeError(f'unsupported workout entry: {entry!r}')
    db.session.add(workout)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageFailure(str(e)) from e
    current_app.logger.info('User id=%s logged %s workout %r (id=%s)',
                            identity.user_id, workout.source, workout.workout_type, workout.id)
    return workout


def delete_workout(identity, workout_id):
    """Delete one of the caller's workouts; returns the number of rows removed."""
    if workout_id is None:
        return 0
    removed = Workout.query.filter_by(id=workout_id, user_id=identity.user_id).delete()
    db.session.commit()
    if removed:
        current_app.logger.info('User id=%s deleted workout id=%s', identity.user_id, workout_id)
    else:
        current_app.logger.info('User id=%s: no workout id=%s to delete', identity.user_id, workout_id)
    return removed


def save_upload(file_storage):
    """Store an uploaded image under its content hash.

    Returns the path relative to the app (``uploads/<name>``) or None when
    there is nothing usable to store.
    """
    if file_storage is None or not file_storage.filename:
        return None
    _, ext = os.path.splitext(file_storage.filename)
    ext = ext.lower().lstrip('.')
    if ext not in current_app.config['UPLOAD_EXTENSIONS']:
        current_app.logger.info('Ignoring upload %r: extension not allowed', file_storage.filename)
        return None
    data = file_storage.read()
    if not data:
        return None
    name = f'{hashlib.sha256(data).hexdigest()}.{ext}'
    folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    path = os.path.join(folder, name)
    if not os.path.exists(path):
        with open(path, 'wb') as fh:
            fh.write(data)
    return f'uploads/{name}'


@workouts_bp.route('/add_workout', methods=['GET', 'POST'])
@login_required
def add_workout(identity):
    if request.method == 'GET':
        return render_template('add_workout.html')
    try:
        entry = FullEntry.from_form(request.form)
    except ValidationError as e:
        return render_template('add_workout.html', error=e.message, form=request.form), e.status_code
    image = save_upload(request.files.get('image'))
    if image:
        entry = replace(entry, image=image)
    create_workout(identity, entry)
    flash('Workout added.', 'success')
    return redirect(url_for('dashboard.dashboard'))


@workouts_bp.route('/delete_workout', methods=['GET', 'POST'])
@login_required
def remove_workout(identity):
    workout_id = request.values.get('id', type=int)
    if delete_workout(identity, workout_id):
        flash('Workout removed.', 'success')
    else:
        flash('Workout not found.', 'error')
    return redirect(url_for('dashboard.dashboard'))


@workouts_bp.route('/uploads/<path:name>')
@login_required
def uploaded_image(name, identity):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], name)


@workouts_bp.errorhandler(RequestEntityTooLarge)
def upload_too_large(e):
    current_app.logger.info('Rejected oversized upload (%s bytes)', request.content_length)
    return render_template('add_workout.html',
                           error='The photo is too large. Nothing was saved.'), 413
