from collections import OrderedDict

from flask import Blueprint, current_app, render_template, request, session

from .auth import login_required
from .errors import ValidationError, StorageFailure
from .workouts import TemplateEntry, create_workout

training_bp = Blueprint('training', __name__)

SESSION_SECONDS = 30 * 60

PROGRAMS = OrderedDict([
    ('cardio', {
        'title': 'Cardio',
        'description': 'A workout for your heart and lungs.',
        'image': 'images/cardio.jpg',
    }),
    ('strength', {
        'title': 'Strength',
        'description': 'Build strength and muscle mass.',
        'image': 'images/strength.jpg',
    }),
    ('yoga', {
        'title': 'Yoga',
        'description': 'Strengthen the body and calm the mind.',
        'image': 'images/yoga.jpg',
    }),
])


def program_for(workout_type):
    return PROGRAMS.get((workout_type or '').lower())


@training_bp.route('/training_template', methods=['GET', 'POST'])
@login_required
def training_template(identity):
    chosen = request.args.get('workout_type')
    if chosen:
        program = program_for(chosen)
        session['workout_type'] = program['title'] if program else chosen.strip()
    workout_type = session.get('workout_type', '')
    program = program_for(workout_type)

    message, error, status = None, None, 200
    if request.method == 'POST' and 'finish_workout' in request.form:
        try:
            if not workout_type:
                raise ValidationError('Pick a workout from the dashboard first.')
            create_workout(identity, TemplateEntry(workout_type=workout_type))
            message = f'Workout "{workout_type}" recorded!'
        except ValidationError as e:
            error, status = e.message, e.status_code
        except StorageFailure as e:
            current_app.logger.exception('Could not record %r session for user id=%s',
                                         workout_type, identity.user_id)
            error, status = f'Error: {e.message}', e.status_code

    return render_template('training_template.html', workout_type=workout_type, program=program,
                           seconds=SESSION_SECONDS, message=message, error=error), status
