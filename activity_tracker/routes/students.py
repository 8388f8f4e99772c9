"""Student self-service routes."""
from flask import Blueprint, g, jsonify, request
from flask_babel import gettext as _

from activity_tracker.routes.auth import json_body, permission_required
from activity_tracker.services import activities as activity_service
from activity_tracker.services import students
from activity_tracker.services import users as user_service
from activity_tracker.storage import get_store

students_bp = Blueprint('students', __name__, url_prefix='/students')


@students_bp.route('/dashboard')
@permission_required('student.self')
def dashboard():
    return jsonify(students.dashboard(get_store(), g.current_user))


@students_bp.route('/profile')
@permission_required('student.self')
def profile():
    return jsonify({'profile': students.profile(get_store(), g.current_user)})


@students_bp.route('/profile', methods=['PUT'])
@permission_required('student.self')
def update_profile():
    data = json_body()
    fields = {key: data.get(key) for key in ('name', 'year', 'gpa', 'preferences')}
    student = user_service.update_profile(get_store(), g.current_user.id, fields)
    return jsonify({'message': _('Profile updated successfully'), 'student': student.to_dict()})


@students_bp.route('/activities')
@permission_required('student.self')
def activities():
    criteria = activity_service.build_filter(request.args, owner_ids=[g.current_user.id],
                                             department=None, student_id=None)
    return jsonify(activity_service.list_activities(get_store(), criteria))


@students_bp.route('/portfolio')
@permission_required('student.self')
def portfolio():
    return jsonify({'portfolio': students.portfolio(get_store(), g.current_user)})


@students_bp.route('/progress')
@permission_required('student.self')
def progress():
    timeframe = request.args.get('timeframe', '6months')
    return jsonify({'monthlyData': students.progress(get_store(), g.current_user, timeframe)})


@students_bp.route('/stats')
@permission_required('student.self')
def stats():
    return jsonify({'stats': students.stats(get_store(), g.current_user)})
