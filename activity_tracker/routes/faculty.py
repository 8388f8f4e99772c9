"""Faculty routes - review queue, approvals and the student directory."""
from flask import Blueprint, g, jsonify, request
from flask_babel import gettext as _

from activity_tracker.models.activity import PENDING
from activity_tracker.routes.auth import json_body, permission_required
from activity_tracker.services import activities as activity_service
from activity_tracker.services import analytics, students, workflow
from activity_tracker.storage import get_store

faculty_bp = Blueprint('faculty', __name__, url_prefix='/faculty')


@faculty_bp.route('/pending')
@permission_required('activity.list')
def pending():
    """Oldest submissions first."""
    criteria = activity_service.build_filter(request.args, status=PENDING, sort_order='asc',
                                             sort_by='submittedAt', student_id=None)
    return jsonify(activity_service.list_activities(get_store(), criteria))


@faculty_bp.route('/activities')
@permission_required('activity.list')
def all_activities():
    criteria = activity_service.build_filter(request.args)
    return jsonify(activity_service.list_activities(get_store(), criteria))


@faculty_bp.route('/activities/<int:activity_id>/approve', methods=['PUT'])
@permission_required('activity.review')
def approve_activity(activity_id):
    activity = workflow.approve(get_store(), activity_id, g.current_user)
    return jsonify({'message': _('Activity approved successfully'), 'activity': activity.to_dict()})


@faculty_bp.route('/activities/<int:activity_id>/reject', methods=['PUT'])
@permission_required('activity.review')
def reject_activity(activity_id):
    data = json_body()
    activity = workflow.reject(get_store(), activity_id, g.current_user, data.get('reason'))
    return jsonify({'message': _('Activity rejected successfully'), 'activity': activity.to_dict()})


@faculty_bp.route('/activities/bulk-approve', methods=['PUT'])
@permission_required('activity.review')
def bulk_approve():
    data = json_body()
    count = workflow.bulk_approve(get_store(), data.get('activityIds'), g.current_user)
    return jsonify({
        'message': _('%(count)d activities approved successfully', count=count),
        'approvedCount': count,
    })


@faculty_bp.route('/activities/bulk-reject', methods=['PUT'])
@permission_required('activity.review')
def bulk_reject():
    data = json_body()
    count = workflow.bulk_reject(get_store(), data.get('activityIds'), g.current_user, data.get('reason'))
    return jsonify({
        'message': _('%(count)d activities rejected successfully', count=count),
        'rejectedCount': count,
    })


# ==================== STUDENT DIRECTORY ====================

@faculty_bp.route('/students')
@permission_required('student.directory')
def students_list():
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', 10, type=int)
    result = students.list_students(
        get_store(), g.current_user,
        department=request.args.get('department') or None,
        year=request.args.get('year') or None,
        search=request.args.get('search') or None,
        page=max(page, 1),
        limit=max(limit, 1),
    )
    return jsonify(result)


@faculty_bp.route('/students/<student_id>')
@permission_required('student.directory')
def student_detail(student_id):
    return jsonify(students.student_detail(get_store(), g.current_user, student_id))


@faculty_bp.route('/dashboard/stats')
@permission_required('analytics.read')
def dashboard_stats():
    department = request.args.get('department') or None
    return jsonify({'stats': analytics.dashboard_stats(get_store(), department)})
