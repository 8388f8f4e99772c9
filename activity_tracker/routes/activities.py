"""Activity routes - submission, owner edits, comments, downloads."""
import os

from flask import Blueprint, current_app, g, jsonify, request, send_file
from flask_babel import gettext as _

from activity_tracker.errors import NotFound
from activity_tracker.routes.auth import json_body, login_required, permission_required
from activity_tracker.services import activities as activity_service
from activity_tracker.services.uploads import UploadStorage
from activity_tracker.storage import get_store

activities_bp = Blueprint('activities', __name__, url_prefix='/activities')


def _uploads():
    return UploadStorage.from_config(current_app.config)


def _payload():
    """Multipart form for submissions with files, JSON otherwise."""
    if request.is_json:
        return json_body()
    return request.form.to_dict()


@activities_bp.route('/student/<student_id>')
@login_required
def list_for_student(student_id):
    criteria = activity_service.build_filter(request.args)
    result = activity_service.list_for_student(get_store(), student_id, g.current_user, criteria)
    return jsonify(result)


@activities_bp.route('/<int:activity_id>')
@login_required
def get_activity(activity_id):
    activity = activity_service.get_activity(get_store(), activity_id, g.current_user)
    return jsonify({'activity': activity.to_dict()})


@activities_bp.route('', methods=['POST'])
@permission_required('activity.submit')
def create_activity():
    activity = activity_service.submit_activity(
        get_store(), g.current_user, _payload(), request.files.getlist('files'), _uploads())
    return jsonify({'message': _('Activity submitted successfully'), 'activity': activity.to_dict()}), 201


@activities_bp.route('/<int:activity_id>', methods=['PUT'])
@login_required
def update_activity(activity_id):
    activity = activity_service.update_activity(get_store(), activity_id, g.current_user, _payload())
    return jsonify({'message': _('Activity updated successfully'), 'activity': activity.to_dict()})


@activities_bp.route('/<int:activity_id>', methods=['DELETE'])
@login_required
def delete_activity(activity_id):
    activity_service.delete_activity(get_store(), activity_id, g.current_user, _uploads())
    return jsonify({'message': _('Activity deleted successfully')})


@activities_bp.route('/<int:activity_id>/comments', methods=['POST'])
@login_required
def add_comment(activity_id):
    data = json_body()
    activity = activity_service.add_comment(get_store(), activity_id, g.current_user, data.get('content'))
    return jsonify({'message': _('Comment added successfully'), 'activity': activity.to_dict()})


@activities_bp.route('/<int:activity_id>/files/<int:file_id>')
@login_required
def download_file(activity_id, file_id):
    descriptor = activity_service.get_activity_file(get_store(), activity_id, file_id, g.current_user)
    if not os.path.exists(descriptor.path):
        raise NotFound('File not found on disk')
    return send_file(descriptor.path, mimetype=descriptor.mime_type,
                     as_attachment=True, download_name=descriptor.original_name)
