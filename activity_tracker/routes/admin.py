"""Admin routes - user management."""
from flask import Blueprint, g, jsonify, request
from flask_babel import gettext as _

from activity_tracker.errors import ValidationError
from activity_tracker.policy import ROLES
from activity_tracker.routes.auth import json_body, permission_required
from activity_tracker.services import users as user_service
from activity_tracker.storage import get_store

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


@admin_bp.route('/users')
@permission_required('user.manage')
def users_list():
    """List users, optionally by role or department."""
    role = request.args.get('role') or None
    if role and role not in ROLES:
        raise ValidationError(f'Invalid role: {role}')
    users = get_store().list_users(
        role=role,
        department=request.args.get('department') or None,
        search=request.args.get('search') or None,
    )
    return jsonify({'users': [u.to_dict() for u in users], 'validRoles': list(ROLES)})


@admin_bp.route('/users/<int:user_id>/role', methods=['PUT'])
@permission_required('user.manage')
def update_user_role(user_id):
    """Update a user's role (never your own)."""
    data = json_body()
    user = user_service.set_role(get_store(), g.current_user, user_id, data.get('role'))
    return jsonify({'message': _('Role of %(email)s updated to %(role)s', email=user.email, role=user.role),
                    'user': user.to_dict()})


@admin_bp.route('/users/<int:user_id>/active', methods=['PUT'])
@permission_required('user.manage')
def update_user_active(user_id):
    """Activate or deactivate an account. Users are never deleted."""
    data = json_body()
    if not isinstance(data.get('active'), bool):
        raise ValidationError('"active" must be true or false')
    user = user_service.set_active(get_store(), g.current_user, user_id, data['active'])
    return jsonify({'message': _('User updated successfully'), 'user': user.to_dict()})
