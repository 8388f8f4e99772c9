"""Authentication routes and decorators."""
from functools import wraps

from flask import Blueprint, current_app, g, jsonify, request
from flask_babel import gettext as _

from activity_tracker.errors import Forbidden, Unauthorized, ValidationError
from activity_tracker.policy import STUDENT, is_allowed
from activity_tracker.security import create_access_token, decode_access_token
from activity_tracker.services import users as user_service
from activity_tracker.storage import get_store

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


# ==================== RBAC Decorators (MUST be defined before routes that use them) ====================

def current_user_from_request():
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        raise Unauthorized('Missing or invalid Authorization header. Expected: Bearer <token>')

    claims = decode_access_token(header.split(' ', 1)[1].strip(), current_app.config['JWT_SECRET_KEY'])
    try:
        user_id = int(claims['sub'])
    except (TypeError, ValueError):
        raise Unauthorized('Invalid token subject')

    user = get_store().get_user(user_id)
    if user is None or not user.is_active:
        raise Unauthorized('User no longer exists or is deactivated')
    return user


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.current_user = current_user_from_request()
        return f(*args, **kwargs)
    return decorated_function


def permission_required(operation):
    """Guard a route with the role policy entry for ``operation``."""
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if not is_allowed(operation, g.current_user.role):
                raise Forbidden('Access denied')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def check_api_key():
    """When API_KEY is configured, every request but the index must present it."""
    expected = current_app.config.get('API_KEY')
    if not expected or request.path == '/' or request.method == 'OPTIONS':
        return None
    if request.headers.get('X-API-Key') != expected:
        raise Unauthorized('Invalid API key')
    return None


def token_response(user, message, status=200):
    token = create_access_token(user, current_app.config['JWT_SECRET_KEY'],
                                current_app.config['JWT_EXPIRES_SECONDS'])
    return jsonify({'message': message, 'token': token, 'user': user.to_dict()}), status


def json_body():
    """The request's JSON object, or {} when there is no body."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


# ==================== Routes ====================

@auth_bp.route('/register', methods=['POST'])
def register():
    """Self-registration creates students; other roles come from the CLI or an admin."""
    data = dict(json_body(), role=STUDENT)
    user = user_service.create_user(get_store(), data, current_app.config['STUDENT_ID_PREFIX'])
    return token_response(user, _('User created successfully'), 201)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    user = user_service.verify_credentials(
        get_store(), data.get('email'), data.get('password'), data.get('role') or None)
    return token_response(user, _('Login successful'))


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'user': g.current_user.to_dict()})


@auth_bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    data = json_body()
    user = user_service.update_profile(get_store(), g.current_user.id, data)
    return jsonify({'message': _('Profile updated successfully'), 'user': user.to_dict()})


@auth_bp.route('/password', methods=['PUT'])
@login_required
def change_password():
    data = json_body()
    user_service.change_password(get_store(), g.current_user,
                                 data.get('currentPassword'), data.get('newPassword'))
    return jsonify({'message': _('Password updated successfully')})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    # Tokens are stateless; the client drops its copy
    return jsonify({'message': _('Logout successful')})
