"""User directory: registration, credential checks, profile updates."""
import logging
import random
import re

from activity_tracker.errors import (
    DuplicateKey, Forbidden, InvalidCredentials, NotFound, ValidationError,
)
from activity_tracker.models import User
from activity_tracker.models.user import YEARS, THEMES, default_preferences, utcnow
from activity_tracker.policy import ROLES, STUDENT, authorize
from activity_tracker.security import MIN_PASSWORD_LENGTH, hash_password, verify_password
from activity_tracker.services import text

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def is_valid_email(email):
    return bool(email and EMAIL_RE.match(email))


def generate_student_id(prefix='CS', year=None):
    """<prefix><year><4 random digits>, e.g. CS20240042."""
    year = year or utcnow().year
    return f'{prefix}{year}{random.randint(0, 9999):04d}'


def create_user(store, profile, student_id_prefix='CS'):
    name = text(profile.get('name'), 'Name')
    email = text(profile.get('email'), 'Email').lower()
    department = text(profile.get('department'), 'Department')
    password = profile.get('password') or ''
    role = profile.get('role') or STUDENT

    if not name:
        raise ValidationError('Name is required')
    if not is_valid_email(email):
        raise ValidationError('A valid email is required')
    if not department:
        raise ValidationError('Department is required')
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
    if role not in ROLES:
        raise ValidationError(f'Invalid role: {role}')

    if store.find_user(email=email) is not None:
        raise DuplicateKey('User already exists')

    student_id = None
    if role == STUDENT:
        student_id = text(profile.get('studentId'), 'Student ID') or generate_student_id(student_id_prefix)
        if store.find_user(student_id=student_id) is not None:
            raise DuplicateKey(f'Student ID {student_id} is already taken')

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
        student_id=student_id,
        department=department,
        year=_validate_year(profile.get('year') or 'Freshman'),
        gpa=_validate_gpa(profile.get('gpa', 0.0)),
        avatar=text(profile.get('avatar'), 'Avatar'),
        is_active=True,
        preferences=default_preferences(),
    )
    store.add_user(user)
    store.commit()
    logger.info('Registered %s user %s', role, email)
    return user


def verify_credentials(store, email, password, role=None):
    if not isinstance(email, str) or not isinstance(password, str):
        raise InvalidCredentials('Invalid credentials')
    if role is not None and not isinstance(role, str):
        raise InvalidCredentials('Invalid credentials')
    user = store.find_user(email=email, role=role)
    if user is None or not verify_password(user.password_hash, password):
        raise InvalidCredentials('Invalid credentials')
    if not user.is_active:
        raise Forbidden('Account deactivated. Please contact the administrator.')

    user.last_login = utcnow()
    store.commit()
    logger.info('Login for %s', user.email)
    return user


def get_user(store, user_id):
    user = store.get_user(user_id)
    if user is None:
        raise NotFound('User not found')
    return user


def update_profile(store, user_id, fields):
    """Apply only the provided fields. Email, role and student ID never change here."""
    user = get_user(store, user_id)

    name = text(fields.get('name'), 'Name')
    if name:
        user.name = name
    department = text(fields.get('department'), 'Department')
    if department:
        user.department = department
    if fields.get('year'):
        user.year = _validate_year(fields['year'])
    if fields.get('gpa') is not None:
        user.gpa = _validate_gpa(fields['gpa'])
    if fields.get('avatar') is not None:
        user.avatar = text(fields['avatar'], 'Avatar')
    if fields.get('preferences'):
        user.preferences = _merge_preferences(user.preferences, fields['preferences'])

    user.updated_at = utcnow()
    store.commit()
    return user


def change_password(store, user, current_password, new_password):
    if not verify_password(user.password_hash, current_password):
        raise ValidationError('Current password is incorrect')
    if not isinstance(new_password, str) or len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
    user.password_hash = hash_password(new_password)
    store.commit()


# ==================== Administration ====================

def set_role(store, admin, user_id, role):
    authorize('user.manage', admin)
    if role not in ROLES:
        raise ValidationError(f'Invalid role: {role}')
    user = get_user(store, user_id)
    if user.id == admin.id:
        raise Forbidden('You cannot change your own role')
    user.role = role
    store.commit()
    logger.info('%s changed role of %s to %s', admin.email, user.email, role)
    return user


def set_active(store, admin, user_id, active):
    authorize('user.manage', admin)
    user = get_user(store, user_id)
    if user.id == admin.id:
        raise Forbidden('You cannot deactivate yourself')
    user.is_active = bool(active)
    store.commit()
    logger.info('%s set %s active=%s', admin.email, user.email, user.is_active)
    return user


def _validate_year(year):
    if year not in YEARS:
        raise ValidationError(f'Year must be one of: {", ".join(YEARS)}')
    return year


def _validate_gpa(value):
    try:
        gpa = float(value)
    except (TypeError, ValueError):
        raise ValidationError('GPA must be a number')
    if not 0.0 <= gpa <= 4.0:
        raise ValidationError('GPA must be between 0.0 and 4.0')
    return gpa


def _merge_preferences(current, update):
    if not isinstance(update, dict):
        raise ValidationError('Preferences must be an object')
    merged = dict(current or default_preferences())
    if 'theme' in update:
        if update['theme'] not in THEMES:
            raise ValidationError(f'Theme must be one of: {", ".join(THEMES)}')
        merged['theme'] = update['theme']
    if isinstance(update.get('notifications'), dict):
        notifications = dict(merged.get('notifications') or {})
        for channel in ('email', 'push'):
            if channel in update['notifications']:
                notifications[channel] = bool(update['notifications'][channel])
        merged['notifications'] = notifications
    return merged
