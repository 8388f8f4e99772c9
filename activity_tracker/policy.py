"""Role policy: which roles may invoke which operation.

Routes consult this table through the ``permission_required`` decorator and
services call ``authorize`` before reading any state, so the matrix is
enforced the same way on every path. Ownership rules (a student touching
only their own records) are layered on top by the activity services.
"""
from activity_tracker.errors import Forbidden

STUDENT = 'student'
FACULTY = 'faculty'
ADMIN = 'admin'
ROLES = (STUDENT, FACULTY, ADMIN)

REVIEWERS = frozenset({FACULTY, ADMIN})

POLICY = {
    'activity.submit': frozenset({STUDENT}),
    'activity.update': frozenset({STUDENT}),
    'activity.delete': frozenset({STUDENT}),
    'activity.read': frozenset(ROLES),
    'activity.comment': REVIEWERS,
    'activity.review': REVIEWERS,
    'activity.list': REVIEWERS,
    'student.self': frozenset({STUDENT}),
    'student.directory': REVIEWERS,
    'analytics.read': REVIEWERS,
    'user.manage': frozenset({ADMIN}),
}


def is_allowed(operation, role):
    """Unknown operations are denied."""
    return role in POLICY.get(operation, ())


def authorize(operation, user):
    if user is None or not is_allowed(operation, user.role):
        raise Forbidden('Access denied')
