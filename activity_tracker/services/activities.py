"""Activity records: submission, owner edits, reads, comments, listing."""
import logging
import math
from datetime import date, datetime, timezone

from activity_tracker.errors import Forbidden, InvalidState, NotFound, ValidationError
from activity_tracker.models import Activity, ActivityComment
from activity_tracker.models.activity import ACTIVITY_TYPES, PENDING, STATUSES
from activity_tracker.models.user import utcnow
from activity_tracker.policy import STUDENT, authorize
from activity_tracker.services import text
from activity_tracker.storage import ActivityFilter

logger = logging.getLogger(__name__)

MIN_CREDITS = 1
MAX_CREDITS = 10
# Free-text fields an owner may edit while the activity is pending
TEXT_FIELDS = (('title', 'Title'), ('description', 'Description'), ('organization', 'Organization'))


# ==================== Validation ====================

def parse_date(value):
    """Accept a date, an ISO date (YYYY-MM-DD) or an ISO datetime string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValidationError('Date is required')
    text = value.strip()
    try:
        if len(text) <= 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
    except ValueError:
        raise ValidationError(f'Invalid date: {value}')


def parse_credits(value):
    if isinstance(value, bool):
        raise ValidationError('Credits must be a whole number')
    try:
        credits = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError('Credits must be a whole number')
    if not MIN_CREDITS <= credits <= MAX_CREDITS:
        raise ValidationError(f'Credits must be between {MIN_CREDITS} and {MAX_CREDITS}')
    return credits


def parse_tags(value):
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(',')
    if not isinstance(value, list):
        raise ValidationError('Tags must be a list or a comma-separated string')
    return [str(tag).strip() for tag in value if str(tag).strip()]


def _required_text(payload, key, label):
    value = text(payload.get(key), label)
    if not value:
        raise ValidationError(f'{label} is required')
    return value


def validate_submission(payload):
    activity_type = text(payload.get('type'), 'Type')
    if activity_type not in ACTIVITY_TYPES:
        raise ValidationError(f'Type must be one of: {", ".join(ACTIVITY_TYPES)}')
    return {
        'title': _required_text(payload, 'title', 'Title'),
        'description': _required_text(payload, 'description', 'Description'),
        'organization': _required_text(payload, 'organization', 'Organization'),
        'type': activity_type,
        'date': parse_date(payload.get('date')),
        'credits': parse_credits(payload.get('credits')),
        'tags': parse_tags(payload.get('tags')),
    }


# ==================== Guards ====================

def load_activity(store, activity_id):
    activity = store.get_activity(activity_id)
    if activity is None:
        raise NotFound('Activity not found')
    return activity


def _owned_pending(store, activity_id, requester, operation):
    authorize(operation, requester)
    activity = load_activity(store, activity_id)
    if activity.owner_id != requester.id:
        raise Forbidden('Access denied')
    if activity.status != PENDING:
        raise InvalidState('Cannot modify verified or rejected activities')
    return activity


# ==================== Operations ====================

def submit_activity(store, student, payload, files, uploads):
    """Create a pending activity. Files written before a failure are removed."""
    authorize('activity.submit', student)
    data = validate_submission(payload)
    files = [f for f in (files or []) if f and f.filename]
    uploads.check_count(files)

    saved = []
    try:
        for upload in files:
            saved.append(uploads.save(upload))
        now = utcnow()
        activity = Activity(
            owner=student,
            owner_id=student.id,
            status=PENDING,
            submitted_at=now,
            is_public=True,
            files=saved,
            **data,
        )
        store.add_activity(activity)
        store.commit()
    except Exception:
        store.rollback()
        uploads.discard(saved)
        raise

    logger.info('Activity %s submitted by %s with %d file(s)', activity.id, student.email, len(saved))
    return activity


def update_activity(store, activity_id, requester, fields):
    activity = _owned_pending(store, activity_id, requester, 'activity.update')

    for key, label in TEXT_FIELDS:
        value = text(fields.get(key), label)
        if value:
            setattr(activity, key, value)
    if fields.get('date'):
        activity.date = parse_date(fields['date'])
    if fields.get('credits') not in (None, ''):
        activity.credits = parse_credits(fields['credits'])
    if fields.get('tags') is not None:
        activity.tags = parse_tags(fields['tags'])

    activity.updated_at = utcnow()
    store.commit()
    return activity


def delete_activity(store, activity_id, requester, uploads):
    """Remove a pending activity's file blobs, then the record."""
    activity = _owned_pending(store, activity_id, requester, 'activity.delete')
    uploads.discard(activity.files)
    store.delete_activity(activity)
    store.commit()
    logger.info('Activity %s deleted by %s', activity_id, requester.email)


def get_activity(store, activity_id, requester):
    authorize('activity.read', requester)
    activity = load_activity(store, activity_id)
    if requester.role == STUDENT and activity.owner_id != requester.id:
        raise Forbidden('Access denied')
    return activity


def get_activity_file(store, activity_id, file_id, requester):
    activity = get_activity(store, activity_id, requester)
    descriptor = activity.file_by_id(file_id)
    if descriptor is None:
        raise NotFound('File not found')
    return descriptor


def add_comment(store, activity_id, requester, content):
    authorize('activity.comment', requester)
    content = text(content, 'Comment content')
    if not content:
        raise ValidationError('Comment content is required')
    activity = load_activity(store, activity_id)
    comment = ActivityComment(author=requester, author_id=requester.id, content=content, created_at=utcnow())
    store.add_comment(activity, comment)
    store.commit()
    return activity


def list_activities(store, criteria):
    if criteria.status and criteria.status not in STATUSES:
        raise ValidationError(f'Status must be one of: {", ".join(STATUSES)}')
    if criteria.type and criteria.type not in ACTIVITY_TYPES:
        raise ValidationError(f'Type must be one of: {", ".join(ACTIVITY_TYPES)}')
    items, total = store.list_activities(criteria)
    return page_of(items, total, criteria)


def list_for_student(store, student_id, requester, criteria):
    """A student may only list their own activities; reviewers may list anyone's."""
    authorize('activity.read', requester)
    if requester.role == STUDENT and requester.student_id != student_id:
        raise Forbidden('Access denied')
    criteria.student_id = student_id
    return list_activities(store, criteria)


def page_of(items, total, criteria):
    limit = criteria.limit or max(total, 1)
    return {
        'activities': [a.to_dict() for a in items],
        'totalPages': math.ceil(total / limit) if total else 0,
        'currentPage': criteria.page or 1,
        'total': total,
    }


def build_filter(args, **overrides):
    """Translate request query arguments into an ActivityFilter."""
    page = _positive_int(args.get('page'), 1)
    limit = _positive_int(args.get('limit'), 10)
    criteria = ActivityFilter(
        status=args.get('status') or None,
        type=args.get('type') or None,
        department=args.get('department') or None,
        student_id=args.get('studentId') or None,
        submitted_from=_parse_bound(args.get('startDate')),
        submitted_to=_parse_bound(args.get('endDate')),
        sort_by=args.get('sortBy') or 'submittedAt',
        sort_order=args.get('sortOrder') or 'desc',
        page=page,
        limit=limit,
    )
    for key, value in overrides.items():
        setattr(criteria, key, value)
    return criteria


def _positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _parse_bound(value):
    """ISO date or datetime as naive UTC; an offset is converted, not dropped."""
    if not value:
        return None
    try:
        bound = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f'Invalid date: {value}')
    if bound.tzinfo is not None:
        bound = bound.astimezone(timezone.utc).replace(tzinfo=None)
    return bound
