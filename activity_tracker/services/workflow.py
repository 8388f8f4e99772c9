"""Approval workflow: pending -> verified | rejected.

Both terminal states are final; a rejected submission is re-submitted as a
new activity. Every transition goes through ``store.transition``, a
compare-and-set on ``status``, so when two reviewers act on the same record
only the first decision is recorded and the second sees ``InvalidState``.
"""
import logging

from activity_tracker.errors import InvalidState, NotFound, ValidationError
from activity_tracker.models.activity import PENDING, VERIFIED, REJECTED
from activity_tracker.models.user import utcnow
from activity_tracker.policy import authorize
from activity_tracker.services.activities import load_activity
from activity_tracker.storage import ActivityFilter

logger = logging.getLogger(__name__)


def _require_reason(reason):
    reason = (reason or '').strip() if isinstance(reason, str) else ''
    if not reason:
        raise ValidationError('Rejection reason is required')
    return reason


def _verified_fields(approver):
    return {'status': VERIFIED, 'verified_at': utcnow(), 'verified_by': approver.id}


def _rejected_fields(approver, reason):
    return {'status': REJECTED, 'rejected_at': utcnow(), 'rejected_by': approver.id,
            'rejection_reason': reason}


def _apply(store, activity, fields):
    if activity.status != PENDING or not store.transition(activity, PENDING, **fields):
        raise InvalidState('Activity is not pending approval')


def approve(store, activity_id, approver):
    authorize('activity.review', approver)
    activity = load_activity(store, activity_id)
    _apply(store, activity, _verified_fields(approver))
    store.commit()
    logger.info('Activity %s verified by %s', activity_id, approver.email)
    return activity


def reject(store, activity_id, approver, reason):
    authorize('activity.review', approver)
    reason = _require_reason(reason)
    activity = load_activity(store, activity_id)
    _apply(store, activity, _rejected_fields(approver, reason))
    store.commit()
    logger.info('Activity %s rejected by %s', activity_id, approver.email)
    return activity


def _pending_among(store, activity_ids):
    if not isinstance(activity_ids, list) or not activity_ids:
        raise ValidationError('Activity IDs array is required')
    ids = []
    for value in activity_ids:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            continue  # unknown ids are skipped like missing ones
    pending, _ = store.list_activities(ActivityFilter(ids=ids, status=PENDING, sort_order='asc'))
    if not pending:
        raise NotFound('No pending activities found')
    return pending


def _bulk(store, activity_ids, make_fields):
    affected = 0
    for activity in _pending_among(store, activity_ids):
        if store.transition(activity, PENDING, **make_fields()):
            affected += 1
    store.commit()
    return affected


def bulk_approve(store, activity_ids, approver):
    """Verify every pending id among ``activity_ids``; returns how many changed."""
    authorize('activity.review', approver)
    affected = _bulk(store, activity_ids, lambda: _verified_fields(approver))
    logger.info('%s bulk-verified %d activities', approver.email, affected)
    return affected


def bulk_reject(store, activity_ids, approver, reason):
    authorize('activity.review', approver)
    reason = _require_reason(reason)
    affected = _bulk(store, activity_ids, lambda: _rejected_fields(approver, reason))
    logger.info('%s bulk-rejected %d activities', approver.email, affected)
    return affected
