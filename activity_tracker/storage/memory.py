"""Process-local store used when no database is configured.

Holds the same model classes as the SQL store, as transient objects that
are never attached to a session. Column defaults are applied on insert so
records look the way a database would return them. Not transactional:
``commit`` and ``rollback`` are no-ops.
"""
import itertools
import threading

from activity_tracker.models.user import utcnow
from activity_tracker.storage.base import Store, ActivityFilter


def _apply_defaults(obj):
    for column in obj.__table__.columns:
        default = column.default
        if default is None or getattr(obj, column.key) is not None:
            continue
        if default.is_callable:
            setattr(obj, column.key, default.arg(None))
        elif default.is_scalar:
            setattr(obj, column.key, default.arg)


class MemoryStore(Store):

    def __init__(self):
        self.users = {}
        self.activities = {}
        self._user_ids = itertools.count(1)
        self._activity_ids = itertools.count(1)
        self._file_ids = itertools.count(1)
        self._comment_ids = itertools.count(1)
        self._lock = threading.RLock()

    # ---- users ----

    def get_user(self, user_id):
        return self.users.get(user_id)

    def find_user(self, email=None, role=None, student_id=None):
        if email is None and student_id is None:
            return None
        if email is not None:
            email = email.strip().lower()
        for user in self.users.values():
            if email is not None and user.email != email:
                continue
            if student_id is not None and user.student_id != student_id:
                continue
            if role and user.role != role:
                continue
            return user
        return None

    def list_users(self, role=None, department=None, year=None, search=None):
        needle = search.lower() if search else None
        matches = []
        for user in self.users.values():
            if role and user.role != role:
                continue
            if department and user.department != department:
                continue
            if year and user.year != year:
                continue
            if needle and not any(needle in (value or '').lower()
                                  for value in (user.name, user.student_id, user.email)):
                continue
            matches.append(user)
        return sorted(matches, key=lambda u: (u.name, u.id))

    def list_departments(self):
        return sorted({u.department for u in self.users.values() if u.role == 'student'})

    def add_user(self, user):
        with self._lock:
            _apply_defaults(user)
            user.id = next(self._user_ids)
            self.users[user.id] = user

    # ---- activities ----

    def get_activity(self, activity_id):
        return self.activities.get(activity_id)

    def list_activities(self, criteria=None):
        c = criteria or ActivityFilter()
        owner_ids = set(c.owner_ids) if c.owner_ids is not None else None
        ids = set(c.ids) if c.ids is not None else None

        matches = []
        for activity in list(self.activities.values()):
            owner = self.users.get(activity.owner_id)
            if c.student_id is not None and (owner is None or owner.student_id != c.student_id):
                continue
            if c.department is not None and (owner is None or owner.department != c.department):
                continue
            if owner_ids is not None and activity.owner_id not in owner_ids:
                continue
            if ids is not None and activity.id not in ids:
                continue
            if c.status and activity.status != c.status:
                continue
            if c.type and activity.type != c.type:
                continue
            if c.submitted_from is not None and activity.submitted_at < c.submitted_from:
                continue
            if c.submitted_to is not None and activity.submitted_at > c.submitted_to:
                continue
            matches.append(activity)

        attribute = c.sort_attribute

        def sort_key(activity):
            value = getattr(activity, attribute)
            return (value is not None, value, activity.id)

        matches.sort(key=sort_key, reverse=c.descending)
        total = len(matches)
        if c.offset is not None:
            matches = matches[c.offset:c.offset + c.limit]
        return matches, total

    def add_activity(self, activity):
        with self._lock:
            _apply_defaults(activity)
            activity.id = next(self._activity_ids)
            if activity.owner is not None:
                activity.owner_id = activity.owner.id
            else:
                activity.owner = self.users.get(activity.owner_id)
            for descriptor in activity.files:
                _apply_defaults(descriptor)
                descriptor.id = next(self._file_ids)
                descriptor.activity_id = activity.id
            self._link_reviewers(activity)
            self.activities[activity.id] = activity

    def delete_activity(self, activity):
        with self._lock:
            self.activities.pop(activity.id, None)

    def add_comment(self, activity, comment):
        with self._lock:
            _apply_defaults(comment)
            comment.id = next(self._comment_ids)
            comment.activity_id = activity.id
            if comment.author is None:
                comment.author = self.users.get(comment.author_id)
            activity.comments.append(comment)

    def transition(self, activity, from_status, **fields):
        with self._lock:
            if activity.status != from_status:
                return False
            for key, value in fields.items():
                setattr(activity, key, value)
            activity.updated_at = utcnow()
            self._link_reviewers(activity)
            return True

    def _link_reviewers(self, activity):
        if activity.verified_by is not None:
            activity.verifier = self.users.get(activity.verified_by)
        if activity.rejected_by is not None:
            activity.rejecter = self.users.get(activity.rejected_by)

    # ---- unit of work ----

    def commit(self):
        pass

    def rollback(self):
        pass
