"""Storage backend interface shared by the SQL and in-memory stores."""
from abc import ABC, abstractmethod
from dataclasses import dataclass

# API sort keys -> model attributes
SORT_FIELDS = {
    'submittedAt': 'submitted_at',
    'date': 'date',
    'credits': 'credits',
    'title': 'title',
    'status': 'status',
    'createdAt': 'created_at',
}


@dataclass
class ActivityFilter:
    """Criteria for listing activities. ``None`` means "do not filter"."""
    owner_ids: list = None
    student_id: str = None
    department: str = None
    status: str = None
    type: str = None
    submitted_from: object = None
    submitted_to: object = None
    ids: list = None
    sort_by: str = 'submittedAt'
    sort_order: str = 'desc'
    page: int = None
    limit: int = None

    @property
    def sort_attribute(self):
        return SORT_FIELDS.get(self.sort_by, 'submitted_at')

    @property
    def descending(self):
        return self.sort_order != 'asc'

    @property
    def offset(self):
        if not self.page or not self.limit:
            return None
        return (self.page - 1) * self.limit


class Store(ABC):
    """Persistence for users and activities.

    ``list_activities`` returns ``(items, total)`` where ``total`` counts
    every match before pagination. ``transition`` is a compare-and-set on
    the activity status and returns False when the record was no longer in
    ``from_status``.
    """

    # ---- users ----

    @abstractmethod
    def get_user(self, user_id):
        ...

    @abstractmethod
    def find_user(self, email=None, role=None, student_id=None):
        ...

    @abstractmethod
    def list_users(self, role=None, department=None, year=None, search=None):
        ...

    @abstractmethod
    def list_departments(self):
        ...

    @abstractmethod
    def add_user(self, user):
        ...

    # ---- activities ----

    @abstractmethod
    def get_activity(self, activity_id):
        ...

    @abstractmethod
    def list_activities(self, criteria=None):
        ...

    @abstractmethod
    def add_activity(self, activity):
        ...

    @abstractmethod
    def delete_activity(self, activity):
        ...

    @abstractmethod
    def add_comment(self, activity, comment):
        ...

    @abstractmethod
    def transition(self, activity, from_status, **fields):
        ...

    # ---- unit of work ----

    @abstractmethod
    def commit(self):
        ...

    @abstractmethod
    def rollback(self):
        ...
