"""Read-only aggregate views over students and activities.

Nothing here writes. Credits only ever count when an activity is verified.
Month buckets are calendar months aligned to ``now``, not rolling windows;
every function takes ``now`` so callers and tests can pin the clock.
"""
from collections import Counter, defaultdict
from datetime import datetime

from activity_tracker.errors import ValidationError
from activity_tracker.models.activity import ACTIVITY_TYPES, PENDING, VERIFIED, REJECTED
from activity_tracker.models.user import utcnow
from activity_tracker.policy import STUDENT
from activity_tracker.storage import ActivityFilter

TIMEFRAMES = {'1month': 1, '3months': 3, '6months': 6, '1year': 12, '2years': 24}
DEFAULT_TIMEFRAME = '6months'

TYPE_COLORS = {
    'certification': '#667eea',
    'conference': '#764ba2',
    'research': '#f093fb',
    'volunteering': '#f5576c',
    'competition': '#4ecdc4',
    'internship': '#45b7d1',
}
DEFAULT_COLOR = '#6b7280'

ACCREDITATION_REQUIRED_HOURS = 10000
ACCREDITATION_CATEGORIES = [
    {'name': 'Academic Excellence', 'required': 4000, 'type': 'certification'},
    {'name': 'Research & Innovation', 'required': 2000, 'type': 'research'},
    {'name': 'Community Service', 'required': 2000, 'type': 'volunteering'},
    {'name': 'Professional Development', 'required': 2000, 'type': 'conference'},
]
MET_THRESHOLD = 0.8

# Weights of the top-performer score
SCORE_WEIGHTS = {'activities': 0.3, 'verified': 0.4, 'credits': 0.2, 'gpa': 0.1}


# ==================== Calendar helpers ====================

def months_for(timeframe):
    return TIMEFRAMES.get(timeframe, TIMEFRAMES[DEFAULT_TIMEFRAME])


def month_start(now, months_back):
    """First instant of the calendar month ``months_back`` months before ``now``."""
    index = now.year * 12 + (now.month - 1) - months_back
    return datetime(index // 12, index % 12 + 1, 1)


def month_buckets(now, months):
    """(start, end) pairs for the trailing ``months`` calendar months, oldest first."""
    return [(month_start(now, i), month_start(now, i - 1)) for i in range(months - 1, -1, -1)]


# ==================== Small aggregates ====================

def verified_credits(activities):
    return sum(a.credits for a in activities if a.status == VERIFIED)


def status_counts(activities):
    counts = Counter(a.status for a in activities)
    return {status: counts.get(status, 0) for status in (PENDING, VERIFIED, REJECTED)}


def completion_rate(verified, total):
    if not total:
        return 0.0
    return round(verified / total * 100, 1)


def average_gpa(students):
    if not students:
        return 0.0
    return round(sum(s.gpa or 0.0 for s in students) / len(students), 1)


def _scope(store, department):
    """Students in scope and the owner filter for their activities."""
    students = store.list_users(role=STUDENT, department=department or None)
    owner_ids = [s.id for s in students] if department else None
    return students, owner_ids


def _activities(store, owner_ids=None, **criteria):
    items, _ = store.list_activities(ActivityFilter(owner_ids=owner_ids, sort_order='asc', **criteria))
    return items


# ==================== Views ====================

def overview(store, department=None, timeframe=DEFAULT_TIMEFRAME, now=None):
    now = now or utcnow()
    since = month_start(now, months_for(timeframe))
    students, owner_ids = _scope(store, department)
    activities = _activities(store, owner_ids, submitted_from=since)
    counts = status_counts(activities)

    return {
        'totalStudents': len(students),
        'totalActivities': len(activities),
        'verifiedActivities': counts[VERIFIED],
        'pendingActivities': counts[PENDING],
        'rejectedActivities': counts[REJECTED],
        'totalCredits': verified_credits(activities),
        'averageGPA': average_gpa(students),
        'completionRate': completion_rate(counts[VERIFIED], len(activities)),
    }


def trends(store, timeframe=DEFAULT_TIMEFRAME, department=None, now=None):
    now = now or utcnow()
    buckets = month_buckets(now, months_for(timeframe))
    _, owner_ids = _scope(store, department)
    activities = _activities(store, owner_ids, submitted_from=buckets[0][0])

    monthly = []
    for start, end in buckets:
        in_month = [a for a in activities if start <= a.submitted_at < end]
        monthly.append({
            'month': start.strftime('%b'),
            'period': start.strftime('%Y-%m'),
            'activities': len(in_month),
            'verified': sum(1 for a in in_month if a.status == VERIFIED),
            'students': len({a.owner_id for a in in_month}),
        })
    return monthly


def department_breakdown(store):
    departments = []
    for name in store.list_departments():
        students = store.list_users(role=STUDENT, department=name)
        activities = _activities(store, [s.id for s in students])
        counts = status_counts(activities)
        departments.append({
            'name': name,
            'students': len(students),
            'activities': len(activities),
            'verified': counts[VERIFIED],
            'totalCredits': verified_credits(activities),
            'avgGPA': average_gpa(students),
        })
    return departments


def activity_type_distribution(store, department=None):
    """Percentages are rounded independently and may not sum to exactly 100."""
    _, owner_ids = _scope(store, department)
    counts = Counter(a.type for a in _activities(store, owner_ids))
    total = sum(counts.values())

    ordered = sorted(counts.items(), key=lambda item: (
        -item[1], ACTIVITY_TYPES.index(item[0]) if item[0] in ACTIVITY_TYPES else len(ACTIVITY_TYPES)))
    return [
        {
            'name': activity_type.capitalize(),
            'type': activity_type,
            'count': count,
            'percentage': round(count / total * 100, 1),
            'color': TYPE_COLORS.get(activity_type, DEFAULT_COLOR),
        }
        for activity_type, count in ordered
    ]


def performance_score(total, verified, credits, gpa):
    return (total * SCORE_WEIGHTS['activities'] + verified * SCORE_WEIGHTS['verified']
            + credits * SCORE_WEIGHTS['credits'] + (gpa or 0.0) * SCORE_WEIGHTS['gpa'])


def top_performers(store, department=None, limit=10):
    if limit < 1:
        raise ValidationError('Limit must be a positive number')
    students = store.list_users(role=STUDENT, department=department or None)
    by_owner = defaultdict(list)
    for activity in _activities(store, [s.id for s in students]):
        by_owner[activity.owner_id].append(activity)

    performers = []
    for student in students:
        activities = by_owner[student.id]
        verified = sum(1 for a in activities if a.status == VERIFIED)
        credits = verified_credits(activities)
        performers.append({
            'id': student.id,
            'studentId': student.student_id,
            'name': student.name,
            'department': student.department,
            'activities': len(activities),
            'verifiedActivities': verified,
            'credits': credits,
            'gpa': student.gpa or 0.0,
            'score': performance_score(len(activities), verified, credits, student.gpa),
        })

    # sorted() is stable, so equal scores keep directory order
    ranked = sorted(performers, key=lambda p: p['score'], reverse=True)[:limit]
    for rank, performer in enumerate(ranked, start=1):
        performer['rank'] = rank
        performer['score'] = round(performer['score'], 2)
    return ranked


def accreditation_status(store, department=None):
    _, owner_ids = _scope(store, department)
    verified = _activities(store, owner_ids, status=VERIFIED)
    credits_by_type = Counter()
    for activity in verified:
        credits_by_type[activity.type] += activity.credits
    total = sum(credits_by_type.values())

    categories = []
    for category in ACCREDITATION_CATEGORIES:
        hours = credits_by_type.get(category['type'], 0)
        if hours >= category['required']:
            status = 'exceeded'
        elif hours >= category['required'] * MET_THRESHOLD:
            status = 'met'
        else:
            status = 'pending'
        categories.append({'name': category['name'], 'hours': hours,
                           'required': category['required'], 'status': status})

    return {
        'totalHours': total,
        'requiredHours': ACCREDITATION_REQUIRED_HOURS,
        'completionPercentage': round(total / ACCREDITATION_REQUIRED_HOURS * 100, 1),
        'categories': categories,
    }


def dashboard_stats(store, department=None):
    """Headline numbers for the review dashboard (all time)."""
    students, owner_ids = _scope(store, department)
    activities = _activities(store, owner_ids)
    counts = status_counts(activities)
    return {
        'totalStudents': len(students),
        'totalActivities': len(activities),
        'pendingActivities': counts[PENDING],
        'verifiedActivities': counts[VERIFIED],
        'rejectedActivities': counts[REJECTED],
        'totalCredits': verified_credits(activities),
        'verificationRate': completion_rate(counts[VERIFIED], len(activities)),
    }


def report(store, department=None, timeframe=DEFAULT_TIMEFRAME, report_format='json', now=None):
    if report_format != 'json':
        raise ValidationError(f'Unsupported report format: {report_format}')
    now = now or utcnow()
    return {
        'generatedAt': now.isoformat(),
        'timeframe': timeframe,
        'department': department or 'All Departments',
        'overview': overview(store, department, timeframe, now=now),
        'trends': trends(store, timeframe, department, now=now),
        'departments': department_breakdown(store),
        'activityTypes': activity_type_distribution(store, department),
        'topPerformers': top_performers(store, department, 10),
        'accreditation': accreditation_status(store, department),
    }
