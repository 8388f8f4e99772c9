"""Student dashboard, portfolio and progress, and the reviewer's student directory."""
import math
from collections import Counter

from activity_tracker.errors import NotFound
from activity_tracker.models.activity import PENDING, VERIFIED, REJECTED
from activity_tracker.models.user import utcnow
from activity_tracker.policy import STUDENT, authorize
from activity_tracker.services.analytics import (
    completion_rate, month_buckets, months_for, verified_credits,
)
from activity_tracker.storage import ActivityFilter

UNIVERSITY = 'University of Technology'
ACHIEVEMENT_MIN_CREDITS = 3
ACHIEVEMENT_TYPES = ('research', 'competition')

# activity type -> (technical skills, soft skills)
SKILLS_BY_TYPE = {
    'certification': (['Certified Professional'], []),
    'research': (['Research & Analysis'], []),
    'conference': ([], ['Public Speaking', 'Networking']),
    'volunteering': ([], ['Community Service', 'Leadership']),
    'competition': ([], ['Competitive Spirit', 'Problem Solving']),
    'internship': (['Professional Experience'], ['Teamwork']),
}


def activities_of(store, student, **criteria):
    items, _ = store.list_activities(ActivityFilter(owner_ids=[student.id], **criteria))
    return items


def student_stats(activities):
    counts = Counter(a.status for a in activities)
    return {
        'totalActivities': len(activities),
        'verifiedActivities': counts.get(VERIFIED, 0),
        'pendingActivities': counts.get(PENDING, 0),
        'rejectedActivities': counts.get(REJECTED, 0),
        'totalCredits': verified_credits(activities),
    }


def monthly_progress(activities, months, now):
    progress = []
    for start, end in month_buckets(now, months):
        in_month = [a for a in activities if start <= a.submitted_at < end]
        progress.append({
            'month': start.strftime('%b'),
            'period': start.strftime('%Y-%m'),
            'activities': len(in_month),
            'verified': sum(1 for a in in_month if a.status == VERIFIED),
            'credits': verified_credits(in_month),
        })
    return progress


# ==================== Student self-service ====================

def dashboard(store, student, now=None):
    authorize('student.self', student)
    activities = activities_of(store, student)
    return {
        'stats': student_stats(activities),
        'recentActivities': [a.to_dict() for a in activities[:5]],
        'activityTypes': dict(Counter(a.type for a in activities)),
        'monthlyData': monthly_progress(activities, 6, now or utcnow()),
    }


def profile(store, student):
    authorize('student.self', student)
    stats = student_stats(activities_of(store, student))
    data = student.to_dict()
    data['stats'] = {key: stats[key] for key in ('totalActivities', 'verifiedActivities', 'totalCredits')}
    return data


def progress(store, student, timeframe='6months', now=None):
    authorize('student.self', student)
    return monthly_progress(activities_of(store, student), months_for(timeframe), now or utcnow())


def stats(store, student):
    authorize('student.self', student)
    activities = activities_of(store, student)
    data = student_stats(activities)
    data['verificationRate'] = completion_rate(data['verifiedActivities'], data['totalActivities'])
    data['activityTypes'] = dict(Counter(a.type for a in activities))
    return data


def portfolio(store, student):
    """Shareable summary built from verified activities only."""
    authorize('student.self', student)
    verified = activities_of(store, student, status=VERIFIED, sort_by='date')

    technical, soft = [], []
    for activity in verified:
        tech_skills, soft_skills = SKILLS_BY_TYPE.get(activity.type, ([], []))
        technical.extend(s for s in tech_skills if s not in technical)
        soft.extend(s for s in soft_skills if s not in soft)

    return {
        'personalInfo': {
            'name': student.name,
            'email': student.email,
            'department': student.department,
            'year': student.year,
            'gpa': student.gpa,
            'studentId': student.student_id,
        },
        'academicInfo': {
            'degree': f'Bachelor of Science in {student.department}',
            'university': UNIVERSITY,
            'gpa': student.gpa,
            'major': student.department,
        },
        'activities': [_portfolio_entry(a) for a in verified],
        'achievements': [
            _portfolio_entry(a) for a in verified
            if a.credits >= ACHIEVEMENT_MIN_CREDITS or a.type in ACHIEVEMENT_TYPES
        ],
        'skills': {'technical': technical, 'soft': soft},
    }


def _portfolio_entry(activity):
    return {
        'id': activity.id,
        'title': activity.title,
        'type': activity.type,
        'organization': activity.organization,
        'date': activity.date.isoformat(),
        'credits': activity.credits,
        'description': activity.description,
        'verified': True,
    }


# ==================== Reviewer directory ====================

def list_students(store, reviewer, department=None, year=None, search=None, page=1, limit=10):
    authorize('student.directory', reviewer)
    students = store.list_users(role=STUDENT, department=department, year=year, search=search)
    total = len(students)
    window = students[(page - 1) * limit:page * limit]

    rows = []
    for student in window:
        data = student.to_dict()
        counts = student_stats(activities_of(store, student))
        data['stats'] = {key: counts[key] for key in
                         ('totalActivities', 'verifiedActivities', 'pendingActivities')}
        rows.append(data)

    return {
        'students': rows,
        'totalPages': math.ceil(total / limit) if total else 0,
        'currentPage': page,
        'total': total,
    }


def student_detail(store, reviewer, student_id):
    authorize('student.directory', reviewer)
    student = store.find_user(student_id=student_id, role=STUDENT)
    if student is None:
        raise NotFound('Student not found')

    activities = activities_of(store, student)
    data = student_stats(activities)
    data['averageCreditsPerActivity'] = (
        data['totalCredits'] / data['verifiedActivities'] if data['verifiedActivities'] else 0
    )
    return {
        'student': student.to_dict(),
        'activities': [a.to_dict() for a in activities],
        'stats': data,
    }
