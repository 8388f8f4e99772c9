"""Analytics routes - read-only dashboards for faculty and admins."""
from flask import Blueprint, jsonify, request

from activity_tracker.routes.auth import permission_required
from activity_tracker.services import analytics
from activity_tracker.storage import get_store

analytics_bp = Blueprint('analytics', __name__, url_prefix='/analytics')


def _department():
    return request.args.get('department') or None


def _timeframe():
    return request.args.get('timeframe') or analytics.DEFAULT_TIMEFRAME


@analytics_bp.route('/overview')
@permission_required('analytics.read')
def overview():
    return jsonify({'overview': analytics.overview(get_store(), _department(), _timeframe())})


@analytics_bp.route('/trends')
@permission_required('analytics.read')
def trends():
    return jsonify({'monthlyData': analytics.trends(get_store(), _timeframe(), _department())})


@analytics_bp.route('/departments')
@permission_required('analytics.read')
def departments():
    return jsonify({'departments': analytics.department_breakdown(get_store())})


@analytics_bp.route('/activity-types')
@permission_required('analytics.read')
def activity_types():
    return jsonify({'activityTypes': analytics.activity_type_distribution(get_store(), _department())})


@analytics_bp.route('/top-performers')
@permission_required('analytics.read')
def top_performers():
    limit = request.args.get('limit', 10, type=int)
    return jsonify({'topPerformers': analytics.top_performers(get_store(), _department(), limit)})


@analytics_bp.route('/accreditation')
@permission_required('analytics.read')
def accreditation():
    return jsonify({'accreditation': analytics.accreditation_status(get_store(), _department())})


@analytics_bp.route('/report')
@permission_required('analytics.read')
def report():
    report_format = request.args.get('format', 'json')
    data = analytics.report(get_store(), _department(), _timeframe(), report_format)
    return jsonify({'report': data})
