"""Main routes - Index, language switching."""
from flask import Blueprint, current_app, jsonify, make_response

from activity_tracker.policy import STUDENT
from activity_tracker.storage import get_store

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    store = get_store()
    _, total_activities = store.list_activities()
    stats = {
        'students': len(store.list_users(role=STUDENT)),
        'activities': total_activities,
        'departments': len(store.list_departments()),
    }
    return jsonify({
        'service': 'activity-tracker',
        'storage': current_app.config['STORAGE_BACKEND'],
        'stats': stats,
    })


@main_bp.route('/set_language/<lang>')
def set_language(lang):
    if lang not in current_app.config['SUPPORTED_LOCALES']:
        lang = current_app.config['BABEL_DEFAULT_LOCALE']
    resp = make_response(jsonify({'language': lang}))
    resp.set_cookie('babel_translation', lang)
    return resp
