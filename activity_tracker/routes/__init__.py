"""Routes package - Blueprint registration."""
from activity_tracker.routes.main import main_bp
from activity_tracker.routes.auth import auth_bp, check_api_key
from activity_tracker.routes.activities import activities_bp
from activity_tracker.routes.faculty import faculty_bp
from activity_tracker.routes.students import students_bp
from activity_tracker.routes.analytics import analytics_bp
from activity_tracker.routes.admin import admin_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.before_request(check_api_key)
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(activities_bp)
    app.register_blueprint(faculty_bp)
    app.register_blueprint(students_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(admin_bp)
