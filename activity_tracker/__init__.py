"""
Student Activity Tracker - Application Factory
"""
import os

import click
from flask import Flask, request
from dotenv import load_dotenv

from activity_tracker.errors import register_error_handlers
from activity_tracker.extensions import db, babel
from activity_tracker.routes import register_blueprints
from activity_tracker.settings import config
from activity_tracker.storage import init_store


def get_locale():
    """Determine the best locale for the user."""
    lang = request.cookies.get('babel_translation')
    if lang:
        return lang
    return request.accept_languages.best_match(['en', 'es'])


def create_app(config_name=None):
    """Application Factory."""
    load_dotenv()

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config['default']))
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    babel.init_app(app, locale_selector=get_locale)

    init_store(app)
    register_error_handlers(app)

    # Register blueprints
    register_blueprints(app)

    # CLI Commands
    register_cli_commands(app)

    return app


def register_cli_commands(app):
    """Register CLI commands."""

    @app.cli.command("init-db")
    def init_db_command():
        """Creates database tables."""
        db.create_all()
        print("Initialized the database.")

    @app.cli.command("seed-demo")
    def seed_demo_command():
        """Loads the demo users and activities into the configured store."""
        from activity_tracker.storage import get_store
        from activity_tracker.storage.demo import seed_demo_data
        if seed_demo_data(get_store()):
            print("Demo data loaded.")
        else:
            print("Demo data already present.")

    @app.cli.command("create-user")
    @click.option("--name", required=True)
    @click.option("--email", required=True)
    @click.option("--password", required=True)
    @click.option("--department", required=True)
    @click.option("--role", default="student", type=click.Choice(["student", "faculty", "admin"]))
    def create_user_command(name, email, password, department, role):
        """Creates a user account."""
        from activity_tracker.services.users import create_user
        from activity_tracker.storage import get_store
        user = create_user(get_store(), {
            'name': name, 'email': email, 'password': password,
            'department': department, 'role': role,
        }, app.config['STUDENT_ID_PREFIX'])
        print(f"Created {user.role} {user.email} (id={user.id}).")
