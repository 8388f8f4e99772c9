"""Flask extensions, bound to the application in create_app()."""
from flask_babel import Babel
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

db = SQLAlchemy()
babel = Babel()

# JSONB on PostgreSQL, plain JSON on SQLite
JSONType = JSON().with_variant(JSONB(), 'postgresql')
