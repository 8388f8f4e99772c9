"""Models package - Re-exports all models for convenient importing."""
from activity_tracker.extensions import db
from activity_tracker.models.user import User
from activity_tracker.models.activity import Activity, ActivityFile, ActivityComment

__all__ = ['db', 'User', 'Activity', 'ActivityFile', 'ActivityComment']
