"""Storage backends, chosen once per application at startup."""
from flask import current_app

from activity_tracker.storage.base import Store, ActivityFilter
from activity_tracker.storage.memory import MemoryStore
from activity_tracker.storage.sql import SqlStore

BACKENDS = {
    'sql': SqlStore,
    'memory': MemoryStore,
}


def init_store(app):
    """Create the configured store and attach it to the app."""
    backend = app.config['STORAGE_BACKEND']
    if backend not in BACKENDS:
        raise RuntimeError(f'Unknown STORAGE_BACKEND: {backend}')

    store = BACKENDS[backend]()
    app.extensions['activity_store'] = store
    app.logger.info('Using %s storage backend', backend)

    if backend == 'memory' and app.config.get('SEED_DEMO_DATA'):
        from activity_tracker.storage.demo import seed_demo_data
        seed_demo_data(store)
    return store


def get_store():
    return current_app.extensions['activity_store']


__all__ = ['Store', 'ActivityFilter', 'MemoryStore', 'SqlStore', 'init_store', 'get_store']
