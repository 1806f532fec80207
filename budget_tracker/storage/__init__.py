# budget_tracker/storage/__init__.py
from budget_tracker.registry import load_class


def get_store(name, config):
    """Open the store backend configured under ``store_modules``."""
    return load_class('store_modules', name, config)(config)
