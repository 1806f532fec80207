# budget_tracker/outputs/__init__.py
from budget_tracker.registry import load_class


def get_output(name, config):
    """Build the export target configured under ``output_modules``."""
    return load_class('output_modules', name, config)(config)
