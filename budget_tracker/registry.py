# budget_tracker/registry.py
from importlib import import_module

from budget_tracker.core.exceptions import BudgetError


def load_class(section, name, config):
    """
    Import the class registered as a dotted path under ``config[section][name]``.
    """
    try:
        dotted = config[section][name]
    except KeyError:
        raise BudgetError(f"Unknown {section} entry: {name}") from None
    module_name, cls_name = dotted.rsplit('.', 1)
    return getattr(import_module(module_name), cls_name)
