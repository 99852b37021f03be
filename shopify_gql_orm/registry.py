"""Registry of model classes, used to resolve connection targets by name."""

from __future__ import annotations

from typing import Dict

_models: Dict[str, type] = {}


def register_model(model_class: type) -> type:
    _models[model_class.__name__] = model_class
    return model_class


def resolve_model(class_name):
    """Return the model class for a class or registered class name."""
    if isinstance(class_name, type):
        return class_name
    try:
        return _models[str(class_name)]
    except KeyError:
        raise LookupError(f"No model registered under the name {class_name!r}") from None
