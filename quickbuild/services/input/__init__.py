"""Source input resolution."""

from .resolver import APP_CLASS_PATTERN, InputResolver, is_piped, load_template

__all__ = ["APP_CLASS_PATTERN", "InputResolver", "is_piped", "load_template"]
