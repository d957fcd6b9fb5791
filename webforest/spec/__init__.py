"""Specification models consumed by the layout engine."""

from .models import *  # noqa: F401,F403
from .models import __all__ as _model_all
from .validation import structural_errors, validate_spec

__all__ = [*_model_all, "structural_errors", "validate_spec"]
