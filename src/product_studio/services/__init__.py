"""Services package for product building logic."""

from . import content_model
from . import checklist
from . import product_service

__all__ = [
    "content_model",
    "checklist",
    "product_service",
]
