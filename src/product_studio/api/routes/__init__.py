"""API routes package."""

from . import assets, checklist, export, generate, health, products

__all__ = ["assets", "checklist", "export", "generate", "health", "products"]
