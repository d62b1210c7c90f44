"""Product Studio: assemble digital products from AI-generated pieces and export them."""

__version__ = "1.0.0"
