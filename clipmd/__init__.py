"""Archive X articles as self-contained Markdown bundles."""

__version__ = "0.1.0"
