"""marginalia - keep an outline notes file in sync with a document view."""

__version__ = "0.1.0"
