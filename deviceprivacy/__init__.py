"""Permission risk scoring for installed desktop applications."""

__version__ = "1.0.0"
