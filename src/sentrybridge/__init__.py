"""
sentrybridge: structlog sink that forwards error reports to Sentry.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
