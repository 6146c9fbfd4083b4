"""Change a signed-in user's email address by confirming a one-time code."""

__version__ = "1.0.0"
