"""Personal job-application tracker backed by MySQL or SQLite."""

__version__ = "0.1.0"
