"""Job-Trail: job application tracking with an activity log and analytics."""

__version__ = "0.1.0"
