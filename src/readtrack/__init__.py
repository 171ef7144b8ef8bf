"""Personal reading tracker: progress logs, streaks and AI book discovery."""

__version__ = "0.1.0"
