"""Run and watch mise tasks with interactively collected arguments."""

__version__ = "0.1.0"
