"""
CommandStack: personal command and task tracker with Google Calendar sync.
"""

__version__ = "0.1.0"
