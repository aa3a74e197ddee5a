"""
HTTP API for CommandStack.
"""
