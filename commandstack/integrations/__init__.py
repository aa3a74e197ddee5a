"""
External service integrations for CommandStack.
"""
