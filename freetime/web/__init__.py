"""
Web layer - Slack slash-command endpoint.
"""

from .app import create_app, process_slash_command

__all__ = ["create_app", "process_slash_command"]
