"""
Register built-in plugins.
"""

from __future__ import annotations

from .linkedin import LinkedInCareerPlugin, LinkedInFeedPlugin
from .registry import register_plugin
from .twitter import TwitterFeedPlugin


def register_builtin_plugins() -> None:
    """Register all built-in plugins."""
    register_plugin(LinkedInFeedPlugin)
    register_plugin(LinkedInCareerPlugin)
    register_plugin(TwitterFeedPlugin)
