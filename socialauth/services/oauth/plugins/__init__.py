"""Provider plugins module."""
from .base import CareerPlugin, FeedPlugin, Plugin, ProviderSupport
from .linkedin import LinkedInCareerPlugin, LinkedInFeedPlugin
from .register_builtins import register_builtin_plugins
from .registry import (
    clear_plugins,
    get_plugin_class,
    get_plugin_ids,
    register_plugin,
    resolve_plugins,
    unregister_plugins,
)
from .twitter import TwitterFeedPlugin

register_builtin_plugins()

__all__ = [
    # Capabilities
    "Plugin",
    "FeedPlugin",
    "CareerPlugin",
    "ProviderSupport",
    # Built-ins
    "LinkedInFeedPlugin",
    "LinkedInCareerPlugin",
    "TwitterFeedPlugin",
    "register_builtin_plugins",
    # Registry
    "register_plugin",
    "get_plugin_class",
    "get_plugin_ids",
    "resolve_plugins",
    "unregister_plugins",
    "clear_plugins",
]
