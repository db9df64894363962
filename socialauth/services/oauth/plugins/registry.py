"""
Plugin registry mapping identifiers to plugin classes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from socialauth.core.exceptions import PluginUnavailableError

from .base import Plugin, ProviderSupport

logger = logging.getLogger(__name__)


@dataclass
class _RegisteredPlugin:
    """Internal registered plugin with optional source ID."""

    plugin_cls: type[Plugin]
    source_id: str | None = None


_plugin_registry: dict[str, _RegisteredPlugin] = {}


def register_plugin(
    plugin_cls: type[Plugin],
    identifier: str | None = None,
    source_id: str | None = None,
) -> None:
    """Register a plugin class under ``identifier`` (defaults to its own)."""
    key = identifier or plugin_cls.identifier
    _plugin_registry[key] = _RegisteredPlugin(plugin_cls=plugin_cls, source_id=source_id)
    logger.debug(f"Registered plugin: {key}")


def get_plugin_class(identifier: str) -> type[Plugin]:
    """
    Look up a registered plugin class.

    Raises:
        PluginUnavailableError: If nothing is registered under ``identifier``
    """
    entry = _plugin_registry.get(identifier)
    if entry is None:
        raise PluginUnavailableError(identifier)
    return entry.plugin_cls


def get_plugin_ids() -> list[str]:
    """Get all registered plugin identifiers."""
    return list(_plugin_registry)


def resolve_plugins(
    identifiers: list[str],
    support: ProviderSupport,
) -> tuple[dict[str, Plugin], dict[str, PluginUnavailableError]]:
    """
    Instantiate plugins for a provider.

    Failures are isolated: an identifier that is unknown, or whose
    constructor raises, is reported in the second mapping and the remaining
    plugins are still built.

    Returns:
        (plugins by identifier, failures by identifier)
    """
    plugins: dict[str, Plugin] = {}
    failures: dict[str, PluginUnavailableError] = {}
    for identifier in identifiers:
        try:
            plugin_cls = get_plugin_class(identifier)
        except PluginUnavailableError as e:
            logger.warning(f"Skipping plugin for {support.provider_id}: {e.message}")
            failures[identifier] = e
            continue
        try:
            plugins[identifier] = plugin_cls(support)
        except Exception as e:
            # Third-party constructors must not break the provider flow
            logger.warning(f"Plugin {identifier} failed to initialize for {support.provider_id}: {e}")
            failures[identifier] = PluginUnavailableError(identifier, f"constructor failed: {e}")
    return plugins, failures


def unregister_plugins(source_id: str) -> None:
    """Unregister all plugins with a given source ID."""
    to_remove = [key for key, entry in _plugin_registry.items() if entry.source_id == source_id]
    for key in to_remove:
        del _plugin_registry[key]


def clear_plugins() -> None:
    """Clear all registered plugins."""
    _plugin_registry.clear()
