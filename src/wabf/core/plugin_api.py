#!/usr/bin/env python3
"""
Plugin discovery for lookup clients.

External lookup clients can register via Python entry points under:
  entry_points = { 'wabf.lookup_clients': [ 'name = pkg.module:ClientClass' ] }

Contracts for external ClientClass implementations:
- Subclass of wabf.core.lookup.LookupClient (or duck-typed equivalent)
- Constructor accepts keyword args only; the CLI passes base_url, token, timeout
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import Any, Dict, Optional, Type

from wabf.core.directory_client import DirectoryClient

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "wabf.lookup_clients"

BUILTIN_CLIENTS: Dict[str, Type] = {
    DirectoryClient.client_name: DirectoryClient,
}


def discover_lookup_clients() -> Dict[str, Type]:
    """Discover lookup clients registered under 'wabf.lookup_clients'.

    A plugin that fails to load is logged and skipped.
    """
    clients: Dict[str, Type] = {}
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            obj = ep.load()
        except Exception as e:
            logger.warning(f"Failed to load lookup client plugin '{ep.name}': {e}")
            continue
        if isinstance(obj, type):
            clients[ep.name] = obj
        else:
            logger.warning(f"Lookup client plugin '{ep.name}' is not a class, ignored")
    return clients


def list_lookup_clients(include_plugins: bool = True) -> Dict[str, Dict[str, Any]]:
    """Map client name -> info dict for built-in and plugin clients."""
    listing: Dict[str, Dict[str, Any]] = {
        name: {'class': cls.__name__, 'origin': 'builtin'} for name, cls in BUILTIN_CLIENTS.items()
    }
    if include_plugins:
        for name, cls in discover_lookup_clients().items():
            if name not in listing:
                listing[name] = {'class': cls.__name__, 'origin': 'plugin'}
    return listing


def resolve_client_class(name: str) -> Optional[Type]:
    if name in BUILTIN_CLIENTS:
        return BUILTIN_CLIENTS[name]
    return discover_lookup_clients().get(name)


def create_lookup_client(name: str, **kwargs):
    """Instantiate a lookup client by name."""
    cls = resolve_client_class(name)
    if cls is None:
        raise ValueError(f"Unknown lookup client '{name}'.")
    return cls(**kwargs)
