#!/usr/bin/env python3
"""
Lookup client contract.

A lookup client answers "is this number registered" and a few metadata
queries against a remote directory. All calls are independent, idempotent
reads; the scanner may call them from several threads at once.

Identifiers are plain digit strings. Any service-specific suffix or format
is the client's own business.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional

from wabf.core.models import Profile, Registration


class DirectoryLookupError(Exception):
    """A lookup against the directory failed for one identifier."""


class EnrichmentError(DirectoryLookupError):
    """A metadata call failed after registration was confirmed."""


class LookupClient(ABC):

    #: Human readable name shown by the CLI
    client_name: str = "lookup"

    @abstractmethod
    def is_registered(self, identifier: str) -> Registration:
        ...

    @abstractmethod
    def get_profile(self, identifier: str) -> Profile:
        ...

    @abstractmethod
    def get_business_info(self, identifier: str) -> Dict[str, str]:
        ...

    @abstractmethod
    def get_avatar_reference(self, identifier: str) -> Optional[str]:
        """Return the avatar URL, or None when the user has no picture."""

    def close(self) -> None:
        """Release any held resources."""
