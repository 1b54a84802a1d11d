#!/usr/bin/env python3
"""
DirectoryClient talks to a directory bridge service over HTTP/JSON.

The bridge owns the messaging session; wabf only asks it questions:

  GET {base}/contacts/{id}/registered  -> {"registered": bool, "verified_name": str?}
  GET {base}/contacts/{id}/profile     -> {"status": str?, "display_name": str?, "verified_name": str?}
  GET {base}/contacts/{id}/business    -> {"email": str?, "website": str?, "address": str?, ...}
  GET {base}/contacts/{id}/avatar      -> {"url": str?}

A 404 on the avatar or business endpoint means "nothing there", not an error.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from wabf.config import APP_NAME, APP_VERSION, REQUEST_TIMEOUT
from wabf.core.lookup import DirectoryLookupError, EnrichmentError, LookupClient
from wabf.core.models import Profile, Registration

logger = logging.getLogger(__name__)


class DirectoryClient(LookupClient):
    """Lookup client backed by a requests.Session."""

    client_name = "http"

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = REQUEST_TIMEOUT):
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = max(float(timeout), 1.0)

        self.session = requests.Session()
        self._setup_session(token)

    def _setup_session(self, token: Optional[str]):
        self.session.headers.update(
            {
                "User-Agent": f"{APP_NAME}/{APP_VERSION}",
                "Accept": "application/json",
            }
        )
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _url(self, identifier: str, resource: str) -> str:
        return f"{self.base_url}/contacts/{identifier}/{resource}"

    def _get(self, identifier: str, resource: str, error_cls=DirectoryLookupError,
             missing_ok: bool = False) -> Optional[Dict[str, Any]]:
        url = self._url(identifier, resource)
        try:
            resp = self.session.request("GET", url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise error_cls(f"{resource} lookup for {identifier}: request timeout") from e
        except requests.exceptions.ConnectionError as e:
            raise error_cls(f"{resource} lookup for {identifier}: connection failed") from e
        except requests.exceptions.RequestException as e:
            raise error_cls(f"{resource} lookup for {identifier}: {e}") from e

        logger.debug(f"GET {url}: status={resp.status_code}")

        if missing_ok and resp.status_code == 404:
            return None
        if resp.status_code == 429:
            raise error_cls(f"{resource} lookup for {identifier}: rate limited")
        if resp.status_code >= 400:
            raise error_cls(f"{resource} lookup for {identifier}: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise error_cls(f"{resource} lookup for {identifier}: invalid JSON response") from e
        if not isinstance(data, dict):
            raise error_cls(f"{resource} lookup for {identifier}: unexpected response shape")
        return data

    def is_registered(self, identifier: str) -> Registration:
        data = self._get(identifier, "registered")
        return Registration(
            identifier=identifier,
            registered=bool(data.get("registered")),
            verified_name=data.get("verified_name") or None,
        )

    def get_profile(self, identifier: str) -> Profile:
        data = self._get(identifier, "profile", error_cls=EnrichmentError)
        return Profile(
            status=data.get("status") or None,
            display_name=data.get("display_name") or None,
            verified_name=data.get("verified_name") or None,
        )

    def get_business_info(self, identifier: str) -> Dict[str, str]:
        data = self._get(identifier, "business", error_cls=EnrichmentError, missing_ok=True)
        if not data:
            return {}
        return {str(k): str(v) for k, v in data.items() if v not in (None, "")}

    def get_avatar_reference(self, identifier: str) -> Optional[str]:
        data = self._get(identifier, "avatar", error_cls=EnrichmentError, missing_ok=True)
        if not data:
            return None
        return data.get("url") or None

    def close(self) -> None:
        self.session.close()
