#!/usr/bin/env python3
"""
Core models and result schemas for wabf.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional
import time


@dataclass(frozen=True)
class Registration:
    identifier: str
    registered: bool
    verified_name: Optional[str] = None


@dataclass(frozen=True)
class Profile:
    status: Optional[str] = None
    display_name: Optional[str] = None
    verified_name: Optional[str] = None


@dataclass(frozen=True)
class ScanOutcome:
    identifier: str
    registered: bool
    display_name: Optional[str] = None
    verified_name: Optional[str] = None
    status: Optional[str] = None
    avatar_url: Optional[str] = None
    business: Dict[str, str] = field(default_factory=dict)
    ts: float = field(default_factory=time.time)

    @property
    def best_name(self) -> str:
        return self.display_name or self.verified_name or self.identifier

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RunSummary:
    total: Optional[int] = None
    processed: int = 0
    found: int = 0
    errors: int = 0

    def update_with(self, outcome: ScanOutcome) -> None:
        if outcome.registered:
            self.found += 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
