#!/usr/bin/env python3
"""
wabf Configuration Module
"""

import os
from dataclasses import dataclass
from typing import Optional

# Application Information
APP_NAME = "wabf"
APP_VERSION = "1.2.0"
APP_DESCRIPTION = "Enumerate phone number patterns and check them against a messaging directory"

# Default Settings
DEFAULT_DELAY = 0.2  # seconds, per worker
DEFAULT_JITTER = 0.1  # upper bound of the random extra delay
DEFAULT_CONCURRENCY = 1
DEFAULT_MAX_CANDIDATES = 1000000
DEFAULT_OUTPUT_FORMAT = "wa.me"
DEFAULT_AVATAR_DIR = "avatars"

# Ask before scanning more candidates than this
CONFIRMATION_THRESHOLD = 1000

# Request Settings
REQUEST_TIMEOUT = 15
POLL_INTERVAL = 0.5

# Wildcard syntax
WILDCARD_CHARS = "xX"
SET_OPEN = "["
SET_CLOSE = "]"
RANGE_SEP = "-"
DIGITS = "0123456789"

# Identifier suffix used by the "jid" output format
JID_SUFFIX = "@c.us"
LINK_PREFIX = "https://wa.me/"

# Environment overrides for the bundled HTTP directory client
ENV_DIRECTORY_URL = "WABF_DIRECTORY_URL"
ENV_DIRECTORY_TOKEN = "WABF_DIRECTORY_TOKEN"

# Output formats
OUTPUT_FORMATS = ['wa.me', 'jid', 'pn']

CSV_HEADER = ["Phone", "Link", "Status", "Name", "VerifiedName", "Email", "Website", "Address", "AvatarURL"]

# Error messages
ERROR_MESSAGES = {
    'invalid_pattern': "❌ Invalid phone number pattern: '{pattern}'. Use digits, spaces, '+', 'x' and [ ] sets.",
    'parse_error': "❌ Could not parse pattern: {error}",
    'too_many_candidates': "❌ Pattern expands to {count:,} numbers. Maximum {max:,} allowed (see --max-candidates).",
    'no_pattern': "❌ No pattern provided.",
    'no_directory': "❌ No directory service configured. Use --directory-url or set {env}.",
    'unknown_client': "❌ Unknown lookup client '{name}'.",
    'interrupted': "⚠️  Scan interrupted by user, waiting for in-flight lookups...",
    'output_failed': "❌ Could not open output file: {error}",
}

# Success messages
SUCCESS_MESSAGES = {
    'candidates_generated': "🔢 Generated {count:,} numbers to check.",
    'scan_started': "📱 Starting scan with {workers} worker{plural}...",
    'scan_finished': "🎯 Scan finished: {found} registered numbers found",
}


@dataclass
class ScanConfig:
    """Explicit settings for one scan run, passed to the ScanCoordinator."""
    concurrency: int = DEFAULT_CONCURRENCY
    delay: float = DEFAULT_DELAY
    jitter: float = DEFAULT_JITTER
    result_buffer: int = 0  # 0 = unbounded
    poll_interval: float = POLL_INTERVAL
    fetch_profile: bool = True
    fetch_business: bool = True
    fetch_avatar: bool = True

    def __post_init__(self):
        if self.concurrency < 1:
            self.concurrency = 1
        if self.delay < 0:
            raise ValueError("delay must be non-negative")
        if self.jitter < 0:
            raise ValueError("jitter must be non-negative")


def get_directory_url(override: Optional[str] = None) -> Optional[str]:
    """Return the directory bridge URL from the CLI flag or the environment."""
    return override or os.environ.get(ENV_DIRECTORY_URL) or None


def get_directory_token(override: Optional[str] = None) -> Optional[str]:
    return override or os.environ.get(ENV_DIRECTORY_TOKEN) or None
