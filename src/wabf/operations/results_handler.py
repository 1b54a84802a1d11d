#!/usr/bin/env python3
"""
Results Handler Module
Consumes the scan outcome stream: console display, link list, CSV, VCard,
JSONL and avatar downloads.
"""

import os
import csv
import json
import logging
from typing import Dict, Iterable, List, Optional, TextIO

import requests
from rich.console import Console

from wabf.config import CSV_HEADER, DEFAULT_AVATAR_DIR, DEFAULT_OUTPUT_FORMAT, OUTPUT_FORMATS, REQUEST_TIMEOUT
from wabf.core.models import ScanOutcome
from wabf.utils import format_identifier, format_link

logger = logging.getLogger(__name__)


class ResultsHandler:
    """Writes outcomes to every configured output as they arrive.

    Use as a context manager so all files are flushed and closed.
    """

    def __init__(self, *, output_file: Optional[str] = None, output_format: str = DEFAULT_OUTPUT_FORMAT,
                 csv_file: Optional[str] = None, vcard_file: Optional[str] = None,
                 jsonl_file: Optional[str] = None, save_avatars: bool = False,
                 avatar_dir: str = DEFAULT_AVATAR_DIR, console: Optional[Console] = None,
                 verbose: bool = False):
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {output_format}")
        self.output_file = output_file
        self.output_format = output_format
        self.csv_file = csv_file
        self.vcard_file = vcard_file
        self.jsonl_file = jsonl_file
        self.save_avatars = save_avatars
        self.avatar_dir = avatar_dir
        self.console = console
        self.verbose = verbose

        self.found: List[ScanOutcome] = []
        self.avatar_paths: Dict[str, str] = {}

        self._handles: List[TextIO] = []
        self._out: Optional[TextIO] = None
        self._csv_writer = None
        self._vcf: Optional[TextIO] = None
        self._jsonl: Optional[TextIO] = None
        self._session: Optional[requests.Session] = None

    # --- Lifecycle ----------------------------------------------------------
    def open(self) -> "ResultsHandler":
        """Create the output files. Raises OSError if one cannot be created."""
        try:
            if self.output_file:
                self._out = self._open_file(self.output_file)
            if self.csv_file:
                csv_handle = self._open_file(self.csv_file, newline='')
                self._csv_writer = csv.writer(csv_handle)
                self._csv_writer.writerow(CSV_HEADER)
            if self.vcard_file:
                self._vcf = self._open_file(self.vcard_file)
            if self.jsonl_file:
                self._jsonl = self._open_file(self.jsonl_file, mode='a')
            if self.save_avatars:
                os.makedirs(self.avatar_dir, exist_ok=True)
                self._session = requests.Session()
        except OSError:
            self.close()
            raise
        return self

    def _open_file(self, path: str, mode: str = 'w', newline: Optional[str] = None) -> TextIO:
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        handle = open(path, mode, encoding='utf-8', newline=newline)
        self._handles.append(handle)
        logger.debug(f"Opened output file: {path}")
        return handle

    def close(self):
        for handle in self._handles:
            try:
                handle.close()
            except OSError as e:
                logger.error(f"Error closing {getattr(handle, 'name', handle)}: {e}")
        self._handles = []
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "ResultsHandler":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # --- Consumption --------------------------------------------------------
    def consume(self, outcomes: Iterable[ScanOutcome]) -> List[ScanOutcome]:
        """Drain the outcome stream once, handling each outcome."""
        for outcome in outcomes:
            self.handle(outcome)
        return self.found

    def handle(self, outcome: ScanOutcome):
        self.found.append(outcome)

        avatar_path = None
        if self.save_avatars and outcome.avatar_url:
            avatar_path = self.download_avatar(outcome)

        self._display(outcome, avatar_path)

        if self._out is not None:
            self._out.write(format_identifier(outcome.identifier, self.output_format) + "\n")
            self._out.flush()

        if self._csv_writer is not None:
            self._csv_writer.writerow(self.csv_row(outcome))

        if self._vcf is not None:
            self._vcf.write(self.vcard(outcome))
            self._vcf.flush()

        if self._jsonl is not None:
            json.dump(outcome.to_dict(), self._jsonl, ensure_ascii=False)
            self._jsonl.write('\n')
            self._jsonl.flush()

    def _display(self, outcome: ScanOutcome, avatar_path: Optional[str]):
        if self.console is None:
            return
        link = format_link(outcome.identifier)
        if self.verbose:
            self.console.print(f"FOUND: {link} (Info: {outcome.to_dict()})", markup=False, highlight=False)
            return
        self.console.print(f"[bold green][+] FOUND:[/] {link}")
        lines = [
            ("Status", outcome.status),
            ("Name", outcome.display_name),
            ("Verified Name", outcome.verified_name),
            ("Email", outcome.business.get('email')),
            ("Website", outcome.business.get('website')),
            ("Address", outcome.business.get('address')),
            ("Avatar", outcome.avatar_url),
        ]
        for label, value in lines:
            if value:
                self.console.print(f"    {label}: {value}", markup=False, highlight=False)
        if avatar_path:
            self.console.print(f"    -> Saved to: {avatar_path}", markup=False, highlight=False)

    # --- Formats ------------------------------------------------------------
    @staticmethod
    def csv_row(outcome: ScanOutcome) -> List[str]:
        business = outcome.business
        return [
            outcome.identifier,
            format_link(outcome.identifier),
            outcome.status or '',
            outcome.display_name or '',
            outcome.verified_name or '',
            business.get('email', ''),
            business.get('website', ''),
            business.get('address', ''),
            outcome.avatar_url or '',
        ]

    @staticmethod
    def vcard(outcome: ScanOutcome) -> str:
        lines = [
            "BEGIN:VCARD",
            "VERSION:3.0",
            f"FN:{outcome.best_name}",
            f"TEL;TYPE=CELL:+{outcome.identifier}",
        ]
        if outcome.avatar_url:
            lines.append(f"URL:{outcome.avatar_url}")
        if outcome.business.get('email'):
            lines.append(f"EMAIL:{outcome.business['email']}")
        lines.append("END:VCARD")
        return "\n".join(lines) + "\n"

    # --- Avatars ------------------------------------------------------------
    def download_avatar(self, outcome: ScanOutcome) -> Optional[str]:
        """Save the avatar as <avatar_dir>/<identifier>.jpg; None on failure."""
        path = os.path.join(self.avatar_dir, f"{outcome.identifier}.jpg")
        session = self._session or requests.Session()
        try:
            with session.get(outcome.avatar_url, timeout=REQUEST_TIMEOUT, stream=True) as resp:
                resp.raise_for_status()
                with open(path, 'wb') as f:
                    for chunk in resp.iter_content(chunk_size=8192):
                        if chunk:
                            f.write(chunk)
        except (requests.exceptions.RequestException, OSError) as e:
            logger.warning(f"Failed to download avatar for {outcome.identifier}: {e}")
            return None
        finally:
            if session is not self._session:
                session.close()

        self.avatar_paths[outcome.identifier] = path
        return path
