#!/usr/bin/env python3
"""
Phone Number Generator Module
Expands a phone number pattern with wildcards into every candidate number.

Pattern syntax:
  x / X    any digit 0-9
  [137]    one of the listed digits, in listed order (repeats are kept)
  [5-9]    ascending range inside a set, same as [56789]

Candidates are enumerated with the first wildcard varying slowest and the
last wildcard varying fastest, so "1[23]x" gives 120, 121, ... 129, 130, ...
"""

import re
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from wabf.config import WILDCARD_CHARS, SET_OPEN, SET_CLOSE, RANGE_SEP, DIGITS

logger = logging.getLogger(__name__)

VALID_PATTERN = re.compile(r'^(?:\d|[xX]|\[[\d\-]+\])*$')


class PatternError(ValueError):
    """Raised when a pattern cannot be parsed."""


@dataclass(frozen=True)
class Token:
    """A literal run of characters, or a wildcard with its choice set."""
    literal: str = ""
    choices: Tuple[str, ...] = ()

    @property
    def is_wildcard(self) -> bool:
        return bool(self.choices)


def _parse_set(body: str, position: int) -> Tuple[str, ...]:
    """Turn the inside of a [...] set into its digits."""
    if not body:
        raise PatternError(f"empty digit set at position {position}")

    choices: List[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch not in DIGITS:
            raise PatternError(f"invalid character {ch!r} in digit set at position {position}")
        if i + 2 < len(body) and body[i + 1] == RANGE_SEP:
            end = body[i + 2]
            if end not in DIGITS:
                raise PatternError(f"invalid range end {end!r} in digit set at position {position}")
            if end < ch:
                raise PatternError(f"descending range {ch}-{end} in digit set at position {position}")
            choices.extend(DIGITS[int(ch):int(end) + 1])
            i += 3
            continue
        if i + 1 < len(body) and body[i + 1] == RANGE_SEP:
            raise PatternError(f"incomplete range in digit set at position {position}")
        choices.append(ch)
        i += 1
    return tuple(choices)


def tokenize(pattern: str) -> List[Token]:
    """Split a pattern into literal and wildcard tokens.

    Raises PatternError on unbalanced, nested or empty brackets.
    """
    tokens: List[Token] = []
    literal: List[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == SET_OPEN:
            end = pattern.find(SET_CLOSE, i + 1)
            if end == -1:
                raise PatternError(f"unbalanced '{SET_OPEN}' at position {i}")
            body = pattern[i + 1:end]
            if SET_OPEN in body:
                raise PatternError(f"nested '{SET_OPEN}' at position {i + 1 + body.index(SET_OPEN)}")
            if literal:
                tokens.append(Token(literal="".join(literal)))
                literal = []
            tokens.append(Token(choices=_parse_set(body, i)))
            i = end + 1
            continue
        if ch == SET_CLOSE:
            raise PatternError(f"unbalanced '{SET_CLOSE}' at position {i}")
        if ch in WILDCARD_CHARS:
            if literal:
                tokens.append(Token(literal="".join(literal)))
                literal = []
            tokens.append(Token(choices=tuple(DIGITS)))
        else:
            literal.append(ch)
        i += 1

    if literal:
        tokens.append(Token(literal="".join(literal)))
    return tokens


class PatternExpander:
    """Generate every candidate of a pattern, lazily and in a stable order."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.tokens = tokenize(pattern)
        self._wildcards = [t.choices for t in self.tokens if t.is_wildcard]
        logger.debug(f"Parsed pattern {pattern!r}: {len(self._wildcards)} wildcard token(s)")

    def count(self) -> int:
        """Number of candidates, without generating them."""
        total = 1
        for choices in self._wildcards:
            total *= len(choices)
        return total

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[str]:
        return self.candidates()

    def _build(self, counters: List[int]) -> str:
        parts = []
        w = 0
        for token in self.tokens:
            if token.is_wildcard:
                parts.append(token.choices[counters[w]])
                w += 1
            else:
                parts.append(token.literal)
        return "".join(parts)

    def candidates(self, start: int = 0, limit: Optional[int] = None) -> Iterator[str]:
        """Yield candidates from index `start`, at most `limit` of them.

        Works as a mixed-radix counter where the last wildcard is the least
        significant digit.
        """
        if start < 0:
            raise ValueError("start must be non-negative")
        total = self.count()
        if start >= total:
            return

        sizes = [len(c) for c in self._wildcards]
        counters = [0] * len(sizes)
        remainder = start
        for pos in range(len(sizes) - 1, -1, -1):
            remainder, counters[pos] = divmod(remainder, sizes[pos])

        produced = 0
        for _ in range(total - start):
            if limit is not None and produced >= limit:
                return
            yield self._build(counters)
            produced += 1

            pos = len(sizes) - 1
            while pos >= 0:
                counters[pos] += 1
                if counters[pos] < sizes[pos]:
                    break
                counters[pos] = 0
                pos -= 1


def normalize_pattern(text: str) -> str:
    """Strip whitespace and '+' from user input."""
    return re.sub(r'[\s+]', '', text)


def validate_pattern(pattern: str) -> bool:
    """Check that a normalized pattern only uses digits, x and [ ] sets and parses."""
    if not pattern or not VALID_PATTERN.match(pattern):
        logger.debug(f"Invalid phone number pattern: {pattern!r}")
        return False
    try:
        tokenize(pattern)
    except PatternError as e:
        logger.debug(f"Pattern {pattern!r} failed to parse: {e}")
        return False
    return True


def count_candidates(pattern: str) -> int:
    return PatternExpander(pattern).count()


def iter_candidates(pattern: str, start: int = 0) -> Iterator[str]:
    """Lazily yield candidates; the pattern is parsed before the first one."""
    return PatternExpander(pattern).candidates(start=start)


def expand(pattern: str) -> List[str]:
    """Generate all candidates of a pattern as a list."""
    expander = PatternExpander(pattern)
    candidates = list(expander.candidates())
    logger.info(f"Generated {len(candidates)} candidates for pattern: {pattern}")
    return candidates
