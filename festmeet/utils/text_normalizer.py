"""Text normalization utilities for recognized schedule screenshots.

This module handles three distinct normalization concerns:

1. **Recognized-text cleanup** -- Turns the noisy output of a recognition
   engine run over a festival-app screenshot into line-oriented text where
   every time, artist and stage sits on its own line.  Repairs misread time
   separators ("10l30" -> "10:30"), normalizes meridiem spellings, strips
   phone UI chrome (status-bar clock, app header, battery readout) and
   drops stray symbols.

2. **Artist name cleanup** -- Reduces a candidate artist line to letters,
   digits, spaces, ampersands and hyphens so collaboration notations such
   as "Jeanie b2b Vampa" or "Above & Beyond" survive.

3. **Fuzzy matching** -- rapidfuzz token-sort matching so OCR-mangled names
   (e.g. "W00LI") can be snapped to a known lineup ("Wooli").
"""

from __future__ import annotations

import re

from rapidfuzz import fuzz, process

# Generic venue-type words that end a stage name on festival apps.  Matched
# case-insensitively as a whole word.
VENUE_SUFFIXES: tuple[str, ...] = (
    "Stage",
    "Field",
    "Grounds",
    "Meadow",
    "Garden",
    "Valley",
    "Pod",
    "Bloom",
    "Jungle",
    "Land",
)

_VENUE_ALTERNATION = "|".join(VENUE_SUFFIXES)

# ------------------------------------------------------------------
# Character repairs
# ------------------------------------------------------------------

# Each tuple is (compiled_regex, replacement), applied in order.
_TIME_SEPARATOR_REPAIRS: list[tuple[re.Pattern[str], str]] = [
    # Lowercase "l" read in place of a colon (e.g. "10l30" -> "10:30")
    (re.compile(r"(?<=\d)l(?=\d)"), ":"),
    # Capital "I" read in place of a colon (e.g. "10I30" -> "10:30")
    (re.compile(r"(?<=\d)I(?=\d)"), ":"),
    # Semicolon read in place of a colon (e.g. "10;30" -> "10:30")
    (re.compile(r"(?<=\d);(?=\d)"), ":"),
]

_LITERAL_NEWLINE = re.compile(r"\\n")
_HORIZONTAL_SPACE = re.compile(r"[ \t\f\v]+")
_LONG_DASH = re.compile(r"[‒–—―−]")

# "2:00pm", "2:00 p.m.", "2:00 Pm" -> "2:00 PM"
_MERIDIEM = re.compile(r"(?<=\d)\s*([AaPp])\.?\s?[Mm]\b\.?")

# ------------------------------------------------------------------
# UI chrome
# ------------------------------------------------------------------

# Phone status bar: a bare clock with no meridiem, optionally followed by
# short carrier/signal/battery tokens ("9:41", "9:41 LTE 85%").  Only the
# first non-empty line is tested.
_STATUS_BAR = re.compile(r"^\d{1,2}:\d{2}(?!\s*[AP]M\b)(?:\s+\S{1,5})*$")

_APP_HEADERS = re.compile(
    r"\bLINE\s*UP\s*&\s*SCHEDULE\b|\bMY\s+SCHEDULE\b|\bSET\s+TIMES\b",
    re.IGNORECASE,
)

_BATTERY_BRACKET = re.compile(r"\[\d+[%\]]?")
_PERCENTAGE = re.compile(r"\b\d{1,3}\s?%")

# ------------------------------------------------------------------
# Line-break insertion
# ------------------------------------------------------------------

# A time token after separator and meridiem repair: "2:00", "2.00 PM",
# "230 PM".  Bare three/four digit runs only count with a meridiem.
_TIME_TOKEN = re.compile(r"\b\d{1,2}(?:[:.]\d{2}(?:\s[AP]M\b)?|\d{2}\s[AP]M\b)")

# "<Capitalized word> <venue suffix>", e.g. "Cyberian Stage".
_STAGE_TOKEN = re.compile(
    r"\b(?:[A-Z][\w'&-]*[ \t]+)?(?i:" + _VENUE_ALTERNATION + r")\b"
)

_DISALLOWED_CHARS = re.compile(r"[^\w\s:.&-]")

_ARTIST_DISALLOWED = re.compile(r"[^\w\s&-]|_")
_ANY_WHITESPACE = re.compile(r"\s+")


def repair_time_separators(text: str) -> str:
    """Replace characters commonly misread in place of a time colon."""
    repaired = text
    for pattern, replacement in _TIME_SEPARATOR_REPAIRS:
        repaired = pattern.sub(replacement, repaired)
    return repaired


def _strip_status_bar(text: str) -> str:
    lines = text.split("\n")
    for idx, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue
        if _STATUS_BAR.match(stripped):
            lines[idx] = ""
        break
    return "\n".join(lines)


def _break_before_times(text: str) -> str:
    """Start a new line at every time token, except the end of a range."""

    def _insert(match: re.Match[str]) -> str:
        preceding = text[: match.start()].rstrip(" ")
        if not preceding or preceding.endswith(("\n", "-")):
            return match.group(0)
        return "\n" + match.group(0)

    return _TIME_TOKEN.sub(_insert, text)


def _break_before_stages(text: str) -> str:
    """Start a new line at a stage name that follows other text."""

    def _insert(match: re.Match[str]) -> str:
        line_start = text.rfind("\n", 0, match.start()) + 1
        if not text[line_start:match.start()].strip():
            return match.group(0)
        return "\n" + match.group(0)

    return _STAGE_TOKEN.sub(_insert, text)


def normalize_recognized_text(text: str) -> str:
    """Clean raw recognized text into line-oriented, parseable text.

    Never raises; unusable input yields an empty string.

    Args:
        text: Raw text returned by the recognition engine.

    Returns:
        Cleaned text with one semantic unit per line and no empty or
        single-character lines.
    """
    if not text:
        return ""

    cleaned = _LITERAL_NEWLINE.sub("\n", text)
    cleaned = cleaned.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _HORIZONTAL_SPACE.sub(" ", cleaned)

    # 1. Repair time punctuation
    cleaned = _LONG_DASH.sub("-", cleaned)
    cleaned = repair_time_separators(cleaned)
    cleaned = _MERIDIEM.sub(lambda m: f" {m.group(1).upper()}M", cleaned)

    # 2. Strip UI chrome
    cleaned = _strip_status_bar(cleaned)
    cleaned = _APP_HEADERS.sub("", cleaned)
    cleaned = _BATTERY_BRACKET.sub("", cleaned)
    cleaned = _PERCENTAGE.sub("", cleaned)

    # 3. One semantic unit per line
    cleaned = _break_before_times(cleaned)
    cleaned = _break_before_stages(cleaned)

    # 4. Drop everything outside the whitelist
    cleaned = _DISALLOWED_CHARS.sub("", cleaned)
    cleaned = _HORIZONTAL_SPACE.sub(" ", cleaned)

    lines = [line.strip() for line in cleaned.split("\n")]
    return "\n".join(line for line in lines if len(line) > 1)


def clean_artist_name(name: str) -> str:
    """Keep letters, digits, spaces, ``&`` and hyphens; collapse whitespace."""
    cleaned = _ARTIST_DISALLOWED.sub("", name)
    return _ANY_WHITESPACE.sub(" ", cleaned).strip()


def title_case_name(name: str) -> str:
    """Capitalize the first letter of each space-separated word.

    Unlike ``str.title`` this leaves letters after digits and apostrophes
    lowercase ("b2b" -> "B2b", "don't" -> "Don't").
    """
    words = _ANY_WHITESPACE.sub(" ", name.strip()).lower().split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def fuzzy_match(
    query: str,
    candidates: list[str],
    threshold: float = 0.8,
) -> tuple[str, float] | None:
    """Find the best fuzzy match for a query among candidates.

    Uses rapidfuzz ``token_sort_ratio`` which sorts tokens alphabetically
    before comparing, so word-order differences are tolerated.

    Args:
        query: The string to match.
        candidates: List of candidate strings to match against.
        threshold: Minimum similarity score (0.0--1.0) to accept a match.

    Returns:
        A (best_match, score) tuple if a match meets the threshold, else None.
    """
    if not candidates:
        return None

    result = process.extractOne(
        query,
        candidates,
        scorer=fuzz.token_sort_ratio,
        score_cutoff=threshold * 100,
    )

    if result is None:
        return None

    match_str, score, _ = result
    return (match_str, score / 100.0)
