"""Pure parsers for the interactive prompts.

Each parser turns one line of user input into an ``InputResult``; the CLI keeps
asking until a result is ``ok`` or ``cancelled``.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

# optional sign, ASCII digits only (no "1_0", no other scripts' digits)
_INTEGER = re.compile(r"^[+-]?\d+$", re.ASCII)


class InputResult(BaseModel):
    ok: bool = False
    cancelled: bool = False
    value: Optional[Any] = None
    message: str = ""


def parse_directory(text: str) -> InputResult:
    text = (text or "").strip()
    if not text:
        return InputResult(cancelled=True)
    path = Path(text).expanduser()
    if not path.is_dir():
        return InputResult(message=f'Directory "{text}" not found')
    return InputResult(ok=True, value=path)


def max_threshold_minutes(now: Optional[datetime] = None) -> int:
    """Largest age in minutes whose deadline is still a representable datetime.

    One day of slack keeps the deadline convertible to any local time zone.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    earliest = datetime.min.replace(tzinfo=timezone.utc) + timedelta(days=1)
    return int((now - earliest).total_seconds() // 60)


def parse_threshold(text: str, now: Optional[datetime] = None) -> InputResult:
    text = (text or "").strip()
    if not _INTEGER.match(text):
        return InputResult(message="a numeric value is required")
    minutes = int(text)
    if minutes <= 0:
        return InputResult(message="the value must be greater than 0")
    limit = max_threshold_minutes(now)
    if minutes > limit:
        return InputResult(message=f"the value must not exceed {limit}")
    return InputResult(ok=True, value=minutes)


def parse_confirmation(text: str, word: str = "yes") -> InputResult:
    # exact match only; anything but the word or an empty line is re-asked
    if text == word:
        return InputResult(ok=True, value=True)
    if not text:
        return InputResult(cancelled=True)
    return InputResult(message=f"the answer must be {word} or empty")
