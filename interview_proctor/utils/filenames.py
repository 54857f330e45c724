"""
Download filenames for exported reports and recordings
"""

import re
from datetime import datetime

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_part(value: str) -> str:
    """Replace characters that are unsafe in filenames with '_'"""
    cleaned = _UNSAFE_CHARS.sub("_", value.strip()).strip("._")
    return cleaned or "candidate"


def download_filename(prefix: str, candidate: str, when: datetime, extension: str) -> str:
    """
    Build e.g. 'interview-report-Alice-2024-05-01.json'.
    """
    return f"{prefix}-{safe_part(candidate)}-{when.strftime('%Y-%m-%d')}.{extension}"


def report_filename(candidate: str, when: datetime) -> str:
    return download_filename("interview-report", candidate, when, "json")


def recording_filename(candidate: str, when: datetime) -> str:
    return download_filename("interview-recording", candidate, when, "webm")
