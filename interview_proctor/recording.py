"""
Recording Reference - Metadata for the recorded media of a session

The recorder hands over an opaque blob on session end. Only its size and
digest are kept; the bytes themselves are never interpreted or stored.
"""

import hashlib
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any

from .utils.filenames import recording_filename

DEFAULT_MEDIA_TYPE = "video/webm"


@dataclass(frozen=True)
class RecordingReference:
    size_bytes: int
    sha256: str
    media_type: str
    filename: str

    @classmethod
    def from_blob(
        cls,
        blob: bytes,
        candidate_label: str,
        recorded_at: datetime,
        media_type: str = DEFAULT_MEDIA_TYPE
    ) -> "RecordingReference":
        return cls(
            size_bytes=len(blob),
            sha256=hashlib.sha256(blob).hexdigest(),
            media_type=media_type,
            filename=recording_filename(candidate_label, recorded_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size_bytes": self.size_bytes,
            "sha256": self.sha256,
            "media_type": self.media_type,
            "filename": self.filename,
        }
