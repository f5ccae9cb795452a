"""Core data models for muse.ai requests and results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, Literal


class Visibility(Enum):
    """Visibility of a collection or video."""

    PRIVATE = "private"
    UNLISTED = "unlisted"
    PUBLIC = "public"


class AnalysisKind(Enum):
    """Video analysis result sets exposed under files/i/."""

    SCENES = "scenes"
    SPEECH = "speech"
    TEXT = "text"
    ACTIONS = "actions"
    SOUNDS = "sounds"
    FACES = "faces"


@dataclass(frozen=True)
class Success:
    """Decoded body of a successful call."""

    body: dict[str, Any] | list[Any]
    status_code: int | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Failure:
    """Transport, decoding or vendor-reported error."""

    message: str
    status_code: int | None = field(default=None, compare=False)

    def as_dict(self) -> dict[str, str]:
        """Single-key error mapping as returned by the vendor."""
        return {"error": self.message}


Result = Success | Failure

# Returned instead of a request when a call has nothing to change.
NO_CHANGES: Literal[False] = False


@dataclass(frozen=True)
class CoverByTimestamp:
    """Use the video frame at ``seconds`` as the cover."""

    seconds: float


@dataclass(frozen=True)
class CoverByFile:
    """Upload an image (PNG, JPEG, JPG) as the cover."""

    file: BinaryIO


Cover = CoverByTimestamp | CoverByFile
