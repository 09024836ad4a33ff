"""
Image Pipeline Models

Explicit success/failure results for image loading. The pipeline never
raises across its public boundary; callers branch on ImageResult.ok.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LoadErrorKind(Enum):
    """Why an image could not be loaded"""
    INVALID_REFERENCE = "invalid_reference"  # empty or malformed reference
    NOT_FOUND = "not_found"  # local file missing
    TIMEOUT = "timeout"  # network fetch exceeded the time bound
    NETWORK = "network"  # connection/transport failure
    HTTP_STATUS = "http_status"  # non-2xx response
    DECODE = "decode"  # bytes are not a readable image
    PROCESSING = "processing"  # resize/encode failure


@dataclass(frozen=True)
class LoadError:
    """Typed description of a failed load"""
    kind: LoadErrorKind
    message: str
    reference: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message} ({self.reference})"


@dataclass(frozen=True)
class ImageResult:
    """
    Outcome of an image pipeline operation.

    On success `data` holds encoded image bytes and `width`/`height`
    their pixel size. On failure `data` is None and `error` says why.
    """
    data: Optional[bytes] = None
    width: int = 0
    height: int = 0
    error: Optional[LoadError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None

    @property
    def size(self) -> tuple:
        return (self.width, self.height)

    @classmethod
    def success(cls, data: bytes, width: int, height: int) -> "ImageResult":
        return cls(data=data, width=width, height=height)

    @classmethod
    def failure(
        cls,
        kind: LoadErrorKind,
        message: str,
        reference: Optional[str] = None,
    ) -> "ImageResult":
        return cls(error=LoadError(kind=kind, message=message, reference=reference))

    def __repr__(self) -> str:
        if self.ok:
            return f"ImageResult(ok, {self.width}x{self.height}, {len(self.data) / 1024:.1f}KB)"
        return f"ImageResult(failed, {self.error})"
