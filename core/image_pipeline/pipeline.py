"""
Image Pipeline - fetch, decode, resize and encode catalog images.

References are either http(s) URLs, fetched with httpx under a bounded
timeout, or local paths resolved against the uploads directory.

Usage:
    pipeline = ImagePipeline()

    result = await pipeline.load_original("/uploads/products/ring.png")
    if not result.ok:
        result = pipeline.placeholder(270, 127, "No image")
"""

import asyncio
from pathlib import Path
from typing import Optional, Union

import httpx
from PIL import Image, UnidentifiedImageError

from config.logging_config import get_logger
from config.settings import settings

from . import processing
from .models import ImageResult, LoadErrorKind


logger = get_logger(__name__)

UPLOADS_URL_PREFIX = "/uploads/"


class ImagePipeline:
    """
    Loads catalog images and synthesizes placeholders.

    Every public operation returns an ImageResult; failures are logged
    here and reported through ImageResult.error.
    """

    def __init__(
        self,
        uploads_dir: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        placeholder_font: Optional[str] = None,
        placeholder_quality: Optional[int] = None,
    ):
        """
        Initialize pipeline.

        Args:
            uploads_dir: Root for local references (default: settings.uploads_dir)
            timeout: Network fetch time bound in seconds
            client: Shared httpx client; a short-lived one is opened per
                fetch when omitted
            placeholder_font: TrueType file used for placeholder labels
            placeholder_quality: JPEG quality of placeholders
        """
        self.uploads_dir = Path(uploads_dir or settings.uploads_dir)
        self.timeout = timeout if timeout is not None else settings.image_fetch_timeout_sec
        self.placeholder_font = placeholder_font
        self.placeholder_quality = placeholder_quality or settings.placeholder_image_quality
        self._client = client

    # ------------------------------------------------------------------
    # Reference resolution
    # ------------------------------------------------------------------

    @staticmethod
    def is_remote(ref: str) -> bool:
        return ref.startswith(("http://", "https://"))

    def resolve_path(self, ref: str) -> Path:
        """Map a local reference to a filesystem path."""
        if ref.startswith(UPLOADS_URL_PREFIX):
            return self.uploads_dir / ref[len(UPLOADS_URL_PREFIX):]
        path = Path(ref)
        if path.is_absolute():
            return path
        return self.uploads_dir / path

    async def fetch(self, ref: Optional[str]) -> ImageResult:
        """Fetch raw bytes for a reference. Width/height are left at 0."""
        if not ref or not ref.strip():
            return self._fail(LoadErrorKind.INVALID_REFERENCE, "empty image reference", ref)

        ref = ref.strip()
        if self.is_remote(ref):
            return await self._fetch_remote(ref)
        return await self._fetch_local(ref)

    async def _fetch_remote(self, url: str) -> ImageResult:
        logger.debug(f"Fetching image: {url}")
        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self.timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            return self._fail(LoadErrorKind.TIMEOUT, f"timed out after {self.timeout}s: {e}", url)
        except httpx.HTTPStatusError as e:
            return self._fail(LoadErrorKind.HTTP_STATUS, f"HTTP {e.response.status_code}", url)
        except httpx.InvalidURL as e:
            return self._fail(LoadErrorKind.INVALID_REFERENCE, str(e), url)
        except httpx.HTTPError as e:
            return self._fail(LoadErrorKind.NETWORK, str(e) or type(e).__name__, url)

        return ImageResult.success(response.content, 0, 0)

    async def _fetch_local(self, ref: str) -> ImageResult:
        path = self.resolve_path(ref)
        if not path.is_file():
            return self._fail(LoadErrorKind.NOT_FOUND, f"file not found: {path}", ref)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            return self._fail(LoadErrorKind.NOT_FOUND, f"cannot read {path}: {e}", ref)
        return ImageResult.success(data, 0, 0)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def load_original(self, ref: Optional[str]) -> ImageResult:
        """Fetch bytes unmodified, verified to be a decodable image."""
        fetched = await self.fetch(ref)
        if not fetched.ok:
            return fetched
        try:
            width, height = processing.verify(fetched.data)
        except Exception as e:
            return self._fail(LoadErrorKind.DECODE, f"not a readable image: {e}", ref)
        return ImageResult.success(fetched.data, width, height)

    async def load_normalized(
        self,
        ref: Optional[str],
        max_width: int,
        max_height: int,
        quality: Optional[int] = None,
        allow_enlarge: bool = True,
    ) -> ImageResult:
        """
        Fetch, fit inside max_width x max_height, flatten alpha onto white
        and encode as JPEG.
        """
        quality = quality or settings.image_quality
        fetched = await self.fetch(ref)
        if not fetched.ok:
            return fetched

        def _process():
            img = processing.decode(fetched.data)
            img = processing.fit_inside(img, max_width, max_height, allow_enlarge)
            return processing.encode_jpeg(img, quality), img.size

        return await self._transform(ref, _process)

    async def load_background(
        self,
        ref: Optional[str],
        target_width: int,
        target_height: int,
        quality: Optional[int] = None,
    ) -> ImageResult:
        """Fetch and cover-fit to exactly target_width x target_height."""
        # Backgrounds span the whole page; never drop below 90
        quality = max(90, quality or settings.background_image_quality)
        fetched = await self.fetch(ref)
        if not fetched.ok:
            return fetched

        def _process():
            img = processing.decode(fetched.data)
            img = processing.cover_fit(img, target_width, target_height)
            return processing.encode_jpeg(img, quality), img.size

        return await self._transform(ref, _process)

    def placeholder(
        self,
        width: int,
        height: int,
        text: str = "",
        font_path: Optional[str] = None,
    ) -> ImageResult:
        """Synthesize a flat placeholder image with a centred label."""
        width, height = max(1, int(width)), max(1, int(height))
        try:
            data = processing.render_placeholder(
                width,
                height,
                text,
                quality=self.placeholder_quality,
                font_path=font_path or self.placeholder_font,
            )
        except Exception as e:
            return self._fail(LoadErrorKind.PROCESSING, f"placeholder failed: {e}", None)
        return ImageResult.success(data, width, height)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _transform(self, ref, func) -> ImageResult:
        try:
            data, (width, height) = await asyncio.to_thread(func)
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            return self._fail(LoadErrorKind.DECODE, f"not a readable image: {e}", ref)
        except Exception as e:
            return self._fail(LoadErrorKind.PROCESSING, str(e) or type(e).__name__, ref)
        return ImageResult.success(data, width, height)

    def _fail(self, kind: LoadErrorKind, message: str, ref: Optional[str]) -> ImageResult:
        result = ImageResult.failure(kind, message, ref)
        logger.warning(f"Image load failed [{kind.value}]: {message} ({ref})")
        return result
