"""
Media pipeline
Turns uploaded files into storable data URLs: photos are downscaled and
re-encoded as JPEG, anything else passes through unchanged
"""

import asyncio
import base64
import io
import math
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image, ImageOps

from tripkeeper.core.logger import get_logger
from tripkeeper.models.entities import VIDEO_THUMBNAIL, MediaType
from tripkeeper.models.results import ProcessedMedia

logger = get_logger(__name__)

MAX_DIMENSION = 800
JPEG_QUALITY = 70  # 0.7 on the 0-1 scale
OUTPUT_MIME = "image/jpeg"
FALLBACK_MIME = "application/octet-stream"

ResultHandler = Callable[[ProcessedMedia], Optional[ProcessedMedia]]


@dataclass
class IncomingFile:
    """A user-selected file: name, declared MIME type and content"""

    name: str
    mime_type: str
    data: bytes

    @classmethod
    def from_path(cls, path, mime_type: Optional[str] = None) -> "IncomingFile":
        path = Path(path)
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, mime_type=mime_type or "", data=path.read_bytes())


def classify(mime_type: Optional[str]) -> MediaType:
    """image/* is a photo; every other declared type is stored as video"""
    if mime_type and mime_type.startswith("image/"):
        return MediaType.PHOTO
    return MediaType.VIDEO


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def scaled_size(
    width: int, height: int, max_dimension: int = MAX_DIMENSION
) -> Tuple[int, int]:
    """Fit (width, height) inside max_dimension keeping the aspect ratio

    Sizes already within the bound are returned unchanged.
    """
    longest = max(width, height)
    if longest <= max_dimension:
        return width, height

    scale = max_dimension / longest
    new_width = max(1, _round_half_up(width * scale))
    new_height = max(1, _round_half_up(height * scale))
    return new_width, new_height


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type or FALLBACK_MIME};base64,{base64.b64encode(data).decode('ascii')}"


def parse_data_url(url: str) -> Optional[Tuple[str, bytes]]:
    """Split a base64 data URL into (mime_type, bytes); None for anything else"""
    if not url.startswith("data:") or ";base64," not in url:
        return None
    header, _, payload = url.partition(";base64,")
    try:
        return header[len("data:"):], base64.b64decode(payload, validate=True)
    except ValueError as e:
        logger.warning(f"Malformed data URL: {e}")
        return None


class MediaPipeline:
    """Downscale / re-encode pipeline for album uploads"""

    def __init__(
        self,
        max_dimension: Optional[int] = None,
        jpeg_quality: Optional[int] = None,
        video_thumbnail: Optional[str] = None,
    ):
        if max_dimension is None or jpeg_quality is None or video_thumbnail is None:
            try:
                from tripkeeper.config.loader import get_config

                config = get_config()
                if max_dimension is None:
                    max_dimension = int(config.get("media.max_dimension", MAX_DIMENSION))
                if jpeg_quality is None:
                    jpeg_quality = int(config.get("media.jpeg_quality", JPEG_QUALITY))
                if video_thumbnail is None:
                    video_thumbnail = config.get("media.video_thumbnail", VIDEO_THUMBNAIL)
            except Exception as e:
                logger.debug(f"Failed to read media config, using default values: {e}")

        self.max_dimension = max_dimension or MAX_DIMENSION
        self.jpeg_quality = jpeg_quality or JPEG_QUALITY
        self.video_thumbnail = video_thumbnail or VIDEO_THUMBNAIL

        logger.debug(
            f"MediaPipeline initialized: max_dimension={self.max_dimension}, "
            f"quality={self.jpeg_quality}"
        )

    def resize_image(self, img_bytes: bytes) -> Tuple[bytes, int, int]:
        """Decode, downscale and re-encode an image

        Args:
            img_bytes: Original image bytes

        Returns:
            (jpeg bytes, width, height)

        Raises:
            Any Pillow decode error for unreadable input
        """
        with Image.open(io.BytesIO(img_bytes)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            if img.mode != "RGB":
                img = img.convert("RGB")

            width, height = scaled_size(img.width, img.height, self.max_dimension)
            if (width, height) != img.size:
                img = img.resize((width, height), Image.Resampling.LANCZOS)

            output = io.BytesIO()
            img.save(output, format="JPEG", quality=self.jpeg_quality, optimize=True)
            return output.getvalue(), width, height

    def process_file(self, incoming: IncomingFile) -> ProcessedMedia:
        """Process one file; decode failures give an unsuccessful result"""
        media_type = classify(incoming.mime_type)

        if media_type == MediaType.VIDEO:
            return ProcessedMedia(
                file_name=incoming.name,
                success=True,
                type=media_type,
                url=to_data_url(incoming.data, incoming.mime_type),
                thumbnail=self.video_thumbnail,
            )

        try:
            jpeg_bytes, width, height = self.resize_image(incoming.data)
        except Exception as e:
            logger.warning(f"Failed to decode image {incoming.name}: {e}")
            return ProcessedMedia(
                file_name=incoming.name,
                success=False,
                type=media_type,
                error=f"cannot decode image: {e}",
            )

        url = to_data_url(jpeg_bytes, OUTPUT_MIME)
        return ProcessedMedia(
            file_name=incoming.name,
            success=True,
            type=media_type,
            url=url,
            thumbnail=url,
            width=width,
            height=height,
        )

    async def process(self, incoming: IncomingFile) -> ProcessedMedia:
        """Process one file off the event loop"""
        return await asyncio.to_thread(self.process_file, incoming)

    async def process_batch(
        self,
        files: Sequence[IncomingFile],
        on_result: Optional[ResultHandler] = None,
    ) -> List[ProcessedMedia]:
        """Process every file concurrently

        on_result runs on the event loop as each file finishes and may return a
        replacement result (e.g. marking a failed save). The batch is done when
        the completion count reaches the number of files; results are in
        completion order.
        """
        total = len(files)
        results: List[ProcessedMedia] = []
        if total == 0:
            return results

        completed = 0
        all_done = asyncio.Event()

        async def run_one(incoming: IncomingFile):
            nonlocal completed
            try:
                result = await self.process(incoming)
            except Exception as e:
                logger.error(f"Processing {incoming.name} failed: {e}", exc_info=True)
                result = ProcessedMedia(file_name=incoming.name, success=False, error=str(e))

            if on_result is not None:
                try:
                    result = on_result(result) or result
                except Exception as e:
                    logger.error(f"Result handler failed for {incoming.name}: {e}", exc_info=True)
                    result = result.model_copy(update={"success": False, "error": str(e)})

            results.append(result)
            completed += 1
            logger.debug(f"Processed {completed}/{total}: {incoming.name}")
            if completed == total:
                all_done.set()

        tasks = [asyncio.create_task(run_one(incoming)) for incoming in files]
        await all_done.wait()

        failed = sum(1 for result in results if not result.success)
        logger.info(f"Batch finished: {total - failed} succeeded, {failed} failed ({len(tasks)} files)")
        return results


# Global singleton
_media_pipeline: Optional[MediaPipeline] = None


def get_media_pipeline() -> MediaPipeline:
    """Get media pipeline singleton"""
    global _media_pipeline
    if _media_pipeline is None:
        _media_pipeline = MediaPipeline()
    return _media_pipeline
