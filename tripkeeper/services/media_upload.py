"""
Media upload service
Runs a batch of files through the media pipeline and stores each successful
result in an album as soon as it is ready
"""

import asyncio
from typing import List, Optional, Sequence

from pydantic import ValidationError

from tripkeeper.core.db import TravelDatabase
from tripkeeper.core.logger import get_logger
from tripkeeper.models.results import ProcessedMedia, UploadFailure, UploadReport
from tripkeeper.processing.media_pipeline import IncomingFile, MediaPipeline, get_media_pipeline
from tripkeeper.repositories.base import DanglingReferenceError, StorageWriteError

logger = get_logger(__name__)


class MediaUploadService:
    """Album upload: process, store, tally"""

    def __init__(self, db: TravelDatabase, pipeline: Optional[MediaPipeline] = None):
        self.db = db
        self.pipeline = pipeline or get_media_pipeline()

    async def upload(self, album_id: str, files: Sequence[IncomingFile]) -> UploadReport:
        """Upload files into an album

        A file that cannot be decoded or stored is reported as a failure and
        does not stop the others. The report is returned once every file has
        completed.

        Raises:
            DanglingReferenceError: the album does not exist
        """
        if self.db.albums.get_by_id(album_id) is None:
            raise DanglingReferenceError(f"Album '{album_id}' does not exist")

        report = UploadReport(album_id=album_id, total=len(files))

        def store(result: ProcessedMedia) -> Optional[ProcessedMedia]:
            if not result.success:
                report.failures.append(
                    UploadFailure(file_name=result.file_name, reason=result.error or "processing failed")
                )
                return None

            try:
                media = self.db.media.create(
                    album_id,
                    {
                        "type": result.type,
                        "url": result.url,
                        "thumbnail": result.thumbnail,
                        "title": result.file_name,
                    },
                )
            except (StorageWriteError, DanglingReferenceError, ValidationError) as e:
                logger.error(f"Failed to store {result.file_name} in album {album_id}: {e}")
                report.failures.append(UploadFailure(file_name=result.file_name, reason=str(e)))
                return result.model_copy(update={"success": False, "error": str(e)})

            report.created.append(media)
            return None

        await self.pipeline.process_batch(files, on_result=store)

        logger.info(
            f"Upload to album {album_id} finished: "
            f"{report.success_count} stored, {report.failure_count} failed"
        )
        return report

    def upload_sync(self, album_id: str, files: Sequence[IncomingFile]) -> UploadReport:
        """Blocking wrapper for callers without an event loop"""
        return asyncio.run(self.upload(album_id, files))


def load_files(paths: Sequence[str]) -> List[IncomingFile]:
    return [IncomingFile.from_path(path) for path in paths]
