"""
Album and media repositories

Media live in one collection per album. Every media write also rewrites the
album's aggregates:
- item_count is the length of the album's media collection
- cover_url is the url of a media item in the album, or the default cover
"""

from typing import Any, Dict, List, Optional, Union

from tripkeeper.core.collection_store import CollectionHandle, MediaStore
from tripkeeper.core.logger import get_logger
from tripkeeper.models.entities import DEFAULT_ALBUM_COVER, Album, Media, MediaType

from .base import BaseRepository, DanglingReferenceError, Draft, StorageWriteError

logger = get_logger(__name__)

EDITABLE_MEDIA_FIELDS = ("title", "description", "tags")


def first_photo_url(media: List[Media]) -> Optional[str]:
    for item in media:
        if item.type == MediaType.PHOTO:
            return item.url
    return None


class AlbumRepository(BaseRepository[Album]):
    model = Album

    def __init__(
        self,
        handle: CollectionHandle,
        media_store: MediaStore,
        default_cover: str = DEFAULT_ALBUM_COVER,
    ):
        super().__init__(handle)
        self.media_store = media_store
        self.default_cover = default_cover

    def list(self) -> List[Album]:
        """Albums, most recently created first"""
        albums = super().list()
        return sorted(
            albums,
            key=lambda album: album.created_at.timestamp() if album.created_at else 0,
            reverse=True,
        )

    def list_for_trip(self, trip_id: str) -> List[Album]:
        return [album for album in self.list() if album.trip_id == trip_id]

    def create(self, draft: Draft) -> Album:
        """New albums start empty with the default cover"""
        data = self._coerce_draft(draft)
        for key in ("coverUrl", "cover_url", "itemCount", "item_count"):
            data.pop(key, None)
        return super().create({**data, "coverUrl": self.default_cover, "itemCount": 0})

    def update(self, entity: Draft) -> Optional[Album]:
        """Edit an album; item_count and cover_url keep their stored values

        Both are aggregates of the media collection and only change through
        save_aggregates().
        """
        data = self._coerce_draft(entity)
        stored = self.get_by_id(data.get("id", ""))
        if stored is None:
            return super().update(data)

        for key in ("coverUrl", "cover_url", "itemCount", "item_count"):
            data.pop(key, None)
        return super().update(
            {**data, "coverUrl": stored.cover_url, "itemCount": stored.item_count}
        )

    def delete(self, record_id: str) -> bool:
        """Remove the album and its media collection"""
        if not super().delete(record_id):
            return False
        self.media_store.for_album(record_id).remove()
        return True

    def save_aggregates(self, album: Album, media: List[Media]) -> Album:
        """Recompute item_count/cover_url from the album's media and write the album

        Raises:
            StorageWriteError: the albums collection could not be written
        """
        cover = album.cover_url
        if cover == self.default_cover or cover not in {item.url for item in media}:
            cover = first_photo_url(media) or self.default_cover

        updated = album.model_copy(
            update={"item_count": max(0, len(media)), "cover_url": cover}
        )
        result = BaseRepository.update(self, updated)
        if result is None:
            raise DanglingReferenceError(f"Album '{album.id}' no longer exists")
        return result

    def refresh_aggregates(self, album_id: str) -> Optional[Album]:
        """Repair item_count/cover_url from the stored media"""
        album = self.get_by_id(album_id)
        if album is None:
            return None
        media = MediaRepository(self.media_store, self).list(album_id)
        return self.save_aggregates(album, media)


class _AlbumMediaRepository(BaseRepository[Media]):
    """CRUD over one album's media collection"""

    model = Media


class MediaRepository:
    """Media items, partitioned by album id"""

    def __init__(self, media_store: MediaStore, albums: AlbumRepository):
        self.media_store = media_store
        self.albums = albums

    def _partition(self, album_id: str) -> _AlbumMediaRepository:
        return _AlbumMediaRepository(self.media_store.for_album(album_id))

    def list(self, album_id: str) -> List[Media]:
        return self._partition(album_id).list()

    def get_by_id(self, album_id: str, media_id: str) -> Optional[Media]:
        return self._partition(album_id).get_by_id(media_id)

    def create(self, album_id: str, draft: Union[Dict[str, Any], Media]) -> Media:
        """Store a media item and update the album's aggregates

        If the album cannot be written the media collection is restored, so a
        failure leaves both unchanged.

        Raises:
            DanglingReferenceError: the album does not exist
            StorageWriteError: the store rejected the write
        """
        album = self.albums.get_by_id(album_id)
        if album is None:
            raise DanglingReferenceError(f"Album '{album_id}' does not exist")

        partition = self._partition(album_id)
        snapshot = partition.handle.load()

        data = draft.to_record() if isinstance(draft, Media) else dict(draft)
        data.pop("album_id", None)
        media = partition.create({**data, "albumId": album_id})

        try:
            self.albums.save_aggregates(album, partition.list())
        except StorageWriteError:
            logger.error(f"Album {album_id} could not be updated, rolling back media {media.id}")
            partition.handle.save(snapshot)
            raise

        return media

    def update(self, media: Media) -> Optional[Media]:
        """Edit title, description or tags of a media item

        Every other field keeps its stored value, so the album cover and count
        stay valid. Returns None when the item does not exist.
        """
        partition = self._partition(media.album_id)
        stored = partition.get_by_id(media.id)
        if stored is None:
            logger.warning(f"Cannot update missing media {media.id} in album {media.album_id}")
            return None

        edits = {field: getattr(media, field) for field in EDITABLE_MEDIA_FIELDS}
        return partition.update(stored.model_copy(update=edits))

    def delete(self, album_id: str, media_id: str) -> bool:
        """Remove a media item and reassign the album cover if it pointed at it"""
        partition = self._partition(album_id)
        snapshot = partition.handle.load()
        removed = partition.get_by_id(media_id)
        if removed is None or not partition.delete(media_id):
            return False

        album = self.albums.get_by_id(album_id)
        if album is None:
            logger.warning(f"Deleted media {media_id} from missing album {album_id}")
            return True

        try:
            self.albums.save_aggregates(album, partition.list())
        except StorageWriteError:
            logger.error(f"Album {album_id} could not be updated, restoring media {media_id}")
            partition.handle.save(snapshot)
            return False

        return True
