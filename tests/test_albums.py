"""Tests for album aggregates, media partitions and batch upload."""

import asyncio
import json

import pytest

from conftest import corrupt_photo, photo
from tripkeeper.models import DEFAULT_ALBUM_COVER
from tripkeeper.processing.media_pipeline import IncomingFile
from tripkeeper.repositories import DanglingReferenceError, StorageWriteError
from tripkeeper.services.media_upload import MediaUploadService


def _photo_media(url="data:image/jpeg;base64,AAAA"):
    return {"type": "photo", "url": url, "thumbnail": url, "title": "p.jpg"}


def _video_media(url="data:video/mp4;base64,AAAA"):
    return {"type": "video", "url": url, "thumbnail": "/video-thumbnail.jpg", "title": "v.mp4"}


def _assert_aggregates(db, album_id):
    album = db.albums.get_by_id(album_id)
    media = db.media.list(album_id)
    assert album.item_count == len(media)
    urls = {item.url for item in media}
    assert album.cover_url == DEFAULT_ALBUM_COVER or album.cover_url in urls
    return album, media


def test_new_album_is_empty_with_default_cover(db):
    album = db.albums.create({"title": "Kyoto", "coverUrl": "x.jpg", "itemCount": 9})
    assert album.item_count == 0
    assert album.cover_url == DEFAULT_ALBUM_COVER


def test_first_photo_becomes_cover(db):
    album = db.albums.create({"title": "Kyoto"})

    db.media.create(album.id, _video_media())
    album, _ = _assert_aggregates(db, album.id)
    assert album.cover_url == DEFAULT_ALBUM_COVER

    first = db.media.create(album.id, _photo_media("data:image/jpeg;base64,ONE="))
    db.media.create(album.id, _photo_media("data:image/jpeg;base64,TWO="))
    album, media = _assert_aggregates(db, album.id)
    assert album.item_count == 3
    assert album.cover_url == first.url
    assert all(item.album_id == album.id for item in media)


def test_deleting_cover_reassigns_it(db):
    album = db.albums.create({"title": "Kyoto"})
    first = db.media.create(album.id, _photo_media("data:image/jpeg;base64,ONE="))
    second = db.media.create(album.id, _photo_media("data:image/jpeg;base64,TWO="))

    assert db.media.delete(album.id, first.id) is True
    album, _ = _assert_aggregates(db, album.id)
    assert album.cover_url == second.url
    assert album.item_count == 1

    assert db.media.delete(album.id, second.id) is True
    album, _ = _assert_aggregates(db, album.id)
    assert album.cover_url == DEFAULT_ALBUM_COVER
    assert album.item_count == 0


def test_deleting_missing_media_returns_false(db):
    album = db.albums.create({"title": "Kyoto"})
    assert db.media.delete(album.id, "nope") is False


def test_media_for_missing_album_is_rejected(db):
    with pytest.raises(DanglingReferenceError):
        db.media.create("missing", _photo_media())
    assert db.media.list("missing") == []


def test_album_delete_removes_media_partition(db):
    album = db.albums.create({"title": "Kyoto"})
    db.media.create(album.id, _photo_media())

    assert db.albums.delete(album.id) is True
    assert db.kv_store.get_item(f"album_media_{album.id}") is None
    assert album.id not in db.media_store.album_ids()


def test_failed_album_write_rolls_back_media(flaky_db, flaky_store):
    album = flaky_db.albums.create({"title": "Kyoto"})
    flaky_store.failing.add("albums")

    with pytest.raises(StorageWriteError):
        flaky_db.media.create(album.id, _photo_media())

    assert flaky_db.media.list(album.id) == []
    assert flaky_db.albums.get_by_id(album.id).item_count == 0


def test_failed_album_write_restores_deleted_media(flaky_db, flaky_store):
    album = flaky_db.albums.create({"title": "Kyoto"})
    media = flaky_db.media.create(album.id, _photo_media())
    flaky_store.failing.add("albums")

    assert flaky_db.media.delete(album.id, media.id) is False
    assert [item.id for item in flaky_db.media.list(album.id)] == [media.id]
    _assert_aggregates(flaky_db, album.id)


def test_refresh_aggregates_repairs_drift(db):
    album = db.albums.create({"title": "Kyoto"})
    db.media.create(album.id, _photo_media())

    records = json.loads(db.kv_store.get_item("albums"))
    records[0]["itemCount"] = 42
    records[0]["coverUrl"] = "/gone.jpg"
    db.kv_store.set_item("albums", json.dumps(records))

    album = db.albums.refresh_aggregates(album.id)
    assert album.item_count == 1
    assert album.cover_url == "data:image/jpeg;base64,AAAA"


def test_upload_with_one_corrupt_photo(db, pipeline):
    album = db.albums.create({"title": "Kyoto"})
    service = MediaUploadService(db, pipeline)

    files = [photo("one.png"), corrupt_photo("two.jpg"), photo("three.png")]
    report = asyncio.run(service.upload(album.id, files))

    assert report.done
    assert report.success_count == 2
    assert report.failure_count == 1
    assert report.failures[0].file_name == "two.jpg"

    album, media = _assert_aggregates(db, album.id)
    assert album.item_count == 2
    assert album.cover_url == media[0].url
    assert sorted(item.title for item in media) == ["one.png", "three.png"]


def test_upload_stores_videos_with_placeholder_thumbnail(db, pipeline):
    album = db.albums.create({"title": "Kyoto"})
    clip = IncomingFile("clip.mp4", "video/mp4", b"\x00\x00\x00\x18ftypmp42")

    report = MediaUploadService(db, pipeline).upload_sync(album.id, [clip])

    assert report.success_count == 1
    media = db.media.list(album.id)[0]
    assert media.type == "video"
    assert media.thumbnail == "/video-thumbnail.jpg"
    assert media.url.startswith("data:video/mp4;base64,")
    assert db.albums.get_by_id(album.id).cover_url == DEFAULT_ALBUM_COVER


def test_upload_counts_storage_failures_per_file(flaky_db, flaky_store, pipeline):
    album = flaky_db.albums.create({"title": "Kyoto"})
    flaky_store.failing.add("album_media_")

    report = asyncio.run(
        MediaUploadService(flaky_db, pipeline).upload(album.id, [photo("a.png"), photo("b.png")])
    )

    assert report.done
    assert report.success_count == 0
    assert report.failure_count == 2
    album, _ = _assert_aggregates(flaky_db, album.id)
    assert album.item_count == 0


def test_upload_to_missing_album(db, pipeline):
    with pytest.raises(DanglingReferenceError):
        asyncio.run(MediaUploadService(db, pipeline).upload("missing", [photo()]))


def test_media_edit_only_touches_title_description_and_tags(db):
    album = db.albums.create({"title": "Kyoto"})
    first = db.media.create(album.id, _photo_media("data:image/jpeg;base64,ONE="))

    edited = db.media.update(
        first.model_copy(
            update={
                "url": "data:image/jpeg;base64,NEW=",
                "type": "video",
                "title": "Kiyomizu-dera",
                "tags": ["temple"],
            }
        )
    )

    assert edited.title == "Kiyomizu-dera"
    assert edited.tags == ["temple"]
    assert edited.url == first.url
    assert edited.type == "photo"
    album, _ = _assert_aggregates(db, album.id)
    assert album.cover_url == first.url


def test_media_edit_of_missing_item_returns_none(db):
    album = db.albums.create({"title": "Kyoto"})
    media = db.media.create(album.id, _photo_media())
    db.media.delete(album.id, media.id)
    assert db.media.update(media) is None


def test_album_edit_from_stale_copy_keeps_aggregates(db):
    stale = db.albums.create({"title": "Kyoto"})
    first = db.media.create(stale.id, _photo_media("data:image/jpeg;base64,ONE="))
    db.media.create(stale.id, _photo_media("data:image/jpeg;base64,TWO="))

    renamed = db.albums.update(stale.model_copy(update={"title": "Renamed"}))

    assert renamed.title == "Renamed"
    album, media = _assert_aggregates(db, stale.id)
    assert album.title == "Renamed"
    assert album.item_count == len(media) == 2
    assert album.cover_url == first.url


def test_album_edit_ignores_supplied_aggregates(db):
    album = db.albums.create({"title": "Kyoto"})
    db.albums.update({"id": album.id, "title": "Kyoto", "itemCount": 7, "coverUrl": "/x.jpg"})

    album, _ = _assert_aggregates(db, album.id)
    assert album.item_count == 0
    assert album.cover_url == DEFAULT_ALBUM_COVER
