"""Tests for the downscale / re-encode pipeline."""

import asyncio
import io

from PIL import Image

from conftest import corrupt_photo, make_image_bytes, photo
from tripkeeper.processing.media_pipeline import (
    IncomingFile,
    classify,
    parse_data_url,
    scaled_size,
)


def _decoded_size(data_url):
    mime_type, data = parse_data_url(data_url)
    assert mime_type == "image/jpeg"
    with Image.open(io.BytesIO(data)) as img:
        return img.format, img.size


def test_classify():
    assert classify("image/heic") == "photo"
    assert classify("video/mp4") == "video"
    assert classify("") == "video"


def test_scaled_size_keeps_small_images():
    assert scaled_size(640, 480) == (640, 480)
    assert scaled_size(800, 800) == (800, 800)


def test_scaled_size_bounds_longest_side():
    assert scaled_size(1600, 1200) == (800, 600)
    assert scaled_size(1200, 1600) == (600, 800)
    assert scaled_size(4000, 10) == (800, 2)


def test_scaled_size_rounds_half_up():
    assert scaled_size(1600, 1001) == (800, 501)


def test_large_photo_is_downscaled_to_jpeg(pipeline):
    result = pipeline.process_file(
        IncomingFile("wide.png", "image/png", make_image_bytes(2000, 1000))
    )
    assert result.success
    assert result.type == "photo"
    assert (result.width, result.height) == (800, 400)
    assert result.thumbnail == result.url
    assert _decoded_size(result.url) == ("JPEG", (800, 400))


def test_small_photo_keeps_its_size(pipeline):
    result = pipeline.process_file(photo(width=120, height=90))
    assert result.success
    assert _decoded_size(result.url) == ("JPEG", (120, 90))


def test_transparent_png_is_flattened(pipeline):
    buffer = io.BytesIO()
    Image.new("RGBA", (10, 10), (0, 0, 0, 0)).save(buffer, format="PNG")
    result = pipeline.process_file(IncomingFile("alpha.png", "image/png", buffer.getvalue()))
    assert result.success


def test_video_passes_through(pipeline):
    result = pipeline.process_file(IncomingFile("clip.mp4", "video/mp4", b"\x00\x01\x02"))
    assert result.success
    assert result.type == "video"
    assert result.url == "data:video/mp4;base64,AAEC"
    assert result.thumbnail == "/video-thumbnail.jpg"


def test_corrupt_photo_fails_without_raising(pipeline):
    result = pipeline.process_file(corrupt_photo())
    assert not result.success
    assert result.error
    assert result.url == ""


def test_batch_isolates_failures(pipeline):
    files = [photo("a.png"), corrupt_photo("b.jpg"), photo("c.png"), corrupt_photo("d.jpg")]
    results = asyncio.run(pipeline.process_batch(files))

    assert len(results) == 4
    assert sorted(r.file_name for r in results if r.success) == ["a.png", "c.png"]
    assert sorted(r.file_name for r in results if not r.success) == ["b.jpg", "d.jpg"]


def test_batch_result_handler_can_mark_failure(pipeline):
    seen = []

    def handler(result):
        seen.append(result.file_name)
        if result.file_name == "a.png":
            return result.model_copy(update={"success": False, "error": "rejected"})
        return None

    results = asyncio.run(pipeline.process_batch([photo("a.png"), photo("b.png")], on_result=handler))
    assert sorted(seen) == ["a.png", "b.png"]
    assert [r.file_name for r in results if not r.success] == ["a.png"]


def test_batch_survives_a_raising_handler(pipeline):
    def handler(result):
        raise RuntimeError("boom")

    results = asyncio.run(pipeline.process_batch([photo("a.png")], on_result=handler))
    assert len(results) == 1
    assert not results[0].success
    assert results[0].error == "boom"


def test_empty_batch(pipeline):
    assert asyncio.run(pipeline.process_batch([])) == []
