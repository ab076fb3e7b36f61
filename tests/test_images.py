"""Tests for preview saving and file type detection."""

from furscrape.images import detect_image_format, infer_extension, save_previews, slugify
from furscrape.models import Submission

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32


def test_detect_image_format():
    assert detect_image_format(PNG_BYTES) == "png"
    assert detect_image_format(JPEG_BYTES) == "jpg"
    assert detect_image_format(b"plain text") is None


def test_infer_extension_falls_back_to_name():
    assert infer_extension(b"plain text", "https://d.facdn.net/art/x/story.txt?x=1") == "txt"
    assert infer_extension(b"plain text", "") == "bin"


def test_slugify():
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("???") == "untitled"


def test_save_previews(tmp_path, client, session):
    session.add("https://t.facdn.net/1@400-1.png", content_type="image/png", content=PNG_BYTES)
    good = Submission(client, 1, "https://t.facdn.net/1@400-1.png", None, "My Pic", "u")
    missing = Submission(client, 2, "https://t.facdn.net/2@400-1.png", None, "Gone", "u")

    saved = save_previews([good, missing], tmp_path / "out")

    assert [p.name for p in saved] == ["1-my-pic.png"]
    assert saved[0].read_bytes() == PNG_BYTES
