"""
Media URL normalizer tests.

Drive share links and id= links must resolve to the same direct image URL;
YouTube and Drive file links become embeddable iframe URLs.
"""

import json

import pytest

from archive_backend.shared.media import (
    DIRECT_IMAGE_HOST,
    normalize_body_content,
    normalize_embed_url,
    normalize_image_content,
    normalize_image_url,
)


class TestNormalizeImageUrl:
    """Image links to the direct image host"""

    @pytest.mark.parametrize("url", [
        "https://drive.google.com/file/d/1AbC_xyz-9/view?usp=sharing",
        "https://drive.google.com/open?id=1AbC_xyz-9",
        "https://drive.google.com/uc?export=view&id=1AbC_xyz-9",
    ])
    def test_drive_links_share_one_direct_url(self, url):
        assert normalize_image_url(url) == f"{DIRECT_IMAGE_HOST}1AbC_xyz-9"

    def test_direct_host_url_is_unchanged(self):
        url = f"{DIRECT_IMAGE_HOST}1AbC_xyz-9"
        assert normalize_image_url(url) == url

    def test_other_urls_pass_through(self):
        assert normalize_image_url("https://example.com/photos/station.jpg") == "https://example.com/photos/station.jpg"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_values_become_empty_string(self, value):
        assert normalize_image_url(value) == ""


class TestNormalizeEmbedUrl:
    """Video and document links to iframe URLs"""

    def test_youtube_watch_link(self):
        assert normalize_embed_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=10s") == \
            "https://www.youtube.com/embed/dQw4w9WgXcQ"

    def test_youtube_short_link(self):
        assert normalize_embed_url("https://youtu.be/dQw4w9WgXcQ") == "https://www.youtube.com/embed/dQw4w9WgXcQ"

    def test_drive_file_link(self):
        assert normalize_embed_url("https://drive.google.com/file/d/FILE123/view") == \
            "https://drive.google.com/file/d/FILE123/preview"

    def test_unknown_link_passes_through(self):
        assert normalize_embed_url("https://vimeo.com/12345") == "https://vimeo.com/12345"


class TestBlockNormalization:
    """Normalization applied to stored content blocks"""

    def test_image_json_content_keeps_caption(self):
        content = json.dumps({"url": "https://drive.google.com/open?id=IMG1", "caption": "Old station"})
        normalized = json.loads(normalize_image_content(content))
        assert normalized == {"url": f"{DIRECT_IMAGE_HOST}IMG1", "caption": "Old station"}

    def test_plain_image_url_content(self):
        assert normalize_image_content("https://drive.google.com/file/d/IMG2/view") == f"{DIRECT_IMAGE_HOST}IMG2"

    def test_only_media_blocks_are_rewritten(self):
        blocks = [
            {"type": "paragraph", "content": "See https://drive.google.com/file/d/X/view", "order": 0},
            {"type": "video", "content": "https://youtu.be/abc123", "order": 1},
            {"type": "pdf", "content": "https://drive.google.com/file/d/DOC9/view", "order": 2},
        ]
        normalized = normalize_body_content(blocks)

        assert normalized[0]["content"] == blocks[0]["content"]
        assert normalized[1]["content"] == "https://www.youtube.com/embed/abc123"
        assert normalized[2]["content"] == "https://drive.google.com/file/d/DOC9/preview"
