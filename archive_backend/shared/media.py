# archive_backend/shared/media.py

# URL rewriting for third-party media links.
# Google Drive share links become direct image-host URLs, and YouTube / Drive
# file links become iframe-embeddable URLs. Anything unrecognised passes through.

import json
import re
from typing import Any, Dict, List, Optional

DIRECT_IMAGE_HOST = "https://lh3.googleusercontent.com/d/"

_DRIVE_FILE_RE = re.compile(r"drive\.google\.com/file/d/([a-zA-Z0-9_-]+)")
_ID_PARAM_RE = re.compile(r"[?&]id=([a-zA-Z0-9_-]+)")
_PATH_ID_RE = re.compile(r"/d/([a-zA-Z0-9_-]+)")
_YOUTUBE_RE = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&\n?#]+)")


def normalize_image_url(url: Optional[str]) -> str:
    """Rewrites a Drive share link (or any ``id=`` link) to a direct image URL."""
    if not url:
        return ""
    value = str(url).strip()
    if not value:
        return ""

    if "lh3.googleusercontent.com/d/" in value:
        return value

    for pattern in (_DRIVE_FILE_RE, _ID_PARAM_RE, _PATH_ID_RE):
        match = pattern.search(value)
        if match:
            return f"{DIRECT_IMAGE_HOST}{match.group(1)}"

    return value


def normalize_embed_url(url: Optional[str]) -> str:
    """Rewrites a YouTube or Drive file link to its iframe-embeddable form."""
    if not url:
        return ""
    value = str(url).strip()

    match = _YOUTUBE_RE.search(value)
    if match:
        return f"https://www.youtube.com/embed/{match.group(1)}"

    match = _DRIVE_FILE_RE.search(value)
    if match:
        return f"https://drive.google.com/file/d/{match.group(1)}/preview"

    return value


def parse_json_content(content: Any) -> Optional[Dict[str, Any]]:
    """Block payloads for image/link blocks are JSON strings; returns the dict or None."""
    if isinstance(content, dict):
        return content
    if not isinstance(content, str) or not content.strip():
        return None
    try:
        parsed = json.loads(content)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def normalize_image_content(content: Any) -> Any:
    """Normalizes the url inside an image block, keeping its caption."""
    if not content:
        return content
    parsed = parse_json_content(content)
    if parsed is None:
        return normalize_image_url(str(content))
    if not parsed.get("url"):
        return content
    return json.dumps({**parsed, "url": normalize_image_url(parsed["url"])})


def normalize_body_content(blocks: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Applies media normalization to image, video and pdf blocks."""
    normalized = []
    for block in blocks or []:
        block_type = block.get("type")
        if block_type == "image":
            block = {**block, "content": normalize_image_content(block.get("content"))}
        elif block_type in ("video", "pdf") and isinstance(block.get("content"), str):
            block = {**block, "content": normalize_embed_url(block["content"])}
        normalized.append(block)
    return normalized
