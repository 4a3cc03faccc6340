# archive_backend/features/pages/renderer.py

# Turns an entry's content blocks into HTML for the entry page.
# Paragraph blocks hold editor HTML and are emitted as-is; every other value
# is escaped.

from html import escape
from typing import Any, Dict, List

from ...shared.media import normalize_embed_url, normalize_image_url, parse_json_content


def _attr(value: Any) -> str:
    return escape(str(value or ""), quote=True)


def _list_items(content: Any) -> List[str]:
    if isinstance(content, list):
        return [str(item) for item in content if str(item).strip()]
    return [line.strip() for line in str(content or "").splitlines() if line.strip()]


def render_block(block: Dict[str, Any], fallback_alt: str = "") -> str:
    block_type = block.get("type")
    content = block.get("content") or ""

    if block_type == "heading":
        return f'<h2 class="block-heading">{escape(str(content))}</h2>'

    if block_type == "paragraph":
        return f'<div class="block-paragraph">{content}</div>'

    if block_type == "image":
        parsed = parse_json_content(content)
        url = (parsed or {}).get("url") or (content if parsed is None else "")
        caption = (parsed or {}).get("caption") or ""
        figure = (
            f'<figure class="block-image"><img src="{_attr(normalize_image_url(url))}" '
            f'alt="{_attr(caption or fallback_alt)}" referrerpolicy="no-referrer">'
        )
        if caption:
            figure += f"<figcaption>{escape(caption)}</figcaption>"
        return figure + "</figure>"

    if block_type == "video":
        return (
            f'<div class="block-video"><iframe src="{_attr(normalize_embed_url(content))}" frameborder="0" '
            'allow="accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture" '
            "allowfullscreen></iframe></div>"
        )

    if block_type == "link":
        parsed = parse_json_content(content)
        if parsed is None:
            parsed = {"title": "Open Link", "url": content}
        return (
            f'<div class="block-link"><a href="{_attr(parsed.get("url") or "#")}" target="_blank" '
            f'rel="noopener noreferrer" class="external-link">{escape(str(parsed.get("title") or "Open Link"))}</a></div>'
        )

    if block_type == "pdf":
        src = _attr(normalize_embed_url(content))
        return (
            f'<div class="block-pdf"><iframe src="{src}" width="100%" height="600px"></iframe>'
            f'<a href="{src}" target="_blank" rel="noopener noreferrer" class="download-link">'
            "Open Document in New Tab</a></div>"
        )

    if block_type == "list":
        items = "".join(f"<li>{escape(item)}</li>" for item in _list_items(content))
        return f'<ul class="block-list">{items}</ul>'

    if block_type == "quote":
        return f'<blockquote class="block-quote">{escape(str(content))}</blockquote>'

    return ""


def render_blocks(blocks: List[Dict[str, Any]], fallback_alt: str = "") -> str:
    """Renders blocks in ascending 'order'."""
    ordered = sorted(blocks, key=lambda block: block.get("order") or 0)
    return "\n".join(render_block(block, fallback_alt) for block in ordered)
