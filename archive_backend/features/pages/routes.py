# archive_backend/features/pages/routes.py

# Server-rendered HTML pages: home grid, category, sub-type, entry and search.
# Form pages (login, register, profile, contribute, admin editors) get minimal
# shells; their work is done through the JSON API. Access to gated paths is
# decided earlier by SessionGateMiddleware.

from html import escape
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse

from ...models.archive_item import CATEGORY_LABELS, CATEGORY_MODELS, category_slug, sub_type_of
from ...shared.errors import NotFoundError
from ..archive import resolver
from ..archive import search as archive_search
from ..archive import service as archive_service
from .renderer import render_blocks

router = APIRouter(include_in_schema=False)

SITE_TITLE = "Chilahati Archive"


def layout(title: str, body: str, status_code: int = 200) -> HTMLResponse:
    page = (
        "<!DOCTYPE html><html lang=\"en\"><head><meta charset=\"utf-8\">"
        "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">"
        f"<title>{escape(title)} | {SITE_TITLE}</title></head><body>"
        f'<nav class="navbar"><a href="/">{SITE_TITLE}</a> '
        '<form action="/search" method="get" class="nav-search"><input name="q" placeholder="Search"></form></nav>'
        f"<main>{body}</main>"
        f'<footer class="footer"><p>{SITE_TITLE}</p></footer>'
        "</body></html>"
    )
    return HTMLResponse(page, status_code=status_code)


def not_found(message: str) -> HTMLResponse:
    return layout("Not found", f"<h2>{escape(message)}</h2>", status_code=404)


def item_cards(items: List[Dict[str, Any]]) -> str:
    if not items:
        return "<p class=\"empty\">No entries yet.</p>"
    cards = []
    for item in items:
        thumb = ""
        if item.get("thumbnail"):
            thumb = f'<img src="{escape(item["thumbnail"], quote=True)}" alt="" referrerpolicy="no-referrer">'
        cards.append(
            f'<a class="card" href="/entry/{quote(str(item.get("slug", "")))}">{thumb}'
            f'<h3>{escape(str(item.get("title", "")))}</h3></a>'
        )
    return f'<div class="grid">{"".join(cards)}</div>'


@router.get("/", response_class=HTMLResponse)
async def home_page():
    cards = "".join(
        f'<a class="card" href="/archive/{category_slug(key)}"><h3>{escape(CATEGORY_LABELS[key])}</h3></a>'
        for key in CATEGORY_MODELS
    )
    body = (
        f"<header class=\"hero\"><h1>{SITE_TITLE}</h1>"
        "<p class=\"subtitle\">Gateway to the North &bull; Preserving Our History &amp; People</p></header>"
        f'<div class="grid">{cards}</div>'
    )
    return layout("Home", body)


@router.get("/archive/{category}", response_class=HTMLResponse)
async def category_page(category: str):
    try:
        category_key = archive_service.require_category(category)
    except NotFoundError as e:
        return not_found(e.detail)

    view = await resolver.resolve_category_view(category_key)
    if view["type"] == "sub-categories":
        links = "".join(
            f'<a class="card" href="/archive/{category_slug(category_key)}/{quote(sub_type)}">'
            f"<h3>{escape(sub_type)}</h3></a>"
            for sub_type in view["subTypes"]
        )
        body = f'<h1>{escape(view["title"])}</h1><div class="grid">{links}</div>'
    else:
        body = f'<h1>{escape(view["title"])}</h1>{item_cards(view["items"])}'
    return layout(view["title"], body)


@router.get("/archive/{category}/{sub_type}", response_class=HTMLResponse)
async def sub_type_page(category: str, sub_type: str):
    try:
        category_key = archive_service.require_category(category)
    except NotFoundError as e:
        return not_found(e.detail)

    view = await resolver.list_sub_type_items(category_key, sub_type)
    body = (
        f'<p><a href="/archive/{category_slug(category_key)}">&larr; Back</a></p>'
        f'<h1>{escape(view["title"])}</h1>{item_cards(view["items"])}'
    )
    return layout(view["title"], body)


@router.get("/entry/{slug}", response_class=HTMLResponse)
async def entry_page(slug: str):
    try:
        entry = await archive_service.get_entry(slug)
    except NotFoundError as e:
        return not_found(e.detail)

    title = str(entry.get("title", ""))
    meta = [f'<span class="category">{escape(CATEGORY_LABELS.get(entry.get("category"), str(entry.get("category"))))}</span>']
    sub_type = sub_type_of(entry)
    if sub_type:
        meta.append(f'<span class="sub-type">{escape(sub_type)}</span>')
    if entry.get("author"):
        meta.append(f'<span class="author">By {escape(entry["author"].get("username", ""))}</span>')

    thumbnail = ""
    if entry.get("thumbnail"):
        thumbnail = f'<img class="thumbnail" src="{escape(entry["thumbnail"], quote=True)}" alt="Thumbnail" referrerpolicy="no-referrer">'

    tags = "".join(f'<span class="tag">{escape(tag)}</span>' for tag in entry.get("tags") or [])
    body = (
        f"<article><h1>{escape(title)}</h1><p class=\"meta\">{' '.join(meta)}</p>{thumbnail}"
        f'<div class="entry-body">{render_blocks(entry.get("bodyContent") or [], title)}</div>'
        f'<div class="tags">{tags}</div></article>'
    )
    return layout(title, body)


@router.get("/search", response_class=HTMLResponse)
async def search_page(q: Optional[str] = Query(None), page: Optional[str] = Query(None)):
    result = await archive_search.search_items(q, page)
    query = result["query"]
    body = f"<h1>Search results for &quot;{escape(query)}&quot;</h1>" if query else "<h1>Search</h1>"
    body += f'<p>{result["totalResults"]} results</p>{item_cards(result["results"])}'
    if result["totalPages"] > 1:
        links = []
        for number in range(1, result["totalPages"] + 1):
            css = ' class="active"' if number == result["currentPage"] else ""
            links.append(f'<a href="/search?q={quote(query)}&amp;page={number}"{css}>{number}</a>')
        pages = "".join(links)
        body += f'<nav class="pagination">{pages}</nav>'
    return layout("Search", body)


# --- Form page shells ---

def shell(title: str, api_path: str) -> HTMLResponse:
    return layout(title, f'<h1>{escape(title)}</h1><div id="app" data-api="{escape(api_path, quote=True)}"></div>')


@router.get("/login", response_class=HTMLResponse)
async def login_page():
    return shell("Login", "/api/auth/login")


@router.get("/register", response_class=HTMLResponse)
async def register_page():
    return shell("Register", "/api/auth/register")


@router.get("/forgot-password", response_class=HTMLResponse)
async def forgot_password_page():
    return shell("Forgot Password", "/api/auth/forgot-password")


@router.get("/reset-password/{token}", response_class=HTMLResponse)
async def reset_password_page(token: str):
    return shell("Reset Password", f"/api/auth/reset-password/{quote(token)}")


@router.get("/verify/{token}", response_class=HTMLResponse)
async def verify_page(token: str):
    return shell("Verify Email", f"/api/auth/verify/{quote(token)}")


@router.get("/profile", response_class=HTMLResponse)
async def profile_page():
    return shell("Profile", "/api/user")


@router.get("/contribute", response_class=HTMLResponse)
async def contribute_page():
    return shell("Contribute", "/api/contribute")


@router.get("/admin", response_class=HTMLResponse)
@router.get("/admin/content-management", response_class=HTMLResponse)
async def admin_content_page():
    return shell("Content Management", "/api/admin/content-management")


@router.get("/admin/add", response_class=HTMLResponse)
async def admin_add_page():
    return shell("Add Archive Item", "/api/admin/add")


@router.get("/admin/edit/{item_id}", response_class=HTMLResponse)
async def admin_edit_page(item_id: str):
    return shell("Edit Archive Item", f"/api/admin/{quote(item_id)}")
