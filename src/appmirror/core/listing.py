# AppMirror — Listing pages: category, hot, latest, developer, search
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import json
import logging
import re
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple, Union
from urllib.parse import quote, quote_plus, unquote, urlparse

from ..config import Settings
from ..models import AppSummary, CategoryLink, CategoryMenu, DeveloperInfo, ListingPage
from ..utils.text import first_number, format_review_count, review_count_to_number, clean_text
from ..utils.urls import app_link, category_link, extract_slug_and_package, normalize_link, slugify
from .parser import attr_of, first_all, first_match, image_src, parse_html, text_of
from .session import XHR_HEADERS, Fetcher, TransportError


logger = logging.getLogger(__name__)

LISTING_TIMEOUT = (10, 20)
DEVELOPER_TIMEOUT = (10, 25)
HOT_TIMEOUT = (10, 15)
SEARCH_TIMEOUT = (5, 15)
SUGGEST_TIMEOUT = (3, 10)

KINDS = ("apps", "games")


class PageKind(str, Enum):
	CATEGORY = "category"
	HOT = "hot"
	LATEST = "latest"
	DEVELOPER = "developer"
	SEARCH = "search"


TEMPLATE_ITEMS = 'div[class*="list-template"] > div[class*="list"]'
ICON_ITEMS = 'div[class*="list"]:has(div[class="icon"]:is(a > *))'

ITEM_SELECTORS: Dict[PageKind, Tuple[str, ...]] = {
	PageKind.CATEGORY: ('div[class*="list-item"], div[class*="category_top_list"]', ICON_ITEMS),
	PageKind.HOT: (TEMPLATE_ITEMS, 'div[class="list"]', ICON_ITEMS),
	PageKind.LATEST: (ICON_ITEMS, TEMPLATE_ITEMS),
	PageKind.DEVELOPER: (ICON_ITEMS, TEMPLATE_ITEMS),
	PageKind.SEARCH: (TEMPLATE_ITEMS, 'div[class="list"]', ICON_ITEMS),
}
TITLE_SELECTORS = ('div[class*="title"]', 'p[class*="title"]', 'span[class*="title"]')
RATING_SELECTORS = ('span[class*="rating"]', 'div[class*="rating"]')
REVIEW_SELECTORS = ('span[class*="review"]', 'div[class*="review"]')
REVIEW_RE = re.compile(r"[\d.,]+[KMBT]?\+?", re.I)


def extract_listing(
	html: str,
	kind: PageKind,
	settings: Settings,
	limit: Optional[int] = None,
) -> List[AppSummary]:
	"""App summaries in document order, one per package name.

	limit counts kept items, so duplicates and package-less nodes do not use it up.
	"""
	soup = parse_html(html)
	nodes = first_all(soup, ITEM_SELECTORS[kind])
	seen: Set[str] = set()
	apps: List[AppSummary] = []
	for node in nodes:
		if limit is not None and len(apps) >= limit:
			break
		summary = _summary_from_node(node, settings, seen)
		if summary is not None:
			apps.append(summary)
	return apps


def _summary_from_node(node, settings: Settings, seen: Set[str]) -> Optional[AppSummary]:
	anchor = node if node.name == "a" else node.find("a")
	href = attr_of(anchor, "href")
	if not href or href == "#":
		return None
	slug, package = extract_slug_and_package(href)
	if not package or package in seen:
		return None
	seen.add(package)

	title = text_of(first_match(node, TITLE_SELECTORS)) or attr_of(anchor, "title") or package
	icon = image_src(first_match(node, ('div[class*="icon"] img',)))
	rating = first_number(text_of(first_match(node, RATING_SELECTORS)), default="0")
	review_text = text_of(first_match(node, REVIEW_SELECTORS))
	m = REVIEW_RE.search(review_text)
	review_raw = m.group(0) if m else review_text
	user_slug = slugify(slug) or slugify(title) or "app"
	return AppSummary(
		title=title,
		icon_url=normalize_link(icon, settings.source_base_url, settings.user_base_url),
		rating=rating,
		review_count_raw=review_raw,
		review_count_formatted=format_review_count(review_raw),
		review_count_numeric=review_count_to_number(review_raw),
		package_name=package,
		slug=user_slug,
		internal_link=app_link(user_slug, package),
		description=text_of(first_match(node, ('p[class*="short_description"]',))),
		developer=text_of(first_match(node, ('p[class*="developer"]',))),
	)


def fetch_listing_html(
	fetcher: Fetcher,
	url: str,
	page: int = 1,
	timeout=LISTING_TIMEOUT,
) -> Union[str, TransportError]:
	"""Full page for page 1; later pages come back as JSON {"html": fragment}."""
	if page <= 1:
		res = fetcher.get(url, timeout=timeout)
		return res if isinstance(res, TransportError) else res.body
	res = fetcher.get(url, headers=XHR_HEADERS, timeout=timeout)
	if isinstance(res, TransportError):
		return res
	try:
		payload = json.loads(res.body)
	except ValueError:
		logger.warning("Listing page %s is not JSON", url)
		return TransportError(url, "Invalid JSON response from source")
	fragment = payload.get("html", "") if isinstance(payload, dict) else ""
	return "<div>" + (fragment or "") + "</div>"


def _with_page(url: str, page: int) -> str:
	return f"{url}?page={page}" if page > 1 else url


def _listing(
	fetcher: Fetcher,
	settings: Settings,
	url: str,
	kind: PageKind,
	page: int = 1,
	limit: Optional[int] = None,
	timeout=LISTING_TIMEOUT,
) -> ListingPage:
	html = fetch_listing_html(fetcher, url, page=page, timeout=timeout)
	if isinstance(html, TransportError):
		return ListingPage(page=page, error=html.message)
	return ListingPage(page=page, apps=extract_listing(html, kind, settings, limit=limit))


def category_url(settings: Settings, main: str, sub: str = "", page: int = 1) -> str:
	if main.lower() in KINDS and not sub:
		url = f"{settings.source_base_url}/{main.lower()}"
	else:
		url = settings.source_base_url + category_link(main, sub)
	return _with_page(url, page)


def fetch_category(fetcher: Fetcher, settings: Settings, main: str, sub: str = "", page: int = 1) -> ListingPage:
	main = (main or "").strip()
	if not main:
		return ListingPage(page=page, error="No category specified.")
	url = category_url(settings, main, (sub or "").strip(), page)
	return _listing(fetcher, settings, url, PageKind.CATEGORY, page=page)


def fetch_hot(fetcher: Fetcher, settings: Settings, kind: str = "apps", limit: Optional[int] = None) -> ListingPage:
	kind = kind if kind in KINDS else "apps"
	url = f"{settings.source_base_url}/{kind}"
	return _listing(fetcher, settings, url, PageKind.HOT, limit=limit or settings.listing_limit, timeout=HOT_TIMEOUT)


def fetch_latest(
	fetcher: Fetcher,
	settings: Settings,
	kind: str = "apps",
	page: int = 1,
	limit: Optional[int] = None,
) -> ListingPage:
	kind = kind if kind in KINDS else "apps"
	url = _with_page(f"{settings.source_base_url}/new-{kind}", page)
	return _listing(fetcher, settings, url, PageKind.LATEST, page=page, limit=limit)


def extract_developer_info(html: str, settings: Settings, fallback_name: str = "") -> DeveloperInfo:
	soup = parse_html(html)
	intro = soup.select_one('div[class*="developer_introduce"]')
	banner = first_match(soup, ('div[class*="developer_banner"] img',))
	icon = first_match(intro, ('div[class*="icon"] > img',))
	name = text_of(first_match(intro, ("h1",))) or fallback_name
	return DeveloperInfo(
		name=name,
		icon_url=normalize_link(image_src(icon), settings.source_base_url, settings.user_base_url),
		banner_url=normalize_link(image_src(banner), settings.source_base_url, settings.user_base_url),
		description=text_of(first_match(intro, ("p",))),
	)


def fetch_developer(fetcher: Fetcher, settings: Settings, developer: str, page: int = 1) -> ListingPage:
	developer = unquote((developer or "").strip())
	if not developer:
		return ListingPage(page=page, error="No developer specified.")
	url = f"{settings.source_base_url}/developer/{quote(developer, safe='')}"
	html = fetch_listing_html(fetcher, _with_page(url, page), page=page, timeout=DEVELOPER_TIMEOUT)
	if isinstance(html, TransportError):
		return ListingPage(page=page, error=html.message)
	result = ListingPage(page=page, apps=extract_listing(html, PageKind.DEVELOPER, settings))
	if page <= 1:
		result.developer = extract_developer_info(html, settings, fallback_name=developer)
	return result


def clean_keyword(keyword: str, max_length: int = 40) -> str:
	keyword = re.sub(r"<[^>]*>", "", keyword or "")
	return clean_text(keyword)[:max_length].strip()


def search(
	fetcher: Fetcher,
	settings: Settings,
	keyword: str,
	limit: Optional[int] = None,
	timeout=SEARCH_TIMEOUT,
) -> ListingPage:
	keyword = clean_keyword(keyword, settings.search_keyword_max)
	if not keyword:
		return ListingPage()
	url = f"{settings.source_base_url}/search?q={quote_plus(keyword)}"
	html = fetch_listing_html(fetcher, url, timeout=timeout)
	if isinstance(html, TransportError):
		return ListingPage(error=html.message)
	result = ListingPage(apps=extract_listing(html, PageKind.SEARCH, settings, limit=limit))
	if not result.apps:
		soup = parse_html(html)
		words = [text_of(a) for a in soup.select('div[class*="related-searches"] a')]
		result.related_keywords = [w for w in words if w]
	return result


def suggest(fetcher: Fetcher, settings: Settings, keyword: str) -> List[Dict[str, str]]:
	"""Autocomplete entries: title, icon and internal url of the top search hits."""
	result = search(fetcher, settings, keyword, limit=settings.suggest_limit, timeout=SUGGEST_TIMEOUT)
	return [{"title": a.title, "icon": a.icon_url, "url": a.internal_link} for a in result.apps]


def extract_category_menu(html: str) -> CategoryMenu:
	soup = parse_html(html)
	sections = soup.select('div[class="category-page"]')
	menu = CategoryMenu()
	for target, section in zip((menu.apps, menu.games), sections[:2]):
		for a in section.select('div[class="category-tag"] > ul > li > a'):
			parts = [p for p in urlparse(attr_of(a, "href")).path.split("/") if p]
			name = text_of(a)
			if len(parts) < 3 or not name:
				continue
			target.append(CategoryLink(name=name, link=category_link(parts[1], parts[2]), slug=parts[2]))
	return menu


def fetch_categories(fetcher: Fetcher, settings: Settings) -> CategoryMenu:
	res = fetcher.get(f"{settings.source_base_url}/category", timeout=LISTING_TIMEOUT)
	if isinstance(res, TransportError):
		return CategoryMenu(error=res.message)
	return extract_category_menu(res.body)
