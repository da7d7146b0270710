# AppMirror — App detail page extraction
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
import re
from typing import Dict, List, Optional, Set, Tuple, Union
from urllib.parse import quote_plus

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, Tag

from ..config import Settings
from ..models import AppDetail, AppSummary, ExtractionError, MoreInfoItem
from ..utils.text import first_number, format_review_count, review_count_to_number
from ..utils.urls import app_link, developer_link, extract_slug_and_package, normalize_link, slugify
from .parser import (
	attr_of,
	definition_value,
	first_match,
	image_src,
	inner_html,
	labelled_value,
	next_paragraph_after,
	parse_html,
	text_of,
)
from .validators import is_valid_version_string, strip_label, strip_version_prefix


logger = logging.getLogger(__name__)

CONTAINER_SELECTORS = (
	'div[class*="detail_banner"]',
	'div[class*="app_info"]',
	'section[class*="head-widget"]',
)
ICON_SELECTORS = ('img[class*="icon"]', 'div[class*="icon"] > img')
RATING_SELECTORS = (
	'span[class*="rating"] span[class*="star_icon"]',
	'div[class*="stars"][data-rating]',
	'[class*="score_num"]',
	'div[class*="score"] span.num',
)
REVIEW_SELECTORS = (
	'span[class*="review_icon"]',
	'a[href="#reviews"] span[class*="num"]',
	'[class*="num_reviews"]',
	'[class*="reviews_count"]',
)
VERSION_SELECTORS = ('span[style*="color: #0284fe"]', 'span:-soup-contains("Version:")')
UPDATE_SELECTORS = ('span:-soup-contains("Update on:")', 'span:-soup-contains("Updated:")')
DEVELOPER_SELECTORS = (
	'span[itemprop="publisher"]',
	'a[class*="developers"] span',
	'a[href*="/developer/"] span',
)
DESCRIPTION_SELECTORS = (
	'div[class*="description"] div[class*="content"]',
	'div[itemprop="description"]',
	'div[class*="description_wrap"]',
)
SCREENSHOT_SELECTORS = (
	'div[class*="screenshot"] img',
	'[class*="screenshots"] img',
	'[class*="app_screenshots"] img',
)
RELATED_CONTAINER_SELECTOR = 'div[class*="detail_related"], div[class*="related"]'
RELATED_ITEM_SELECTOR = 'a[class*="item"], li > a, div[class*="card"] > a'

CURRENCY_SYMBOLS = {"$": "USD", "€": "EUR", "£": "GBP", "¥": "JPY", "₹": "INR"}
PRICE_RE = re.compile(r"(?:Price:)?\s*([$€£¥₹])?\s*(\d[\d.,]*)")
DESCRIPTION_HEADINGS = ("Editor's Review", "About", "What's New")
BARE_URL_RE = re.compile(r"https?://[^\s<>\"']+")
READ_MORE_RE = re.compile(r"read\s+more", re.I)
PLAY_STORE_URL = "https://play.google.com/store/apps/details?id="


def _clean_rating(value: str) -> str:
	number = first_number(value)
	if not number:
		return ""
	try:
		return f"{float(number):.1f}"
	except ValueError:
		return number


def _price_number(raw: str) -> str:
	"""'1,299.99' -> '1299.99', '2,99' -> '2.99'"""
	raw = raw.rstrip(".,")
	if "," in raw and "." not in raw and raw.count(",") == 1 and len(raw.split(",")[1]) == 2:
		return raw.replace(",", ".")
	return raw.replace(",", "")


def extract_price(soup: BeautifulSoup, container: Tag) -> Tuple[str, str]:
	"""(price, ISO currency); free or unknown prices are ('0', '')."""
	price_meta = first_match(soup, ('div[class*="new_detail_price"] meta[itemprop="price"]', 'meta[itemprop="price"]'))
	currency_meta = first_match(soup, ('meta[itemprop="priceCurrency"]',))
	price = attr_of(price_meta, "content")
	currency = attr_of(currency_meta, "content")
	if not price:
		text = text_of(first_match(container, ('[class*="price"]',)))
		if text and "free" not in text.lower():
			m = PRICE_RE.search(text)
			if m:
				price = _price_number(m.group(2))
				currency = CURRENCY_SYMBOLS.get(m.group(1) or "", currency)
	try:
		if not price or float(price) <= 0:
			return "0", ""
	except ValueError:
		return "0", ""
	return price, currency


def _more_info_pairs(soup: BeautifulSoup) -> List[Tuple[str, Tag]]:
	pairs: List[Tuple[str, Tag]] = []
	for dt in soup.select('div[class*="detail_more_info"] dl dt'):
		dd = dt.find_next_sibling("dd")
		if dd is not None:
			pairs.append((text_of(dt), dd))
	for title in soup.select('div.details-section-contents div.meta-info > div.title'):
		value = title.find_next_sibling("div", class_="description")
		if value is not None:
			pairs.append((text_of(title), value))
	if pairs:
		return pairs
	for item in soup.select('div[class*="detail_more_info"] div[class*="item"], div.app-info div.info'):
		paras = item.find_all("p", recursive=False)
		if len(paras) >= 2:
			pairs.append((text_of(paras[0]), paras[1]))
	return pairs


def extract_more_info(soup: BeautifulSoup, settings: Settings) -> Dict[str, MoreInfoItem]:
	"""Label -> {text, link} from either the <dl> or the paragraph-pair layout."""
	info: Dict[str, MoreInfoItem] = {}
	for label, value in _more_info_pairs(soup):
		label = label.rstrip(":").strip()
		if not label or label in info:
			continue
		a = value.find("a", href=True)
		link = normalize_link(attr_of(a, "href"), settings.source_base_url, settings.user_base_url) if a else ""
		info[label] = MoreInfoItem(text=text_of(value), link=link)
	return info


def _info_lookup(info: Dict[str, MoreInfoItem], *labels: str) -> Optional[MoreInfoItem]:
	lowered = {k.lower(): v for k, v in info.items()}
	for label in labels:
		item = lowered.get(label.lower())
		if item is not None and (item.text or item.link):
			return item
	return None


def _backfill(detail: AppDetail, info: Dict[str, MoreInfoItem]) -> None:
	item = _info_lookup(info, "Package Name", "Package")
	if item and not detail.package_name:
		detail.package_name = item.text
	item = _info_lookup(info, "Category")
	if item and not detail.category_name:
		detail.category_name = item.text
		detail.category_link = detail.category_link or item.link
	item = _info_lookup(info, "Update Date", "Updated", "Update on")
	if item and not detail.update_date_raw:
		detail.update_date_raw = item.text
	item = _info_lookup(info, "Latest Version", "Version")
	if item and not detail.version_name:
		version = strip_version_prefix(item.text)
		if is_valid_version_string(version):
			detail.version_name = version
	item = _info_lookup(info, "Requirements", "Requires Android")
	if item and not detail.android_requirement:
		detail.android_requirement = item.text
	item = _info_lookup(info, "Installs")
	if item and not detail.installs:
		detail.installs = item.text
	item = _info_lookup(info, "Content Rating")
	if item and not detail.content_rating:
		detail.content_rating = item.text
	item = _info_lookup(info, "Offered By", "Developer")
	if item and not detail.developer_name:
		detail.developer_name = item.text
		detail.developer_link = developer_link(item.text) if item.text else item.link
	item = _info_lookup(info, "Size")
	if item and not detail.file_size:
		detail.file_size = item.text
	item = _info_lookup(info, "Google Play", "Get it on Google Play")
	if item and not detail.play_store_link and "play.google.com" in item.link:
		detail.play_store_link = item.link


def _apply_play_store(detail: AppDetail) -> None:
	if not detail.package_name:
		return
	detail.play_store_link = PLAY_STORE_URL + quote_plus(detail.package_name)
	for label in list(detail.more_info):
		if "google play" in label.lower():
			detail.more_info[label] = MoreInfoItem(text="View on Google Play", link=detail.play_store_link)


def _linkify_text(soup: BeautifulSoup, node: NavigableString) -> None:
	text = str(node)
	pieces = []
	pos = 0
	for m in BARE_URL_RE.finditer(text):
		if m.start() > pos:
			pieces.append(NavigableString(text[pos:m.start()]))
		a = soup.new_tag("a", href=m.group(0), target="_blank", rel="nofollow noopener")
		a.string = m.group(0)
		pieces.append(a)
		pos = m.end()
	if not pieces:
		return
	if pos < len(text):
		pieces.append(NavigableString(text[pos:]))
	for piece in pieces:
		node.insert_before(piece)
	node.extract()


def process_description(html: str, settings: Settings) -> str:
	"""Clean description HTML for re-rendering under the user domain."""
	if not html:
		return ""
	soup = parse_html("<div id=\"desc-root\">" + html + "</div>")
	root = soup.find("div", id="desc-root")
	if root is None:
		return ""
	source = settings.source_domain.lower()
	for a in root.find_all("a"):
		if source in attr_of(a, "href").lower() and READ_MORE_RE.search(a.get_text()):
			a.decompose()
	for node in list(root.find_all(string=READ_MORE_RE)):
		if isinstance(node, Comment):
			continue
		node.replace_with(READ_MORE_RE.sub("", str(node)))

	source_url_re = re.compile(r"https?://(?:www\.)?" + re.escape(settings.source_domain), re.I)
	for a in root.find_all("a", href=True):
		a["href"] = source_url_re.sub(settings.user_base_url, a["href"])
	for node in list(root.find_all(string=True)):
		if isinstance(node, Comment) or node.find_parent("a") is not None:
			continue
		replaced = source_url_re.sub(settings.user_base_url, str(node))
		if replaced != str(node):
			new_node = NavigableString(replaced)
			node.replace_with(new_node)
			node = new_node
		if BARE_URL_RE.search(str(node)):
			_linkify_text(soup, node)

	for p in root.find_all("p"):
		strong = p.find("strong")
		if strong is None or text_of(p) != text_of(strong):
			continue
		heading = text_of(strong)
		for name in DESCRIPTION_HEADINGS:
			if heading.startswith(name):
				p.clear()
				p.string = name
				p["class"] = "desc-heading"
				break
	return inner_html(root)


def extract_screenshots(soup: BeautifulSoup, settings: Settings) -> List[str]:
	shots: List[str] = []
	for sel in SCREENSHOT_SELECTORS:
		for img in soup.select(sel):
			url = normalize_link(image_src(img), settings.source_base_url, settings.user_base_url)
			if url and url not in shots:
				shots.append(url)
		if shots:
			break
	return shots


def _related_entry(a: Tag, settings: Settings) -> Optional[AppSummary]:
	href = attr_of(a, "href")
	if not href or href == "#":
		return None
	slug, package = extract_slug_and_package(href)
	title = attr_of(a, "title") or text_of(
		first_match(a, ('div[class*="text"] > p', '[class*="title"]', "span.title"))
	)
	if not title or not package:
		return None
	paras = a.select('div[class*="text"] > p')
	description = text_of(paras[1]) if len(paras) > 1 else text_of(
		first_match(a, ('[class*="description"]', '[class*="subtitle"]'))
	)
	rating_node = first_match(a, ('[class*="star_icon"]', '[class*="stars"][data-rating]'))
	rating = _clean_rating(attr_of(rating_node, "data-rating") or text_of(rating_node))
	review_raw = text_of(first_match(a, ('[class*="review_icon"]', '[class*="num-ratings"]')))
	user_slug = slugify(slug) or slugify(title) or "app"
	return AppSummary(
		title=title,
		icon_url=normalize_link(
			image_src(first_match(a, ('[class*="icon"] img', 'img[class*="cover-image"]', "img"))),
			settings.source_base_url,
			settings.user_base_url,
		),
		rating=rating,
		review_count_raw=review_raw,
		review_count_formatted=format_review_count(review_raw),
		review_count_numeric=review_count_to_number(review_raw),
		package_name=package,
		slug=user_slug,
		internal_link=app_link(user_slug, package),
		description=description,
	)


def _heading_of(block: Tag) -> str:
	return text_of(first_match(block, ('[class*="title"]', "h2", "h3")))


def extract_related(soup: BeautifulSoup, settings: Settings) -> Tuple[str, List[AppSummary], List[AppSummary]]:
	"""(related title, related apps, developer's other apps).

	A block headed "Developer..." holds the developer's apps; the first other
	related block holds similar apps. Nested blocks belong to their outer block.
	"""
	related_block: Optional[Tag] = None
	developer_block: Optional[Tag] = None
	for block in soup.select(RELATED_CONTAINER_SELECTOR):
		if any(p is b for p in block.parents for b in (related_block, developer_block) if b is not None):
			continue
		if "developer" in _heading_of(block).lower():
			developer_block = developer_block or block
		elif related_block is None:
			related_block = block
	related_title = _heading_of(related_block) if related_block is not None else ""
	return related_title, _related_list(related_block, settings), _related_list(developer_block, settings)


def _related_list(block: Optional[Tag], settings: Settings) -> List[AppSummary]:
	if block is None:
		return []
	seen: Set[str] = set()
	apps: List[AppSummary] = []
	for a in block.select(RELATED_ITEM_SELECTOR):
		entry = _related_entry(a, settings)
		if entry is None or entry.package_name in seen:
			continue
		seen.add(entry.package_name)
		apps.append(entry)
	return apps


def extract_app_detail(html: str, settings: Settings, page_url: str = "") -> Union[AppDetail, ExtractionError]:
	"""Parse an app's main page into an AppDetail.

	Returns ExtractionError when the detail container is missing, or when neither a
	name nor a package name can be found. page_url backfills the package name.
	"""
	soup = parse_html(html)
	container = first_match(soup, CONTAINER_SELECTORS)
	if container is None:
		logger.warning("No detail container on %s", page_url or "page")
		return ExtractionError(message="Could not find main app details container on source page.")

	src, user = settings.source_base_url, settings.user_base_url
	detail = AppDetail()
	detail.name = text_of(container.find("h1"))
	detail.icon_url = normalize_link(image_src(first_match(container, ICON_SELECTORS)), src, user)

	rating_node = first_match(container, RATING_SELECTORS) or first_match(soup, RATING_SELECTORS)
	detail.rating = _clean_rating(attr_of(rating_node, "data-rating") or text_of(rating_node))
	review_node = first_match(container, REVIEW_SELECTORS) or first_match(soup, REVIEW_SELECTORS)
	detail.review_count_raw = text_of(review_node)
	detail.review_count_formatted = format_review_count(detail.review_count_raw)
	detail.review_count_numeric = review_count_to_number(detail.review_count_raw)
	detail.price, detail.price_currency = extract_price(soup, container)

	version_node = first_match(container, VERSION_SELECTORS)
	version = strip_version_prefix(text_of(version_node)) if version_node is not None else ""
	if not version:
		version = strip_version_prefix(text_of(definition_value(soup, "Version")))
	if is_valid_version_string(version):
		detail.version_name = version

	update_node = first_match(container, UPDATE_SELECTORS)
	update = strip_label(text_of(update_node), ("Update on:", "Updated on:", "Updated:"))
	detail.update_date_raw = update or text_of(definition_value(soup, "Update Date"))

	dev_node = first_match(container, DEVELOPER_SELECTORS) or first_match(soup, DEVELOPER_SELECTORS)
	dev_anchor = dev_node.find_parent("a") if dev_node is not None else None
	if dev_node is None:
		dd = definition_value(soup, "Developer")
		dev_anchor = dd.find("a") if dd is not None else None
		dev_node = dev_anchor
	detail.developer_name = text_of(dev_node)
	if detail.developer_name:
		detail.developer_link = developer_link(detail.developer_name)
	elif dev_anchor is not None:
		detail.developer_link = normalize_link(attr_of(dev_anchor, "href"), src, user)

	package_node = next_paragraph_after(soup.select_one('div[class*="detail_more_info"]'), "Package Name:")
	detail.package_name = text_of(package_node) or text_of(definition_value(soup, "Package Name"))

	category = first_match(container, ('a[href*="/category/"]',))
	if category is not None:
		detail.category_name = text_of(category)
		detail.category_link = normalize_link(attr_of(category, "href"), src, user)

	detail.android_requirement = labelled_value(container, "Requires Android:") or text_of(
		definition_value(soup, "Requires Android")
	)
	size_node = first_match(container, ('span:-soup-contains("Size:")',))
	detail.file_size = strip_label(text_of(size_node), ("Size:",)) or text_of(definition_value(soup, "Size"))

	detail.more_info = extract_more_info(soup, settings)
	_backfill(detail, detail.more_info)

	desc_node = first_match(soup, DESCRIPTION_SELECTORS)
	detail.description_html = process_description(inner_html(desc_node), settings)
	detail.screenshots = extract_screenshots(soup, settings)
	detail.related_title, detail.related_apps, detail.developer_apps = extract_related(soup, settings)

	if not detail.package_name and page_url:
		detail.package_name = extract_slug_and_package(page_url).package_name
	if not detail.name and not detail.package_name:
		return ExtractionError(message="Failed to parse essential app details.")
	if not detail.name:
		detail.name = detail.package_name
	_apply_play_store(detail)

	detail.slug = slugify(detail.name) or slugify(detail.package_name) or "app"
	detail.internal_link = app_link(detail.slug, detail.package_name) if detail.package_name else ""
	return detail
