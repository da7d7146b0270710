# AppMirror — Download button and version history parsing
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
import re
from typing import List, Optional, Tuple

from bs4.element import Tag

from ..models import DownloadButton, Variant, VersionHistoryEntry
from ..utils.text import first_number, normalize_size
from ..utils.urls import query_param, variant_download_link
from .parser import attr_of, first_match, inner_html, labelled_value, parse_html, text_of
from .validators import is_valid_version_string, normalize_sha1, strip_label, strip_version_prefix


logger = logging.getLogger(__name__)

BUTTON_SELECTORS = (
	'a[class*="down_btn"][href]',
	'a#download_link[href]',
	'a[class*="download-btn"][href]',
)
BUTTON_TEXT_RE = re.compile(r"Download\s+(APK|XAPK)\s*\(?\s*([^)]+)\s*\)?", re.I)
DOWNLOAD_DATE_SELECTORS = (
	'div[class*="app_info"] span:-soup-contains("Update on:")',
	'p:-soup-contains("Updated on:")',
	'div[class*="app_info"] span:-soup-contains("Updated:")',
	'div[class*="app_info"] span:-soup-contains("Update Date:")',
)
DATE_LABELS = ("Updated on:", "Update on:", "Updated:", "Update Date:")


def _type_from_text(text: str) -> str:
	upper = (text or "").upper()
	if "XAPK" in upper:
		return "XAPK"
	if "APK" in upper:
		return "APK"
	return ""


def _sha1_from_href(href: str) -> str:
	return query_param(href, "h", "sha1")


def parse_download_button(html: str) -> Optional[DownloadButton]:
	"""Primary button of a /download page, or None when there is no usable href."""
	soup = parse_html(html)
	button = first_match(soup, BUTTON_SELECTORS)
	href = attr_of(button, "href")
	if not href or href == "#":
		return None

	file_size = attr_of(button, "data-dt-file-size")
	file_type = attr_of(button, "data-dt-file-type").upper()
	if not file_size or not file_type:
		label = text_of(button)
		m = BUTTON_TEXT_RE.search(label)
		if m:
			file_type = file_type or m.group(1).upper()
			file_size = file_size or m.group(2).strip()
		file_type = file_type or _type_from_text(label)

	version = ""
	for sel in ('h1[class*="app-name"] small', 'div[class*="app_info"] span:-soup-contains("Version:")'):
		candidate = strip_version_prefix(text_of(first_match(soup, (sel,))))
		if is_valid_version_string(candidate):
			version = candidate
			break

	date = strip_label(text_of(first_match(soup, DOWNLOAD_DATE_SELECTORS)), DATE_LABELS)
	sha1 = normalize_sha1(labelled_value(soup, "SHA1:")) or normalize_sha1(_sha1_from_href(href))
	return DownloadButton(
		href=href,
		file_size=file_size,
		file_type=file_type if file_type in ("APK", "XAPK") else "APK",
		version_name=version,
		update_date=date,
		sha1=sha1,
	)


def _entry_header(node: Tag) -> VersionHistoryEntry:
	entry = VersionHistoryEntry(version="")
	info = node.select_one('div[class*="package_info"]')
	if info is None:
		return entry
	entry.version = text_of(info.select_one('span[class*="version"]'))
	spans = info.select('div[class*="text"] > span')
	if len(spans) >= 2:
		entry.date = text_of(spans[0])
		entry.size = text_of(spans[1])
	if info.select_one('span[class*="xapk"]') is not None:
		entry.type = "XAPK"
	elif info.select_one('span[class*="apk"]') is not None:
		entry.type = "APK"
	else:
		entry.type = _type_from_text(entry.size)
	entry.bundle_badge = text_of(info.select_one('span[class*="obb"]'))
	return entry


def _table_variant(row: Tag, entry: VersionHistoryEntry) -> Optional[Variant]:
	cells = row.select(':scope > div[class*="table-cell"]')
	if len(cells) < 5:
		return None
	variant = Variant(date=entry.date, size=entry.size, type=entry.type or "Unknown")
	popup = cells[0].select('div[class*="popup"] > p')
	if len(popup) >= 2:
		variant.variant_id = text_of(popup[0])
		variant.date = text_of(popup[1]) or entry.date
	ver_info = cells[0].select_one('div[class*="ver-info"]')
	if ver_info is not None:
		variant.sha1 = labelled_value(ver_info, "SHA1:")
		variant.size = labelled_value(ver_info, "Size:") or entry.size
		variant.base_apk = labelled_value(ver_info, "Base APK:")
		variant.split_apks = labelled_value(ver_info, "Split APKs:")
	variant.arch = text_of(cells[1])
	variant.android_requirement = text_of(cells[2])
	variant.dpi = text_of(cells[3])
	link = first_match(cells[4], ('a[class*="down_text"]', 'a[class*="down-button"]'))
	href = attr_of(link, "href")
	if link is not None and variant.type in ("", "Unknown"):
		variant.type = _type_from_text(text_of(link)) or variant.type
	variant.sha1 = normalize_sha1(variant.sha1 or _sha1_from_href(href))
	return variant


def _single_variant(node: Tag, entry: VersionHistoryEntry) -> Optional[Variant]:
	button = node.select_one('div[class*="v_h_button"] > a[class*="down"]')
	if button is None:
		return None
	box = node.select_one('div[class*="info_box"]')
	sha1 = labelled_value(box, "SHA1:") or _sha1_from_href(attr_of(button, "href"))
	return Variant(
		variant_id="N/A",
		date=entry.date,
		arch=labelled_value(box, "Architecture:") or "N/A",
		android_requirement=labelled_value(box, "Requires Android:") or "N/A",
		dpi=labelled_value(box, "Screen DPI:") or "N/A",
		size=labelled_value(box, "Size:") or entry.size,
		type=entry.type or "APK",
		sha1=normalize_sha1(sha1),
	)


def parse_versions_page(html: str, slug: str, package_name: str) -> List[VersionHistoryEntry]:
	"""Version history, newest first, keeping entries that have a version and variants.

	Variants whose internal download link cannot be built (no SHA1) are dropped.
	"""
	soup = parse_html(html)
	container = soup.select_one('div[class*="version_history"]')
	if container is None:
		return []
	entries: List[VersionHistoryEntry] = []
	for node in container.select('div[class*="list"]'):
		# wrappers around several entries would duplicate the first one
		if len(node.select('div[class*="package_info"]')) > 1:
			continue
		entry = _entry_header(node)
		info_box = node.select_one('div[class*="info-fix"] > div[class*="info_box"]')
		candidates: List[Optional[Variant]] = []
		if info_box is not None:
			whats_new = info_box.select_one('div[class*="whats_new"]')
			entry.whats_new_html = inner_html(whats_new)
			rows = info_box.select(
				'div[class*="table"] > div[class*="table-row"]:not([class*="table-head"])'
			)
			if rows:
				candidates = [_table_variant(row, entry) for row in rows]
			else:
				candidates = [_single_variant(node, entry)]
		for variant in candidates:
			if variant is None:
				continue
			variant.download_link = variant_download_link(slug, package_name, variant.sha1)
			if variant.download_link:
				entry.variants.append(variant)
		if entry.version and entry.variants:
			entries.append(entry)
	return entries


def match_latest_variant(entries: List[VersionHistoryEntry], target_size: str) -> Optional[Tuple[VersionHistoryEntry, Variant]]:
	"""First variant of the newest entry whose normalized size equals target_size."""
	wanted = normalize_size(target_size)
	if not entries or not wanted:
		return None
	latest = entries[0]
	for variant in latest.variants:
		if normalize_size(variant.size) == wanted:
			return latest, variant
	return None


def normalize_requirement(text: str) -> str:
	"""'Android 5.0+' -> '5.0'"""
	return first_number(text)


def match_detail_variant(
	entries: List[VersionHistoryEntry],
	target_size: str,
	target_requirement: str,
) -> Optional[Tuple[VersionHistoryEntry, Variant]]:
	"""Like match_latest_variant, but the Android requirement must match as well.

	No match is attempted when either target is empty.
	"""
	if not entries or not (target_size or "").strip() or not (target_requirement or "").strip():
		return None
	wanted_size = normalize_size(target_size)
	wanted_req = normalize_requirement(target_requirement)
	latest = entries[0]
	for variant in latest.variants:
		if normalize_size(variant.size) == wanted_size and normalize_requirement(variant.android_requirement) == wanted_req:
			return latest, variant
	return None


def find_variant_by_sha1(entries: List[VersionHistoryEntry], sha1: str) -> Optional[Tuple[VersionHistoryEntry, Variant]]:
	wanted = normalize_sha1(sha1)
	if not wanted:
		return None
	for entry in entries:
		for variant in entry.variants:
			if variant.sha1.lower() == wanted:
				return entry, variant
	return None
