# AppMirror — HTML parsing and fallback selector chains
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
import warnings
from typing import Iterable, List, Optional, Union

from bs4 import BeautifulSoup, FeatureNotFound
from bs4.element import Comment, NavigableString, Tag
from soupsieve import SelectorSyntaxError


logger = logging.getLogger(__name__)

PARSER_CANDIDATES = ["lxml", "html.parser"]

Node = Union[BeautifulSoup, Tag]


def parse_html(content: Union[str, bytes]) -> BeautifulSoup:
	"""Parse HTML using lxml if available, else builtin parser. Never raises on bad markup."""
	with warnings.catch_warnings():
		warnings.simplefilter("ignore")
		for parser in PARSER_CANDIDATES:
			try:
				return BeautifulSoup(content or "", parser)
			except FeatureNotFound:
				continue
		return BeautifulSoup(content or "", "html.parser")


def first_match(node: Optional[Node], selectors: Iterable[str]) -> Optional[Tag]:
	"""Try each CSS selector in order and return the first element found."""
	if node is None:
		return None
	for sel in selectors:
		try:
			found = node.select_one(sel)
		except SelectorSyntaxError as e:
			logger.warning("Skipping selector %r: %s", sel, e)
			continue
		if found is not None:
			return found
	return None


def first_all(node: Optional[Node], selectors: Iterable[str]) -> List[Tag]:
	"""All matches of the first selector that matches anything."""
	if node is None:
		return []
	for sel in selectors:
		try:
			found = node.select(sel)
		except SelectorSyntaxError as e:
			logger.warning("Skipping selector %r: %s", sel, e)
			continue
		if found:
			return found
	return []


def text_of(node: Optional[Tag]) -> str:
	if node is None:
		return ""
	return " ".join(node.get_text(" ", strip=True).split())


def attr_of(node: Optional[Tag], *names: str) -> str:
	"""First non-empty attribute among names."""
	if node is None:
		return ""
	for name in names:
		value = node.get(name)
		if isinstance(value, list):
			value = " ".join(value)
		if value and value.strip():
			return value.strip()
	return ""


def image_src(img: Optional[Tag]) -> str:
	"""Lazy-loaded images carry the real URL in data-src."""
	for name in ("data-src", "src", "data-original", "data-lazy-src"):
		value = attr_of(img, name)
		if value and not value.startswith("data:image") and "placeholder" not in value:
			return value
	return ""


def inner_html(node: Optional[Tag]) -> str:
	if node is None:
		return ""
	return "".join(str(c) for c in node.contents).strip()


def own_text(node: Optional[Tag]) -> str:
	"""First non-blank text node that is a direct child of node."""
	if node is None:
		return ""
	for child in node.children:
		if isinstance(child, NavigableString) and not isinstance(child, Comment) and child.strip():
			return child.strip()
	return ""


def labelled_value(node: Optional[Node], label: str, tag: str = "p") -> str:
	"""Value of <p><strong>Label:</strong> value</p> style pairs."""
	if node is None:
		return ""
	for el in node.find_all(tag):
		strong = el.find("strong")
		if strong is None or label not in strong.get_text():
			continue
		value = own_text(el)
		if value:
			return value
	return ""


def definition_value(node: Optional[Node], label: str) -> Optional[Tag]:
	"""The <dd> following a <dt> whose text equals label."""
	if node is None:
		return None
	for dt in node.find_all("dt"):
		if dt.get_text(strip=True).rstrip(":") == label:
			return dt.find_next_sibling("dd")
	return None


def next_paragraph_after(node: Optional[Node], label: str) -> Optional[Tag]:
	"""The <p> right after a <p> that mentions label."""
	if node is None:
		return None
	for p in node.find_all("p"):
		if label in p.get_text():
			return p.find_next_sibling("p")
	return None
