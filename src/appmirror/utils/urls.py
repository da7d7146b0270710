# AppMirror — URL utilities: identifiers, link rewriting and internal links
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import base64
import re
from typing import Iterable, NamedTuple
from urllib.parse import parse_qsl, quote, quote_plus, unquote, urlencode, urlparse, urlunparse

import tldextract


RESERVED_SEGMENTS = frozenset({"versions", "download", "related", "category", "developer", "app"})

# Offline snapshot only; never fetch the public suffix list at runtime
_tld = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)


class AppIdentifier(NamedTuple):
	slug: str
	package_name: str


def _is_package_like(segment: str) -> bool:
	return "." in segment and not re.search(r"\s", segment) and segment.lower() not in RESERVED_SEGMENTS


def _path_of(value: str) -> str:
	if "://" in value or value.startswith("//"):
		try:
			return urlparse(value).path
		except ValueError:
			pass
	return re.split(r"[?#]", value, maxsplit=1)[0]


def extract_slug_and_package(value: str) -> AppIdentifier:
	"""Resolve (slug, package_name) from a path or URL.

	The package is the rightmost segment that contains a dot, no whitespace and is
	not a reserved word. The segment right before it becomes the slug unless it is
	reserved or dotted itself.
	"""
	segments = [s for s in _path_of(unquote(value or "").strip()).split("/") if s]
	for i in range(len(segments) - 1, -1, -1):
		if not _is_package_like(segments[i]):
			continue
		slug = ""
		if i > 0:
			prev = segments[i - 1]
			if prev.lower() not in RESERVED_SEGMENTS and "." not in prev:
				slug = prev
		return AppIdentifier(slug, segments[i])
	return AppIdentifier("", "")


def _root_relative(path: str, query: str = "") -> str:
	path = path or "/"
	if not path.startswith("/"):
		path = "/" + path
	if not query and len(path) > 1:
		path = path.rstrip("/") or "/"
	return path + ("?" + query if query else "")


def normalize_link(url: str, source_base: str, user_base: str) -> str:
	"""Rewrite a scraped href so it never points at the source host.

	Source (or own) absolute URLs become root-relative, foreign hosts pass through,
	bare relative paths are joined onto the source base path.
	"""
	url = (url or "").strip()
	if not url or url == "#":
		return ""
	own_hosts = {
		(urlparse(source_base).hostname or "").lower(),
		(urlparse(user_base).hostname or "").lower(),
	}
	own_hosts.discard("")
	own_hosts |= {"www." + h for h in own_hosts if not h.startswith("www.")}
	lowered = url.lower()
	if lowered.startswith(("http://", "https://", "//")):
		try:
			p = urlparse("https:" + url if url.startswith("//") else url)
			host = (p.hostname or "").lower()
		except ValueError:
			return url
		if host in own_hosts:
			return _root_relative(p.path, p.query)
		return url
	if url.startswith("/"):
		path, _, query = url.partition("?")
		return _root_relative(path, query)
	base_path = urlparse(source_base).path.rstrip("/")
	path, _, query = (base_path + "/" + url.lstrip("/")).partition("?")
	return _root_relative(path, query)


def slugify(text: str) -> str:
	"""Lowercase, dash-separated, percent-encoded slug. Unicode letters survive."""
	chars = [c if (c.isalpha() or c in "0123456789") else "-" for c in (text or "").lower()]
	slug = re.sub(r"-+", "-", "".join(chars)).strip("-")
	return quote(slug, safe="-")


def app_link(slug: str, package_name: str) -> str:
	return "/" + slug + "/" + quote(package_name, safe=".")


def developer_link(name: str) -> str:
	return "/developer/" + quote(name, safe="")


def category_link(main: str, sub: str = "") -> str:
	parts = [quote(p, safe="-_") for p in (main, sub) if p]
	return "/category/" + "/".join(parts) if parts else "/category"


def variant_download_link(slug: str, package_name: str, sha1: str) -> str:
	"""Internal download link pinned to one variant; empty when any part is missing."""
	if not slug or not package_name or not sha1:
		return ""
	return "/{}/{}/download?sha1={}".format(
		quote(slug, safe="%-"), quote(package_name, safe="."), quote_plus(sha1)
	)


def append_query(url: str, query: str) -> str:
	"""Re-attach a query string, merging with an existing one."""
	if not query:
		return url
	sep = "&" if urlparse(url).query else "?"
	return url + sep + query


def query_param(url: str, *names: str) -> str:
	"""First non-empty value among the given query parameter names."""
	try:
		params = dict(parse_qsl(urlparse(url).query, keep_blank_values=True))
	except ValueError:
		return ""
	for name in names:
		if params.get(name):
			return params[name]
	return ""


def etld_plus_one(netloc: str) -> str:
	ext = _tld(netloc)
	return ".".join([p for p in [ext.domain, ext.suffix] if p])


def is_cdn_host(url: str, cdn_domains: Iterable[str]) -> bool:
	try:
		host = (urlparse(url).hostname or "").lower()
	except ValueError:
		return False
	if not host:
		return False
	return etld_plus_one(host) in {d.lower() for d in cdn_domains}


def add_filename_hint(url: str, filename: str) -> str:
	"""Add _fn=<base64 filename> so the CDN serves the file under that name."""
	p = urlparse(url)
	q = [(k, v) for k, v in parse_qsl(p.query, keep_blank_values=True) if k != "_fn"]
	q.append(("_fn", base64.b64encode(filename.encode("utf-8")).decode("ascii")))
	return urlunparse(p._replace(query=urlencode(q)))


__all__ = [
	"AppIdentifier",
	"RESERVED_SEGMENTS",
	"extract_slug_and_package",
	"normalize_link",
	"slugify",
	"app_link",
	"developer_link",
	"category_link",
	"variant_download_link",
	"append_query",
	"query_param",
	"etld_plus_one",
	"is_cdn_host",
	"add_filename_hint",
]
