# AppMirror — HTTP fetcher for source pages
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
import re
from typing import Dict, Optional, Tuple, Union
from urllib.parse import urljoin, urlparse

import requests

from ..config import Settings
from ..utils.net import browser_headers, build_session
from ..utils.urls import append_query


logger = logging.getLogger(__name__)

LOCATION_RE = re.compile(r"^Location:\s*(.*)$", re.I | re.M)
XHR_HEADERS = {
	"Accept": "application/json, text/javascript, */*; q=0.01",
	"X-Requested-With": "XMLHttpRequest",
}

Timeout = Tuple[float, float]


class FetchResponse:
	def __init__(self, url: str, status: int, headers: Dict[str, str], body: str) -> None:
		self.url = url
		self.status = status
		self.headers = headers
		self.body = body

	@property
	def is_redirect(self) -> bool:
		return 300 <= self.status < 400

	def header_block(self) -> str:
		return "\n".join(f"{k}: {v}" for k, v in self.headers.items())


class TransportError:
	"""A fetch that produced no usable page. Returned, never raised."""

	def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
		self.url = url
		self.message = message
		self.status = status

	def __str__(self) -> str:
		return self.message

	def __repr__(self) -> str:
		return f"TransportError({self.url!r}, {self.message!r}, status={self.status!r})"


FetchResult = Union[FetchResponse, TransportError]


def make_session(settings: Settings) -> requests.Session:
	return build_session(
		user_agent=settings.user_agent,
		retries=settings.retries,
		backoff=settings.backoff,
		headers=browser_headers(settings.source_domain),
	)


class Fetcher:
	"""Blocking GET/HEAD against the source with structured failures."""

	def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
		self.settings = settings
		self.session = session if session is not None else make_session(settings)

	def get(
		self,
		url: str,
		headers: Optional[Dict[str, str]] = None,
		timeout: Optional[Timeout] = None,
		allow_redirects: bool = True,
	) -> FetchResult:
		try:
			r = self.session.get(
				url,
				headers=headers,
				timeout=timeout or self.settings.default_timeout,
				allow_redirects=allow_redirects,
			)
		except requests.RequestException as e:
			logger.warning("Fetch failed for %s: %s", url, e)
			return TransportError(url, f"Request failed: {e}")
		resp = FetchResponse(str(r.url or url), int(r.status_code), dict(r.headers or {}), r.text or "")
		if resp.is_redirect and not allow_redirects:
			return resp
		if resp.status >= 400:
			logger.warning("HTTP %s for %s", resp.status, url)
			return TransportError(url, f"HTTP error {resp.status}", status=resp.status)
		if not resp.body.strip():
			logger.warning("Empty response body for %s", url)
			return TransportError(url, "Empty response from source", status=resp.status)
		return resp

	def get_preserving_query(self, url: str, timeout: Optional[Timeout] = None) -> FetchResult:
		"""GET without auto-redirects; on 3xx re-attach the original query to Location."""
		first = self.get(url, timeout=timeout, allow_redirects=False)
		if isinstance(first, TransportError) or not first.is_redirect:
			return first
		m = LOCATION_RE.search(first.header_block())
		location = m.group(1).strip() if m else ""
		if not location:
			return TransportError(url, "Redirect detected, but no new location found.", status=first.status)
		target = append_query(urljoin(url, location), urlparse(url).query)
		logger.info("Redirect %s -> %s", url, target)
		return self.get(target, timeout=timeout, allow_redirects=True)

	def resolve_final_url(self, url: str, timeout: Optional[Timeout] = None) -> Union[str, TransportError]:
		"""Follow redirects with a HEAD request and return only the effective URL."""
		try:
			r = self.session.head(url, timeout=timeout or self.settings.default_timeout, allow_redirects=True)
		except requests.RequestException as e:
			logger.warning("HEAD failed for %s: %s", url, e)
			return TransportError(url, f"Request failed: {e}")
		final = str(r.url or "")
		p = urlparse(final)
		if p.scheme not in ("http", "https") or not p.netloc:
			return TransportError(url, "Could not resolve final download URL.")
		return final
