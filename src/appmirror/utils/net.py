# AppMirror — Networking utilities (requests session with browser headers)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


def browser_headers(source_domain: str) -> Dict[str, str]:
	"""Headers a desktop Chrome sends for a top-level navigation to the source."""
	return {
		"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
		"Accept-Language": "en-US,en;q=0.9",
		"Cache-Control": "no-cache",
		"Pragma": "no-cache",
		"Sec-Fetch-Dest": "document",
		"Sec-Fetch-Mode": "navigate",
		"Sec-Fetch-Site": "none",
		"Sec-Fetch-User": "?1",
		"Upgrade-Insecure-Requests": "1",
		"Referer": f"https://{source_domain}/",
	}


def build_session(
	user_agent: str,
	retries: int = 0,
	backoff: float = 0.5,
	headers: Optional[Dict[str, str]] = None,
) -> requests.Session:
	"""Build a requests Session with browser-like defaults.

	With retries <= 0 the adapter never retries, so a failed fetch surfaces at once.
	"""
	s = requests.Session()
	s.headers.update({"User-Agent": user_agent})
	if headers:
		s.headers.update(headers)
	if retries > 0:
		retry = Retry(
			total=retries,
			backoff_factor=backoff,
			status_forcelist=(429, 500, 502, 503, 504),
			allowed_methods=frozenset({"GET", "HEAD"}),
			raise_on_status=False,
		)
		adapter = HTTPAdapter(max_retries=retry)
	else:
		adapter = HTTPAdapter(max_retries=0)
	s.mount("http://", adapter)
	s.mount("https://", adapter)
	return s
