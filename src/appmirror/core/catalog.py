# AppMirror — Catalog: per-request pipelines over the source site
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
from typing import Dict, List, Optional, Union
from urllib.parse import quote

import requests

from ..config import Settings
from ..models import AppDetail, AppPage, CategoryMenu, DownloadPage, ErrorKind, ExtractionError, ListingPage
from ..utils.urls import AppIdentifier, extract_slug_and_package
from . import listing
from .detail import extract_app_detail
from .download import DownloadResolver, latest_download_link
from .session import Fetcher, TransportError
from .validators import is_valid_sha1
from .versions import match_detail_variant


logger = logging.getLogger(__name__)

DETAIL_TIMEOUT = (10, 25)


class Catalog:
	"""Entry point for every page the mirror serves.

	Each call re-fetches what it needs; nothing is kept between calls.
	"""

	def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
		self.settings = settings
		self.fetcher = Fetcher(settings, session=session)
		self.downloads = DownloadResolver(self.fetcher, settings)

	def source_app_url(self, ident: AppIdentifier) -> str:
		path = "/".join(quote(p, safe=".-_~") for p in (ident.slug, ident.package_name) if p)
		return f"{self.settings.source_base_url}/{path}"

	def fetch_detail(self, ident: AppIdentifier) -> Union[AppDetail, ExtractionError]:
		url = self.source_app_url(ident)
		res = self.fetcher.get(url, timeout=DETAIL_TIMEOUT)
		if isinstance(res, TransportError):
			return ExtractionError(message=f"Could not fetch app page: {res.message}")
		return extract_app_detail(res.body, self.settings, page_url=url)

	def app_page(self, path: str) -> AppPage:
		"""Detail view: app record, matched latest variant and previous versions."""
		ident = extract_slug_and_package(path)
		if not ident.package_name:
			return AppPage(error=ErrorKind.APP_DETAILS_ERROR, message="Invalid app identifier.")
		detail = self.fetch_detail(ident)
		if isinstance(detail, ExtractionError):
			return AppPage(error=ErrorKind.APP_DETAILS_ERROR, message=detail.message)

		page = AppPage(app=detail)
		if detail.is_paid:
			return page
		app_url = self.source_app_url(ident)
		button = self.downloads.fetch_download_button(app_url)
		if button is not None:
			detail.file_size = button.file_size or detail.file_size
		page.versions = self.downloads.fetch_versions(app_url, detail.slug, detail.package_name)
		match = match_detail_variant(page.versions, detail.file_size, detail.android_requirement)
		if match is not None:
			detail.matched_sha1 = match[1].sha1
			detail.matched_arch = match[1].arch or "Universal"
		page.download_link = latest_download_link(detail.slug, detail.package_name)
		return page

	def download_page(self, path: str, sha1: str = "") -> DownloadPage:
		"""Download view for the latest build, or for the variant pinned by sha1."""
		ident = extract_slug_and_package(path)
		requested = (sha1 or "").strip()
		if requested and not is_valid_sha1(requested):
			# rejected before any source page is requested
			return DownloadPage(
				error=ErrorKind.INVALID_SHA1,
				message=f"Invalid SHA1 parameter: {requested}",
				latest_link=latest_download_link(ident.slug or "app", ident.package_name),
				title="Download Unavailable",
			)
		if not ident.package_name:
			return DownloadPage(error=ErrorKind.APP_DETAILS_ERROR, message="Invalid app identifier.")
		detail = self.fetch_detail(ident)
		if isinstance(detail, ExtractionError):
			return DownloadPage(error=ErrorKind.APP_DETAILS_ERROR, message=detail.message, title="Download Unavailable")
		return self.downloads.resolve(detail, self.source_app_url(ident), sha1=requested)

	def proxy_download(self, app_id: str, file_name: str, sha1: str = "") -> Union[str, TransportError]:
		return self.downloads.resolve_binary_url(app_id, file_name, sha1)

	def category(self, main: str, sub: str = "", page: int = 1) -> ListingPage:
		return listing.fetch_category(self.fetcher, self.settings, main, sub, page=page)

	def hot(self, kind: str = "apps", limit: Optional[int] = None) -> ListingPage:
		return listing.fetch_hot(self.fetcher, self.settings, kind=kind, limit=limit)

	def latest(self, kind: str = "apps", page: int = 1, limit: Optional[int] = None) -> ListingPage:
		return listing.fetch_latest(self.fetcher, self.settings, kind=kind, page=page, limit=limit)

	def developer(self, name: str, page: int = 1) -> ListingPage:
		return listing.fetch_developer(self.fetcher, self.settings, name, page=page)

	def search(self, keyword: str) -> ListingPage:
		return listing.search(self.fetcher, self.settings, keyword)

	def suggest(self, keyword: str) -> List[Dict[str, str]]:
		return listing.suggest(self.fetcher, self.settings, keyword)

	def categories(self) -> CategoryMenu:
		return listing.fetch_categories(self.fetcher, self.settings)
