# AppMirror — Download resolution: latest/SHA1 state machine and binary proxy
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
import posixpath
from typing import List, Optional, Union
from urllib.parse import quote_plus, urljoin

from ..config import Settings
from ..models import AppDetail, DownloadButton, DownloadInfo, DownloadPage, ErrorKind, VersionHistoryEntry
from ..utils.urls import add_filename_hint, app_link, is_cdn_host, slugify
from .session import Fetcher, TransportError
from .validators import normalize_sha1
from .versions import find_variant_by_sha1, match_latest_variant, parse_download_button, parse_versions_page


logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = (8, 15)
VERSIONS_TIMEOUT = (10, 20)
PROXY_TIMEOUT = (10, 20)


def latest_download_link(slug: str, package_name: str) -> str:
	return app_link(slug, package_name) + "/download"


def download_file_name(app: AppDetail, info: DownloadInfo, sha1: str, user_domain: str) -> str:
	"""e.g. my-app_1.2.3_Yandux.Biz.apk"""
	safe_name = slugify(app.name or info.package_name) or "app"
	version = info.version_name.replace(" ", "_") if info.version_name not in ("", "N/A") else ""
	tag = version or (f"s-{sha1[:7]}" if sha1 else "latest")
	ext = (info.file_type or "apk").lower()
	name = f"{safe_name}_{tag}_{user_domain}.{ext}"
	return name.replace("__", "_").replace("_N/A_", "_")


def proxy_link(slug: str, package_name: str, file_name: str, sha1: str = "") -> str:
	link = "/download-proxy?id=" + quote_plus(f"{slug}/{package_name}") + "&file=" + quote_plus(file_name)
	if sha1:
		link += "&sha1=" + quote_plus(sha1)
	return link


def download_title(info: DownloadInfo, error: ErrorKind) -> str:
	if error != ErrorKind.NONE or not info.final_url:
		return "Download Unavailable"
	version = info.version_name if info.version_name not in ("", "N/A") else ""
	return " ".join(p for p in ("Download", info.file_type.upper(), version) if p)


class DownloadResolver:
	"""Resolve what to download for an app: the latest build or one pinned by SHA1."""

	def __init__(self, fetcher: Fetcher, settings: Settings) -> None:
		self.fetcher = fetcher
		self.settings = settings

	def fetch_download_button(self, app_url: str, sha1: str = "") -> Optional[DownloadButton]:
		url = app_url.rstrip("/") + "/download"
		if sha1:
			url += "?sha1=" + quote_plus(sha1)
		res = self.fetcher.get(url, timeout=DOWNLOAD_TIMEOUT)
		if isinstance(res, TransportError):
			logger.info("No download page for %s: %s", url, res)
			return None
		return parse_download_button(res.body)

	def fetch_versions(self, app_url: str, slug: str, package_name: str) -> List[VersionHistoryEntry]:
		"""Version history; any fetch failure (404 included) gives an empty list."""
		if not slug or not package_name:
			return []
		url = app_url.rstrip("/") + "/versions"
		res = self.fetcher.get(url, timeout=VERSIONS_TIMEOUT)
		if isinstance(res, TransportError):
			if res.status != 404:
				logger.warning("Could not fetch versions for %s: %s", package_name, res)
			return []
		return parse_versions_page(res.body, slug, package_name)

	def resolve(self, app: AppDetail, app_url: str, sha1: str = "") -> DownloadPage:
		"""Download view for app. A non-empty but malformed sha1 fails before any fetch."""
		requested = (sha1 or "").strip()
		sha1 = normalize_sha1(requested)
		slug = app.slug or "app"
		page = DownloadPage(app=app, latest_link=latest_download_link(slug, app.package_name))
		if requested and not sha1:
			page.error = ErrorKind.INVALID_SHA1
			page.message = f"Invalid SHA1 parameter: {requested}"
			page.title = download_title(page.download, page.error)
			return page

		info = DownloadInfo(package_name=app.package_name)
		if sha1:
			self._resolve_pinned(page, info, app_url, slug, sha1)
		else:
			self._resolve_latest(page, info, app, app_url, slug)

		if page.error == ErrorKind.NONE and not info.final_url:
			page.error = ErrorKind.DOWNLOAD_NOT_AVAILABLE
			page.message = page.message or "Download information could not be retrieved for this version."
		info.file_size = info.file_size or "N/A"
		info.version_name = info.version_name or "N/A"
		if page.error != ErrorKind.NONE:
			info.final_url = ""

		page.download = info
		page.is_latest = not sha1 and page.error == ErrorKind.NONE
		page.title = download_title(info, page.error)
		page.file_name = download_file_name(app, info, sha1, self.settings.user_domain)
		if page.error == ErrorKind.NONE:
			page.proxy_link = proxy_link(slug, app.package_name, page.file_name, sha1)
		return page

	def _resolve_pinned(self, page: DownloadPage, info: DownloadInfo, app_url: str, slug: str, sha1: str) -> None:
		page.versions = self.fetch_versions(app_url, slug, info.package_name)
		found = find_variant_by_sha1(page.versions, sha1)
		if found is None:
			page.error = ErrorKind.INVALID_SHA1
			page.message = f"Requested version (SHA1: {sha1}) not found on the versions page."
			return
		entry, variant = found
		info.sha1 = variant.sha1
		info.arch = variant.arch
		info.dpi = variant.dpi
		info.android_requirement = variant.android_requirement
		info.file_size = variant.size or entry.size
		info.file_type = variant.type or entry.type
		info.version_name = entry.version
		info.update_date = variant.date or entry.date
		button = self.fetch_download_button(app_url, sha1)
		if button is None:
			page.error = ErrorKind.DOWNLOAD_NOT_AVAILABLE
			page.message = f"Could not retrieve the final download link for version (SHA1: {sha1})."
			return
		info.final_url = button.href

	def _resolve_latest(self, page: DownloadPage, info: DownloadInfo, app: AppDetail, app_url: str, slug: str) -> None:
		button = self.fetch_download_button(app_url)
		if button is not None:
			info.final_url = button.href
		page.versions = self.fetch_versions(app_url, slug, app.package_name)
		match = match_latest_variant(page.versions, button.file_size if button else "")
		version = (button.version_name if button else "") or app.version_name
		date = (button.update_date if button else "") or app.update_date_raw
		if match is not None:
			entry, variant = match
			info.sha1 = variant.sha1
			info.arch = variant.arch or "Universal"
			info.dpi = variant.dpi or "No Dpi"
			info.android_requirement = variant.android_requirement or app.android_requirement
			info.file_size = variant.size or (button.file_size if button else "")
			info.file_type = variant.type or (button.file_type if button else "APK")
			info.version_name = entry.version or version
			info.update_date = variant.date or date
			return
		info.file_size = (button.file_size if button else "") or app.file_size
		info.file_type = button.file_type if button else "APK"
		info.version_name = version
		info.update_date = date
		info.android_requirement = app.android_requirement
		info.arch = "Universal"
		info.dpi = "No Dpi"
		info.sha1 = ""

	def resolve_binary_url(self, app_id: str, file_name: str, sha1: str = "") -> Union[str, TransportError]:
		"""Outbound URL of the actual file, with a filename hint for CDN hosts."""
		app_id = (app_id or "").replace("..", "").replace("\\", "").strip().strip("/")
		file_name = posixpath.basename((file_name or "").strip())
		if not app_id or not file_name:
			return TransportError("", "Missing or invalid parameters.")
		sha1 = normalize_sha1(sha1)
		url = f"{self.settings.source_base_url}/{app_id}/download"
		if sha1:
			url += "?sha1=" + quote_plus(sha1)
		res = self.fetcher.get_preserving_query(url, timeout=PROXY_TIMEOUT)
		if isinstance(res, TransportError):
			return TransportError(url, f"Could not fetch download page from source. {res.message}", status=res.status)
		button = parse_download_button(res.body)
		if button is None:
			return TransportError(
				url,
				"Could not find the download button link on the source page. "
				"The page layout may have changed or the version is unavailable.",
			)
		intermediate = urljoin(res.url, button.href)
		final = self.fetcher.resolve_final_url(intermediate, timeout=PROXY_TIMEOUT)
		if isinstance(final, TransportError):
			return TransportError(
				intermediate,
				"Could not resolve final download URL. This can happen if the link from the source has expired.",
			)
		if is_cdn_host(final, self.settings.cdn_domains):
			final = add_filename_hint(final, file_name)
		logger.info("Resolved download for %s -> %s", app_id, final)
		return final
