# AppMirror — Typed records for scraped catalog data
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import re
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


SHA1_RE = re.compile(r"^[a-f0-9]{40}$", re.I)
FILE_TYPES = ("APK", "XAPK")


class ErrorKind(str, Enum):
	NONE = "none"
	APP_DETAILS_ERROR = "app_details_error"
	INVALID_SHA1 = "invalid_sha1"
	DOWNLOAD_NOT_AVAILABLE = "download_not_available"


class ExtractionError(BaseModel):
	"""A parse that could not produce its record (e.g. missing detail container)."""

	message: str


class AppSummary(BaseModel):
	"""Lightweight listing entry. package_name is never empty."""

	title: str = ""
	icon_url: str = ""
	rating: str = ""
	review_count_raw: str = ""
	review_count_formatted: str = ""
	review_count_numeric: float = 0.0
	package_name: str = Field(min_length=1)
	slug: str = ""
	internal_link: str = ""
	description: str = ""
	developer: str = ""


class MoreInfoItem(BaseModel):
	text: str = ""
	link: str = ""


class AppDetail(BaseModel):
	name: str = ""
	icon_url: str = ""
	rating: str = ""
	review_count_raw: str = ""
	review_count_formatted: str = ""
	review_count_numeric: float = 0.0
	package_name: str = ""
	slug: str = ""
	internal_link: str = ""
	description_html: str = ""
	screenshots: List[str] = Field(default_factory=list)
	developer_name: str = ""
	developer_link: str = ""
	category_name: str = ""
	category_link: str = ""
	price: str = "0"
	price_currency: str = ""
	version_name: str = ""
	update_date_raw: str = ""
	android_requirement: str = ""
	file_size: str = ""
	installs: str = ""
	content_rating: str = ""
	play_store_link: str = ""
	more_info: Dict[str, MoreInfoItem] = Field(default_factory=dict)
	related_title: str = ""
	related_apps: List[AppSummary] = Field(default_factory=list)
	developer_apps: List[AppSummary] = Field(default_factory=list)
	matched_sha1: Optional[str] = None
	matched_arch: Optional[str] = None

	@property
	def is_paid(self) -> bool:
		try:
			return float(self.price or 0) > 0
		except ValueError:
			return False


class DownloadButton(BaseModel):
	"""Primary button of the source /download page."""

	href: str
	file_size: str = ""
	file_type: str = "APK"
	version_name: str = ""
	update_date: str = ""
	sha1: str = ""


class Variant(BaseModel):
	variant_id: str = ""
	date: str = ""
	arch: str = ""
	android_requirement: str = ""
	dpi: str = ""
	size: str = ""
	type: str = ""
	sha1: str = ""
	base_apk: str = ""
	split_apks: str = ""
	download_link: str = ""


class VersionHistoryEntry(BaseModel):
	version: str
	date: str = ""
	size: str = ""
	type: str = ""
	bundle_badge: str = ""
	whats_new_html: str = ""
	variants: List[Variant] = Field(default_factory=list)


class DownloadInfo(BaseModel):
	model_config = ConfigDict(validate_assignment=True)

	final_url: str = ""
	file_size: str = ""
	file_type: str = "APK"
	sha1: str = ""
	android_requirement: str = ""
	dpi: str = ""
	arch: str = ""
	version_name: str = ""
	update_date: str = ""
	package_name: str = ""

	@field_validator("sha1", mode="before")
	@classmethod
	def _sha1_or_absent(cls, v):
		v = (v or "").strip()
		return v.lower() if SHA1_RE.match(v) else ""

	@field_validator("file_type", mode="before")
	@classmethod
	def _known_file_type(cls, v):
		v = (v or "").strip().upper()
		return v if v in FILE_TYPES else "APK"


class DeveloperInfo(BaseModel):
	name: str = ""
	icon_url: str = ""
	banner_url: str = ""
	description: str = ""


class CategoryLink(BaseModel):
	name: str
	link: str
	slug: str = ""


class CategoryMenu(BaseModel):
	apps: List[CategoryLink] = Field(default_factory=list)
	games: List[CategoryLink] = Field(default_factory=list)
	error: str = ""


class ListingPage(BaseModel):
	apps: List[AppSummary] = Field(default_factory=list)
	page: int = 1
	error: str = ""
	related_keywords: List[str] = Field(default_factory=list)
	developer: Optional[DeveloperInfo] = None


class AppPage(BaseModel):
	"""Everything the app detail view needs."""

	app: Optional[AppDetail] = None
	versions: List[VersionHistoryEntry] = Field(default_factory=list)
	download_link: str = ""
	error: ErrorKind = ErrorKind.NONE
	message: str = ""


class DownloadPage(BaseModel):
	"""Everything the download view needs, including terminal error states."""

	app: Optional[AppDetail] = None
	download: DownloadInfo = Field(default_factory=DownloadInfo)
	versions: List[VersionHistoryEntry] = Field(default_factory=list)
	is_latest: bool = False
	file_name: str = ""
	proxy_link: str = ""
	latest_link: str = ""
	title: str = ""
	error: ErrorKind = ErrorKind.NONE
	message: str = ""
