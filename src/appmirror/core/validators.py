# AppMirror — Heuristic guards for scraped version, date and hash fields
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import re
from datetime import datetime
from typing import Iterable

from ..models import SHA1_RE


VERSION_PREFIX_RE = re.compile(
	r"^(?:latest\s+version:|version:|updated\s+on:|update\s+on:|updated:?|update:?|date:|release:|v(?=\d))\s*",
	re.I,
)
QUALIFIER_RE = re.compile(r"alpha|beta|rc|nightly|stable|final|build|snapshot|ga", re.I)
MONTHS = (
	"jan(?:uary)?", "feb(?:ruary)?", "mar(?:ch)?", "apr(?:il)?", "may", "june?",
	"july?", "aug(?:ust)?", "sep(?:t(?:ember)?)?", "oct(?:ober)?", "nov(?:ember)?", "dec(?:ember)?",
)
MONTH_DATE_RES = [
	re.compile(rf"\b(?:{m})\.?[\s,]+\d{{1,2}}(?:st|nd|rd|th)?(?:[\s,]+\d{{2,4}})?\b", re.I) for m in MONTHS
] + [
	re.compile(rf"\b\d{{1,2}}(?:st|nd|rd|th)?[\s,]+(?:{m})\.?(?:[\s,]+\d{{2,4}})?\b", re.I) for m in MONTHS
]
NUMERIC_DATE_RES = (
	re.compile(r"^\d{1,2}([/\-.])\d{1,2}\1\d{4}$"),
	re.compile(r"^\d{1,2}/\d{1,2}/\d{2}$"),
	re.compile(r"^\d{4}([/\-.])\d{1,2}\1\d{1,2}$"),
)
VERSION_TOKEN_RE = re.compile(r"^[a-zA-Z0-9]+(?:[._\-][a-zA-Z0-9]+)*$")

DATE_LABEL_RE = re.compile(r"^(?:updated\s+on|update\s+on|updated|update\s+date|update|date)\s*:?\s*", re.I)
NO_DATE_VALUES = {"n/a", "na", "unknown", "varies with device", "-"}
DATE_FORMATS = (
	"%B %d, %Y",
	"%b %d, %Y",
	"%B %d %Y",
	"%b %d %Y",
	"%d %B %Y",
	"%d %b %Y",
	"%Y-%m-%d",
	"%Y/%m/%d",
	"%m/%d/%Y",
	"%d-%m-%Y",
	"%d.%m.%Y",
	"%Y-%m-%d %H:%M:%S",
	"%Y-%m-%dT%H:%M:%S",
)


def strip_version_prefix(text: str) -> str:
	value = (text or "").strip()
	while True:
		stripped = VERSION_PREFIX_RE.sub("", value, count=1).strip()
		if stripped == value:
			return value
		value = stripped


def is_valid_version_string(candidate: str) -> bool:
	"""Reject dates, years and prose that show up where a version should be."""
	original = (candidate or "").strip()
	value = strip_version_prefix(original)
	if not value:
		return False
	if any(r.search(value) for r in MONTH_DATE_RES):
		return False
	if any(r.match(value) for r in NUMERIC_DATE_RES):
		return False
	if len(value) > 70:
		return False
	has_qualifier = bool(QUALIFIER_RE.search(value))
	if value.count(" ") > 2 and not has_qualifier:
		return False
	if re.fullmatch(r"(?:19|20)\d{2}", value) and not original.lower().startswith("v"):
		return False
	if not VERSION_TOKEN_RE.match(value):
		return False
	if re.fullmatch(r"0+", value) and len(value) < 3 and "." not in original and "-" not in original:
		return False
	return bool(re.search(r"\d", value)) or has_qualifier


def is_valid_sha1(value: str) -> bool:
	return bool(SHA1_RE.match((value or "").strip()))


def normalize_sha1(value: str) -> str:
	"""Lowercase hex digest, or '' when the value is not a SHA1."""
	value = (value or "").strip()
	return value.lower() if SHA1_RE.match(value) else ""


def strip_label(text: str, labels: Iterable[str]) -> str:
	"""Drop a leading 'Label:' from scraped text, case-insensitively."""
	value = (text or "").strip()
	for label in labels:
		if value.lower().startswith(label.lower()):
			return value[len(label):].strip()
	return value


def _parse_date(value: str):
	value = re.sub(r"(\d)(st|nd|rd|th)\b", r"\1", value.strip())
	for fmt in DATE_FORMATS:
		try:
			return datetime.strptime(value, fmt)
		except ValueError:
			continue
	return None


def format_display_date(raw: str) -> str:
	"""'2025-05-10' -> 'May 10, 2025'. Placeholders give '', unparsable text is kept."""
	value = (raw or "").strip()
	if not value or value.lower() in NO_DATE_VALUES:
		return ""
	parsed = _parse_date(value)
	if parsed is None:
		unlabelled = DATE_LABEL_RE.sub("", value, count=1)
		if unlabelled.lower() in NO_DATE_VALUES:
			return ""
		parsed = _parse_date(unlabelled)
	if parsed is None:
		return value
	return f"{parsed:%B} {parsed.day}, {parsed.year}"
