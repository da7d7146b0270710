# AppMirror — Text helpers: counts, sizes and whitespace
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import re
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[int, float, str]

UNITS = (
	(Decimal(1_000_000_000), "B"),
	(Decimal(1_000_000), "M"),
	(Decimal(1_000), "K"),
)
MULTIPLIERS = {"K": 1e3, "M": 1e6, "B": 1e9}


def _plain(value: Decimal) -> str:
	if value == value.to_integral_value():
		return str(int(value))
	return format(value.normalize(), "f")


def abbreviate_number(n: Number) -> str:
	"""1500000 -> '1.5M', 1000 -> '1K', 999 -> '999'. One decimal, rounded half up."""
	try:
		value = Decimal(str(n))
	except InvalidOperation:
		return str(n)
	for threshold, suffix in UNITS:
		if value >= threshold:
			scaled = (value / threshold).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
			return _plain(scaled) + suffix
	return _plain(value)


def format_review_count(text: str) -> str:
	text = (text or "").strip()
	if re.search(r"[KMB]$", text, re.I):
		return text
	digits = text.replace(",", "").replace(".", "")
	if re.fullmatch(r"[0-9]+", digits):
		return abbreviate_number(int(digits))
	return text


def review_count_to_number(text: str) -> float:
	"""Leading number with optional K/M/B suffix as a float; 0.0 when absent."""
	m = re.match(r"\s*([\d.,]+)\s*([KMB])?", (text or "").upper())
	if not m:
		return 0.0
	try:
		value = float(m.group(1).replace(",", ""))
	except ValueError:
		return 0.0
	return value * MULTIPLIERS.get(m.group(2) or "", 1.0)


def first_number(text: str, default: str = "") -> str:
	m = re.search(r"\d+(?:\.\d+)?", text or "")
	return m.group(0) if m else default


def normalize_size(text: str) -> str:
	return re.sub(r"\s+", "", (text or "")).lower()


def clean_text(text: str) -> str:
	return " ".join((text or "").split())
