from appmirror.core.versions import (
	find_variant_by_sha1,
	match_detail_variant,
	match_latest_variant,
	normalize_requirement,
	parse_download_button,
	parse_versions_page,
)

from conftest import BUTTON_HREF, DOWNLOAD_HTML, SHA1_B, SHA1_C, VERSIONS_HTML


SHA1_A_LOWER = "a" * 40


def _entries():
	return parse_versions_page(VERSIONS_HTML, "super-app", "com.example.super")


def test_versions_page_entries():
	entries = _entries()
	assert [e.version for e in entries] == ["2.3.1", "2.3.0"]
	first, second = entries
	assert (first.date, first.size, first.type) == ("May 10, 2025", "45.2 MB", "APK")
	assert first.whats_new_html == "<p>Bug fixes</p>"
	assert second.type == "XAPK"


def test_table_variants():
	v1, v2 = _entries()[0].variants
	assert v1.sha1 == SHA1_A_LOWER
	assert v1.variant_id == "Variant 1"
	assert v1.date == "2025-05-10"
	assert (v1.arch, v1.android_requirement, v1.dpi) == ("arm64-v8a", "Android 5.0+", "nodpi")
	assert v1.base_apk == "base.apk"
	assert v1.download_link == f"/super-app/com.example.super/download?sha1={SHA1_A_LOWER}"
	assert v2.sha1 == SHA1_B
	assert v2.size == "45.2MB"


def test_single_variant_defaults():
	(v,) = _entries()[1].variants
	assert v.sha1 == SHA1_C
	assert v.arch == "universal"
	assert v.android_requirement == "Android 6.0+"
	assert v.dpi == "N/A"
	assert v.size == "44 MB"
	assert v.type == "XAPK"


def test_versions_missing_container():
	assert parse_versions_page("<html><body></body></html>", "s", "p.q") == []


def test_variant_without_sha1_is_dropped():
	html = VERSIONS_HTML.replace(f"?h={SHA1_B}", "")
	assert len(parse_versions_page(html, "super-app", "com.example.super")[0].variants) == 1


def test_match_latest_first_wins():
	entries = _entries()
	entry, variant = match_latest_variant(entries, "45.2 mb")
	assert entry.version == "2.3.1"
	assert variant.sha1 == SHA1_A_LOWER
	assert match_latest_variant(entries, "44 MB") is None
	assert match_latest_variant(entries, "") is None
	assert match_latest_variant([], "45.2 MB") is None


def test_find_variant_by_sha1():
	entries = _entries()
	entry, variant = find_variant_by_sha1(entries, SHA1_C.upper())
	assert entry.version == "2.3.0"
	assert variant.sha1 == SHA1_C
	assert find_variant_by_sha1(entries, "d" * 40) is None
	assert find_variant_by_sha1(entries, "deadbeef") is None


def test_parse_download_button_attributes():
	b = parse_download_button(DOWNLOAD_HTML)
	assert b.href == BUTTON_HREF
	assert (b.file_size, b.file_type) == ("45.2 MB", "APK")
	assert b.version_name == "2.3.1"
	assert b.update_date == "2025-05-10"
	assert b.sha1 == ""


def test_parse_download_button_text_fallback():
	html = f'<a class="down_btn" href="https://d.example/x?h={SHA1_C}">Download XAPK (120 MB)</a>'
	b = parse_download_button(html)
	assert (b.file_size, b.file_type) == ("120 MB", "XAPK")
	assert b.sha1 == SHA1_C


def test_parse_download_button_missing():
	assert parse_download_button('<a class="down_btn" href="#">Download</a>') is None
	assert parse_download_button("<p>no button</p>") is None


def test_detail_match_requires_size_and_requirement():
	html = VERSIONS_HTML.replace("<div class=\"table-cell\">Android 5.0+</div>", "<div class=\"table-cell\">Android 8.0+</div>", 1)
	entries = parse_versions_page(html, "super-app", "com.example.super")
	entry, variant = match_detail_variant(entries, "45.2 MB", "Android 5.0+")
	assert entry.version == "2.3.1"
	assert variant.sha1 == SHA1_B
	assert match_detail_variant(entries, "45.2 MB", "Android 9.0+") is None
	assert match_detail_variant(entries, "45.2 MB", "") is None
	assert match_detail_variant(entries, "", "Android 5.0+") is None


def test_normalize_requirement():
	assert normalize_requirement("Android 5.0+") == "5.0"
	assert normalize_requirement("Requires Android 10") == "10"
	assert normalize_requirement("Varies") == ""
