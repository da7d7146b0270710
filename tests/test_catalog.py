from appmirror.core.catalog import Catalog
from appmirror.models import ErrorKind
from appmirror.utils.urls import AppIdentifier

from conftest import APP_URL, DETAIL_HTML, SHA1_B, VERSIONS_HTML, MockSession


def test_app_page_matches_latest_variant(settings, site_mapping):
	page = Catalog(settings, session=MockSession(site_mapping)).app_page("/super-app/com.example.super")
	assert page.error == ErrorKind.NONE
	assert page.app.file_size == "45.2 MB"
	assert page.app.matched_sha1 == "a" * 40
	assert page.app.matched_arch == "arm64-v8a"
	assert [e.version for e in page.versions] == ["2.3.1", "2.3.0"]
	assert page.download_link == "/super-app/com.example.super/download"


def test_app_page_paid_skips_downloads(settings):
	session = MockSession({APP_URL: DETAIL_HTML.replace('content="0"', 'content="1.49"')})
	page = Catalog(settings, session=session).app_page("https://apkfab.com/super-app/com.example.super")
	assert page.app.is_paid
	assert page.versions == []
	assert page.download_link == ""
	assert session.urls() == [APP_URL]


def test_app_page_bad_identifier(settings):
	session = MockSession()
	page = Catalog(settings, session=session).app_page("/category/tools")
	assert page.error == ErrorKind.APP_DETAILS_ERROR
	assert session.calls == []


def test_app_page_without_versions(settings):
	page = Catalog(settings, session=MockSession({APP_URL: DETAIL_HTML})).app_page("/super-app/com.example.super")
	assert page.error == ErrorKind.NONE
	assert page.versions == []
	assert page.app.matched_sha1 is None


def test_source_app_url(settings):
	catalog = Catalog(settings, session=MockSession())
	assert catalog.source_app_url(AppIdentifier("", "com.x.y")) == "https://apkfab.com/com.x.y"
	assert catalog.source_app_url(AppIdentifier("my-app", "com.x.y")) == "https://apkfab.com/my-app/com.x.y"


def test_app_page_match_checks_android_requirement(settings, site_mapping):
	site_mapping[APP_URL + "/versions"] = VERSIONS_HTML.replace(
		"<div class=\"table-cell\">Android 5.0+</div>", "<div class=\"table-cell\">Android 8.0+</div>", 1
	)
	page = Catalog(settings, session=MockSession(site_mapping)).app_page("/super-app/com.example.super")
	assert page.app.android_requirement == "Android 5.0+"
	assert page.app.matched_sha1 == SHA1_B
	assert page.app.matched_arch == "armeabi-v7a"
