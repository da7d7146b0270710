from appmirror.core.catalog import Catalog
from appmirror.core.download import download_file_name, proxy_link
from appmirror.core.session import TransportError
from appmirror.models import AppDetail, DownloadInfo, ErrorKind

from conftest import APP_URL, BUTTON_HREF, DETAIL_HTML, DOWNLOAD_HTML, SHA1_C, MockSession


PATH = "/super-app/com.example.super/download"
PINNED_URL = APP_URL + "/download?sha1=" + SHA1_C


def test_latest_matched_variant(settings, site_mapping):
	session = MockSession(site_mapping)
	page = Catalog(settings, session=session).download_page(PATH)
	assert page.error == ErrorKind.NONE
	info = page.download
	assert info.final_url == BUTTON_HREF
	assert info.sha1 == "a" * 40
	assert (info.arch, info.dpi) == ("arm64-v8a", "nodpi")
	assert info.android_requirement == "Android 5.0+"
	assert (info.file_size, info.file_type) == ("45.2 MB", "APK")
	assert info.version_name == "2.3.1"
	assert page.is_latest
	assert page.title == "Download APK 2.3.1"
	assert page.file_name == "super-app_2.3.1_mirror.example.apk"
	assert page.proxy_link == "/download-proxy?id=super-app%2Fcom.example.super&file=super-app_2.3.1_mirror.example.apk"
	assert page.latest_link == PATH
	assert len(page.versions) == 2
	assert session.urls() == [APP_URL, APP_URL + "/download", APP_URL + "/versions"]


def test_latest_unmatched_uses_defaults(settings, site_mapping):
	site_mapping[APP_URL + "/download"] = DOWNLOAD_HTML.replace("45.2 MB", "50 MB")
	page = Catalog(settings, session=MockSession(site_mapping)).download_page(PATH)
	info = page.download
	assert page.error == ErrorKind.NONE
	assert info.final_url == BUTTON_HREF
	assert info.sha1 == ""
	assert (info.arch, info.dpi) == ("Universal", "No Dpi")
	assert info.file_size == "50 MB"
	assert info.version_name == "2.3.1"


def test_latest_without_any_download_data(settings):
	page = Catalog(settings, session=MockSession({APP_URL: DETAIL_HTML})).download_page(PATH)
	assert page.error == ErrorKind.DOWNLOAD_NOT_AVAILABLE
	assert page.message == "Download information could not be retrieved for this version."
	assert page.download.final_url == ""
	assert page.download.file_size == "N/A"
	assert page.proxy_link == ""
	assert page.title == "Download Unavailable"


def test_pinned_sha1_found(settings, site_mapping):
	site_mapping[PINNED_URL] = DOWNLOAD_HTML
	session = MockSession(site_mapping)
	page = Catalog(settings, session=session).download_page(PATH, sha1=SHA1_C.upper())
	assert page.error == ErrorKind.NONE
	info = page.download
	assert info.sha1 == SHA1_C
	assert info.version_name == "2.3.0"
	assert info.file_type == "XAPK"
	assert (info.arch, info.file_size) == ("universal", "44 MB")
	assert info.final_url == BUTTON_HREF
	assert not page.is_latest
	assert page.file_name == "super-app_2.3.0_mirror.example.xapk"
	assert page.proxy_link.endswith("&sha1=" + SHA1_C)
	assert APP_URL + "/download" not in session.urls()


def test_pinned_sha1_not_found(settings, site_mapping):
	sha1 = "d" * 40
	page = Catalog(settings, session=MockSession(site_mapping)).download_page(PATH, sha1=sha1)
	assert page.error == ErrorKind.INVALID_SHA1
	assert page.message == f"Requested version (SHA1: {sha1}) not found on the versions page."
	assert page.download.final_url == ""
	assert page.proxy_link == ""


def test_pinned_sha1_without_download_button(settings, site_mapping):
	page = Catalog(settings, session=MockSession(site_mapping)).download_page(PATH, sha1=SHA1_C)
	assert page.error == ErrorKind.DOWNLOAD_NOT_AVAILABLE
	assert page.download.version_name == "2.3.0"
	assert page.download.final_url == ""


def test_malformed_sha1_fetches_nothing(settings, site_mapping):
	session = MockSession(site_mapping)
	page = Catalog(settings, session=session).download_page(PATH, sha1="deadbeef")
	assert page.error == ErrorKind.INVALID_SHA1
	assert page.latest_link == PATH
	assert session.calls == []


def test_detail_failure_skips_download_lookups(settings, site_mapping):
	site_mapping[APP_URL] = "<html><body><p>moved</p></body></html>"
	session = MockSession(site_mapping)
	page = Catalog(settings, session=session).download_page(PATH)
	assert page.error == ErrorKind.APP_DETAILS_ERROR
	assert session.urls() == [APP_URL]


def test_detail_fetch_failure(settings):
	page = Catalog(settings, session=MockSession()).download_page(PATH)
	assert page.error == ErrorKind.APP_DETAILS_ERROR
	assert "404" in page.message


def test_file_name_and_proxy_link():
	app = AppDetail(name="My App!", package_name="com.my.app")
	info = DownloadInfo(version_name="N/A", file_type="xapk")
	assert download_file_name(app, info, "abcdef1" + "0" * 33, "Yandux.Biz") == "my-app_s-abcdef1_Yandux.Biz.xapk"
	assert download_file_name(app, DownloadInfo(), "", "Yandux.Biz") == "my-app_latest_Yandux.Biz.apk"
	assert proxy_link("my-app", "com.my.app", "a b.apk") == "/download-proxy?id=my-app%2Fcom.my.app&file=a+b.apk"


def test_download_info_coercion():
	info = DownloadInfo(sha1="NOT-A-HASH", file_type="zip")
	assert (info.sha1, info.file_type) == ("", "APK")
	info.sha1 = "AB" * 20
	assert info.sha1 == "ab" * 20


def test_proxy_adds_cdn_filename_hint(settings):
	session = MockSession(
		{APP_URL + "/download": DOWNLOAD_HTML},
		heads={BUTTON_HREF: "https://d-12.winudf.com/b/APK/super.apk?k=1"},
	)
	res = Catalog(settings, session=session).proxy_download("super-app/com.example.super", "../evil/super.apk")
	assert res == "https://d-12.winudf.com/b/APK/super.apk?k=1&_fn=c3VwZXIuYXBr"


def test_proxy_follows_redirect_with_sha1(settings):
	session = MockSession(
		{
			PINNED_URL: (302, "", {"Location": "/mirror-dl/super-app"}),
			"https://apkfab.com/mirror-dl/super-app?sha1=" + SHA1_C: DOWNLOAD_HTML,
		}
	)
	res = Catalog(settings, session=session).proxy_download("super-app/com.example.super", "super.apk", sha1=SHA1_C)
	assert res == BUTTON_HREF
	assert session.calls[-1]["method"] == "HEAD"


def test_proxy_errors(settings):
	catalog = Catalog(settings, session=MockSession({APP_URL + "/download": "<html><body>gone</body></html>"}))
	missing = catalog.proxy_download("", "x.apk")
	assert isinstance(missing, TransportError)
	assert missing.message == "Missing or invalid parameters."
	no_button = catalog.proxy_download("super-app/com.example.super", "x.apk")
	assert no_button.message.startswith("Could not find the download button link")
	unreachable = catalog.proxy_download("other/com.other.app", "x.apk")
	assert unreachable.message.startswith("Could not fetch download page from source.")
