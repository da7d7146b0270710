import pytest

from appmirror.config import Settings


SHA1_A = "A" * 40
SHA1_B = "b" * 40
SHA1_C = "c" * 40

APP_URL = "https://apkfab.com/super-app/com.example.super"
BUTTON_HREF = "https://download.example-cdn.net/b/APK/com.example.super"


class MockResponse:
	def __init__(self, url, text="", status_code=200, headers=None):
		self.url = url
		self.text = text
		self.status_code = status_code
		self.headers = headers or {}


class MockSession:
	"""Stands in for requests.Session.

	mapping: url -> body | (status, body) | (status, body, headers) | Exception
	heads: url -> effective url after redirects
	Unknown URLs answer 404.
	"""

	def __init__(self, mapping=None, heads=None):
		self.mapping = mapping or {}
		self.heads = heads or {}
		self.calls = []

	def get(self, url, headers=None, timeout=None, allow_redirects=True):
		self.calls.append({"method": "GET", "url": url, "headers": headers or {}, "allow_redirects": allow_redirects})
		if url not in self.mapping:
			return MockResponse(url, "Not Found", 404)
		value = self.mapping[url]
		if isinstance(value, Exception):
			raise value
		if isinstance(value, tuple):
			status, text = value[0], value[1]
			headers = value[2] if len(value) > 2 else {}
			return MockResponse(url, text, status, headers)
		return MockResponse(url, value)

	def head(self, url, timeout=None, allow_redirects=True):
		self.calls.append({"method": "HEAD", "url": url, "headers": {}, "allow_redirects": allow_redirects})
		value = self.heads.get(url, url)
		if isinstance(value, Exception):
			raise value
		return MockResponse(value, "", 200)

	def urls(self):
		return [c["url"] for c in self.calls]


DETAIL_HTML = """
<html><body>
<div class="detail_banner">
	<img class="icon" data-src="https://image.winudf.com/icon.png" src="data:image/gif;base64,R0lGOD">
	<h1>Super App</h1>
	<span class="rating"><span class="star_icon">4.5</span></span>
	<span class="review_icon">12,345</span>
	<span style="color: #0284fe">v2.3.1</span>
	<span>Update on: 2025-05-10</span>
	<a class="developers" href="https://apkfab.com/developer/Acme%20Inc"><span>Acme Inc</span></a>
	<a href="https://apkfab.com/category/apps/tools">Tools</a>
</div>
<div class="new_detail_price"><meta itemprop="price" content="0"><meta itemprop="priceCurrency" content="USD"></div>
<div class="description"><div class="content"><p><strong>About Super App</strong></p><p>Visit https://example.org/help for help.</p><a href="https://apkfab.com/super-app/com.example.super">Read More</a></div></div>
<div class="screenshot"><img data-src="https://image.winudf.com/s1.png"><img src="data:image/png;base64,AAA"><img src="/static/s2.png"></div>
<div class="detail_more_info"><dl>
	<dt>Package Name</dt><dd>com.example.super</dd>
	<dt>Installs</dt><dd>1,000,000+</dd>
	<dt>Requirements</dt><dd>Android 5.0+</dd>
	<dt>Google Play</dt><dd><a href="https://play.google.com/store/apps/details?id=wrong.pkg">Get it</a></dd>
</dl></div>
<div class="detail_related"><div class="title">Similar Apps</div>
	<a class="item" href="https://apkfab.com/other-app/com.example.other" title="Other App"><div class="icon"><img data-src="https://image.winudf.com/o.png"></div><span class="star_icon">4.1</span><span class="review_icon">2000</span></a>
	<a class="item" href="/no-package">Broken</a>
</div>
<div class="related"><div class="title">More From Developer</div>
	<a class="item" href="/dev-app/com.example.dev" title="Dev App"></a>
</div>
</body></html>
"""

DOWNLOAD_HTML = f"""
<html><body>
<div class="app_info">
	<h1 class="app-name">Super App <small>Version: 2.3.1</small></h1>
	<span>Update on: 2025-05-10</span>
</div>
<a class="down_btn" href="{BUTTON_HREF}" data-dt-file-size="45.2 MB" data-dt-file-type="apk">Download APK (45.2 MB)</a>
</body></html>
"""

VERSIONS_HTML = f"""
<html><body>
<div class="version_history">
	<div class="list">
		<div class="package_info">
			<span class="version">2.3.1</span>
			<div class="text"><span>May 10, 2025</span><span>45.2 MB</span></div>
			<span class="apk">APK</span>
		</div>
		<div class="info-fix"><div class="info_box">
			<div class="whats_new"><p>Bug fixes</p></div>
			<div class="table">
				<div class="table-row table-head"><div class="table-cell">Variant</div><div class="table-cell">Arch</div></div>
				<div class="table-row">
					<div class="table-cell">
						<div class="popup"><p>Variant 1</p><p>2025-05-10</p></div>
						<div class="ver-info"><p><strong>SHA1:</strong> {SHA1_A}</p><p><strong>Size:</strong> 45.2 MB</p><p><strong>Base APK:</strong> base.apk</p></div>
					</div>
					<div class="table-cell">arm64-v8a</div>
					<div class="table-cell">Android 5.0+</div>
					<div class="table-cell">nodpi</div>
					<div class="table-cell"><a class="down_text" href="/super-app/com.example.super/download?sha1={SHA1_A}">Download APK</a></div>
				</div>
				<div class="table-row">
					<div class="table-cell">
						<div class="popup"><p>Variant 2</p><p>2025-05-09</p></div>
						<div class="ver-info"><p><strong>Size:</strong> 45.2MB</p></div>
					</div>
					<div class="table-cell">armeabi-v7a</div>
					<div class="table-cell">Android 5.0+</div>
					<div class="table-cell">nodpi</div>
					<div class="table-cell"><a class="down_text" href="/super-app/com.example.super/download?h={SHA1_B}">Download APK</a></div>
				</div>
			</div>
		</div></div>
	</div>
	<div class="list">
		<div class="package_info">
			<span class="version">2.3.0</span>
			<div class="text"><span>April 1, 2025</span><span>44 MB</span></div>
			<span class="xapk">XAPK</span>
		</div>
		<div class="v_h_button"><a class="down" href="https://apkfab.com/super-app/com.example.super/download?sha1={SHA1_C}">Download</a></div>
		<div class="info-fix"><div class="info_box">
			<p><strong>Architecture:</strong> universal</p>
			<p><strong>Requires Android:</strong> Android 6.0+</p>
		</div></div>
	</div>
	<div class="list">
		<div class="package_info"><span class="version">1.0.0</span></div>
	</div>
</div>
</body></html>
"""


@pytest.fixture
def settings():
	return Settings(_env_file=None, source_domain="apkfab.com", user_domain="mirror.example", retries=0)


@pytest.fixture
def site_mapping():
	return {
		APP_URL: DETAIL_HTML,
		APP_URL + "/download": DOWNLOAD_HTML,
		APP_URL + "/versions": VERSIONS_HTML,
	}
