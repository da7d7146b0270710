from appmirror.core.parser import (
	attr_of,
	definition_value,
	first_all,
	first_match,
	image_src,
	inner_html,
	labelled_value,
	next_paragraph_after,
	parse_html,
	text_of,
)


def test_parse_html_tolerates_broken_markup():
	soup = parse_html("<div><p>one<p>two</div></span>")
	assert [p.get_text() for p in soup.find_all("p")] == ["one", "two"]
	assert parse_html("").get_text() == ""


def test_fallback_chain_order():
	soup = parse_html('<div><h1 class="b">B</h1><h2 class="a">A</h2></div>')
	assert text_of(first_match(soup, ["h3", "h2.a", "h1.b"])) == "A"
	assert first_match(soup, ["h3", "section"]) is None
	assert first_match(None, ["h1"]) is None
	assert [t.name for t in first_all(soup, ["li", "h1, h2"])] == ["h1", "h2"]


def test_attributes_and_images():
	soup = parse_html(
		'<a data-x="" href=" /x ">x</a>'
		'<img class="i1" src="data:image/gif;base64,AA" data-src="https://c.example/a.png">'
		'<img class="i2" src="/placeholder.png" data-original="/b.png">'
		'<img class="i3" src="data:image/png;base64,AA">'
	)
	assert attr_of(soup.a, "data-x", "href") == "/x"
	assert image_src(soup.select_one("img.i1")) == "https://c.example/a.png"
	assert image_src(soup.select_one("img.i2")) == "/b.png"
	assert image_src(soup.select_one("img.i3")) == ""


def test_label_helpers():
	soup = parse_html(
		"<div><p><strong>SHA1:</strong> abc </p><p>Package Name:</p><p>com.x.y</p>"
		"<dl><dt>Installs:</dt><dd>10+</dd></dl></div>"
	)
	assert labelled_value(soup, "SHA1:") == "abc"
	assert labelled_value(soup, "Size:") == ""
	assert text_of(next_paragraph_after(soup, "Package Name:")) == "com.x.y"
	assert text_of(definition_value(soup, "Installs")) == "10+"
	assert definition_value(soup, "Nope") is None


def test_inner_html():
	node = parse_html("<section><b>x</b> y</section>").section
	assert inner_html(node) == "<b>x</b> y"


def test_unparsable_selector_is_skipped():
	soup = parse_html('<div class="list"><a href="/x"><div class="icon"></div></a></div>')
	bad = 'div:has(a > div[class="icon"]'
	assert first_match(soup, [bad, "a"]).name == "a"
	assert [t.name for t in first_all(soup, [bad, "div.icon"])] == ["div"]
	assert first_all(soup, [bad]) == []
