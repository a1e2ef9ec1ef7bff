import json

import pytest

from humphrey import Config, JSONRenderer, RawRenderer, TemplateError, TemplateRenderer, create_renderer


RESULT = {
    "title": ["Foo", "Bar"],
    "link": [{"href": "/x?a=1&b=2", "text": "<b>Y</b>"}],
    "empty": None,
    "key": "https://example.com/",
}


class TestJSONRenderer:
    """Test suite for JSON output."""

    def test_compact_single_line(self):
        text = JSONRenderer().render(RESULT)
        assert text.endswith("\n")
        assert text.count("\n") == 1
        assert json.loads(text) == RESULT

    def test_pretty(self):
        text = JSONRenderer(pretty=True).render({"title": "Foo"})
        assert text == '{\n  "title": "Foo"\n}\n'

    def test_markup_not_escaped_by_default(self):
        text = JSONRenderer().render(RESULT)
        assert "<b>Y</b>" in text
        assert "a=1&b=2" in text

    def test_escape_html(self):
        text = JSONRenderer(escape_html=True).render(RESULT)
        assert "<" not in text and ">" not in text and "&" not in text
        assert "\\u003cb\\u003eY\\u003c/b\\u003e" in text
        assert json.loads(text) == RESULT

    def test_unicode_kept(self):
        assert JSONRenderer().render({"t": "żółw"}) == '{"t": "żółw"}\n'


class TestTemplateRenderer:
    """Test suite for template output."""

    def test_fields_and_iteration(self):
        renderer = TemplateRenderer("{{ key }}\n{% for t in title %}{{ t }}\n{% endfor %}")
        assert renderer.render(RESULT) == "https://example.com/\nFoo\nBar\n"

    def test_record_fields(self):
        renderer = TemplateRenderer("{% for l in link %}{{ l.href }} {{ l.text }}{% endfor %}")
        assert renderer.render(RESULT) == "/x?a=1&b=2 <b>Y</b>"

    def test_trailing_newline_kept(self):
        assert TemplateRenderer("{{ key }}\n").render(RESULT) == "https://example.com/\n"

    def test_syntax_error(self):
        with pytest.raises(TemplateError):
            TemplateRenderer("{% for t in title %}")

    def test_unknown_filter(self):
        with pytest.raises(TemplateError):
            TemplateRenderer("{{ title | nosuchfilter }}")

    def test_render_error(self):
        renderer = TemplateRenderer("{{ missing.attr }}")
        with pytest.raises(TemplateError):
            renderer.render(RESULT)

    def test_runtime_error(self):
        renderer = TemplateRenderer("{{ key + 1 }}")
        with pytest.raises(TemplateError):
            renderer.render(RESULT)


class TestRawRenderer:
    """Test suite for raw output."""

    def test_values_one_per_line(self):
        assert RawRenderer(key="key").render(RESULT) == "Foo\nBar\n/x?a=1&b=2\n<b>Y</b>\n"

    def test_nested_objects(self):
        result = {"page": {"meta": "M", "links": [{"href": "/a", "text": None}]}, "key": "u"}
        assert RawRenderer(key="key").render(result) == "M\n/a\n"

    def test_nothing_matched(self):
        assert RawRenderer(key="key").render({"title": None, "key": "u"}) == ""


class TestCreateRenderer:
    """Test suite for renderer selection."""

    def test_default_is_json(self):
        renderer = create_renderer(Config(pretty=True, escape_html=True))
        assert isinstance(renderer, JSONRenderer)
        assert renderer.pretty and renderer.escape_html

    def test_raw(self):
        renderer = create_renderer(Config(raw=True, key="url"))
        assert isinstance(renderer, RawRenderer)
        assert renderer.key == "url"

    def test_template_wins(self):
        assert isinstance(create_renderer(Config(raw=True, tmpl="{{ key }}")), TemplateRenderer)

    def test_bad_template_fails_at_creation(self):
        with pytest.raises(TemplateError):
            create_renderer(Config(tmpl="{{"))
