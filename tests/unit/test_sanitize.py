"""
Unit tests for the description sanitizer and attribute normalization.
"""

import pytest

from catalog.sanitize import normalize_attributes, sanitize_description_html


class TestSanitizeDescriptionHtml:

    def test_keeps_allowed_tags_and_strips_disallowed_attributes(self):
        dirty = '<p class="foo" style="color:red">Hola <strong>mundo</strong></p>'
        assert sanitize_description_html(dirty) == "<p>Hola <strong>mundo</strong></p>"

    def test_removes_event_handlers_and_preserves_safe_href(self):
        dirty = "<a href='https://example.com' onclick=\"alert('x')\">Leer más</a>"
        assert sanitize_description_html(dirty) == '<a href="https://example.com">Leer más</a>'

    def test_drops_script_tags_entirely(self):
        dirty = "<script>alert('xss')</script><p>Seguro</p>"
        assert sanitize_description_html(dirty) == "<p>Seguro</p>"

    def test_returns_none_when_nothing_safe_remains(self):
        assert sanitize_description_html("<script>alert(1)</script>") is None

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_input(self, value):
        assert sanitize_description_html(value) is None

    def test_unwraps_unknown_tags_keeping_text(self):
        dirty = "<div><p>Uno <font color='red'>dos</font></p></div>"
        assert sanitize_description_html(dirty) == "<p>Uno dos</p>"

    @pytest.mark.parametrize("href", [
        "javascript:alert(1)",
        "JaVaScRiPt:alert(1)",
        "java\tscript:alert(1)",
        "data:text/html;base64,PHNjcmlwdD4=",
    ])
    def test_unsafe_links_lose_href(self, href):
        result = sanitize_description_html(f'<a href="{href}">x</a>')
        assert result == "<a>x</a>"

    def test_unparseable_href_is_dropped(self):
        assert sanitize_description_html('<p><a href="http://[oops">x</a></p>') == "<p><a>x</a></p>"

    def test_relative_and_mailto_links_kept(self):
        html = '<a href="/categoria/rabbits" title="Rabbits">ver</a> <a href="mailto:hola@tienda.cl">mail</a>'
        assert sanitize_description_html(html) == html

    def test_comments_and_nested_scripts_removed(self):
        dirty = "<!-- interno --><p>Texto<style>p{}</style></p><iframe><script>x()</script></iframe>"
        assert sanitize_description_html(dirty) == "<p>Texto</p>"


class TestNormalizeAttributes:

    def test_trims_and_drops_empty(self):
        raw = {"brand": "  Lelo ", "material": "", "color": None, " longitud ": "9 cm", "": "x"}
        assert normalize_attributes(raw) == {"brand": "Lelo", "longitud": "9 cm"}

    def test_keeps_booleans_and_numbers(self):
        assert normalize_attributes({"sumergible": True, "velocidades": 10, "peso": 0.2}) == {
            "sumergible": True,
            "velocidades": 10,
            "peso": 0.2,
        }

    def test_none_input(self):
        assert normalize_attributes(None) == {}
