import pytest

from ..exceptions import ConfigurationError
from ..models import Request

FORMATS = {"jsonld": ["application/ld+json"], "xml": ["text/xml"]}


@pytest.fixture
def target():
    from ..negotiation import FormatNegotiator

    return FormatNegotiator


class TestFormatNegotiator:
    def test_content_type(self, target):
        assert target(FORMATS).resolve(Request(method="POST", content_type="text/xml")) == "xml"

    def test_content_type_with_parameters(self, target):
        request = Request(method="POST", content_type="Application/LD+JSON; charset=utf-8")
        assert target(FORMATS).resolve(request) == "jsonld"

    def test_hint_wins_over_unmatched_content_type(self, target):
        request = Request(method="POST", content_type="text/csv", format="xml")
        assert target(FORMATS).resolve(request) == "xml"

    def test_hint_wins_over_matched_content_type(self, target):
        request = Request(method="POST", content_type="text/xml", format="jsonld")
        assert target(FORMATS).resolve(request) == "jsonld"

    def test_unknown_hint_is_ignored(self, target):
        request = Request(method="POST", content_type="text/xml", format="yaml")
        assert target(FORMATS).resolve(request) == "xml"

    @pytest.mark.parametrize(
        "content_type,format",
        [(None, None), (None, "unknown"), ("text/csv", None), ("", None)],
    )
    def test_default(self, target, content_type, format):
        request = Request(method="POST", content_type=content_type, format=format)
        assert target(FORMATS).resolve(request) == "jsonld"

    def test_first_match_wins(self, target):
        negotiator = target({"json": ["application/json"], "jsonapi": ["application/json"]})
        assert negotiator.resolve(Request(content_type="application/json")) == "json"

    def test_empty(self, target):
        negotiator = target({})
        with pytest.raises(ConfigurationError):
            negotiator.resolve(Request(method="POST", content_type="text/xml"))
        with pytest.raises(ConfigurationError):
            negotiator.default_format

    def test_formats_are_copied(self, target):
        formats = {"xml": ["text/xml"]}
        negotiator = target(formats)
        formats["json"] = ["application/json"]
        formats["xml"].append("application/xml")
        assert dict(negotiator.formats) == {"xml": ("text/xml",)}
        with pytest.raises(TypeError):
            negotiator.formats["json"] = ("application/json",)  # type: ignore

    def test_lookups(self, target):
        negotiator = target(FORMATS)
        assert negotiator.get_format("TEXT/XML") == "xml"
        assert negotiator.get_format("text/csv") is None
        assert negotiator.get_format(None) is None
        assert negotiator.get_mime_types("jsonld") == ("application/ld+json",)
        assert negotiator.get_mime_types("csv") == ()
