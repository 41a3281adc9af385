from openapi_guard.validation.media import (
    DEFAULT_MEDIA_TYPE,
    MediaType,
    acceptable_any,
    accepts,
    effective_media_type,
    is_json,
    lookup_media,
)


class TestEffectiveMediaType:
    def test_defaults_to_json(self):
        media = effective_media_type(None)
        assert media.raw == DEFAULT_MEDIA_TYPE
        assert is_json(media)

    def test_uses_header(self):
        media = effective_media_type("text/plain; charset=utf-8")
        assert media.essence == "text/plain"
        assert media.parameters == {"charset": "utf-8"}

    def test_malformed_kept_opaque(self):
        media = effective_media_type("madeup")
        assert media.opaque
        assert media.essence == "madeup"
        assert not is_json(media)


class TestIsJson:
    def test_json(self):
        assert is_json(MediaType("application/json"))
        assert is_json(MediaType("Application/JSON; charset=utf-8"))

    def test_not_json(self):
        assert not is_json(MediaType("application/problem+json"))
        assert not is_json(MediaType("application/*"))
        assert not is_json(MediaType("text/json"))


class TestLookupMedia:
    def test_ignores_parameters(self):
        content = {"application/json": {"schema": {"type": "object"}}}
        assert lookup_media(content, MediaType(DEFAULT_MEDIA_TYPE)) == {"schema": {"type": "object"}}

    def test_other_types(self):
        content = {"application/json": {}, "fake/type": {"schema": {"type": "integer"}}}
        assert lookup_media(content, MediaType("fake/type")) == {"schema": {"type": "integer"}}

    def test_missing(self):
        assert lookup_media({"application/json": {}}, MediaType("text/plain")) is None
        assert lookup_media(None, MediaType("text/plain")) is None

    def test_opaque_compared_raw(self):
        assert lookup_media({"madeup": {"x": 1}}, MediaType("madeup")) == {"x": 1}


class TestAccepts:
    def test_missing_header_accepts_all(self):
        assert accepts(None, MediaType("text/plain"))
        assert accepts("", MediaType("text/plain"))

    def test_wildcards(self):
        json = MediaType("application/json")
        assert accepts("*/*", json)
        assert accepts("application/*", json)
        assert not accepts("text/*", json)

    def test_list_and_quality(self):
        json = MediaType("application/json")
        assert accepts("text/html, application/json;q=0.5", json)
        assert not accepts("application/json;q=0", json)

    def test_acceptable_any(self):
        assert acceptable_any("fake/type", ["application/json", "fake/type"])
        assert not acceptable_any("text/plain", ["application/json", "fake/type"])
