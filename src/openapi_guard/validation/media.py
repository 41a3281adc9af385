"""Content negotiation helpers.

Media types are only parsed as far as ``type/subtype;params``. Anything that
does not look like that is kept opaque and compared by its raw value.
"""

DEFAULT_MEDIA_TYPE = "application/json;charset=utf-8"


class MediaType:
    def __init__(self, raw: str):
        self.raw = raw.strip()
        self.main_type: str | None = None
        self.sub_type: str | None = None
        self.parameters: dict[str, str] = {}

        essence, *params = self.raw.split(";")
        main, sep, sub = essence.strip().partition("/")
        if sep and main and sub and "/" not in sub and " " not in essence.strip():
            self.main_type = main.lower()
            self.sub_type = sub.lower()
            for param in params:
                key, _, value = param.partition("=")
                if key.strip():
                    self.parameters[key.strip().lower()] = value.strip().strip('"')

    @property
    def opaque(self) -> bool:
        return self.main_type is None

    @property
    def essence(self) -> str:
        if self.opaque:
            return self.raw
        return f"{self.main_type}/{self.sub_type}"

    def matches(self, other: "MediaType") -> bool:
        """Equality ignoring parameters; opaque values must match exactly."""
        if self.opaque or other.opaque:
            return self.raw == other.raw
        return self.essence == other.essence

    def __eq__(self, other) -> bool:
        return isinstance(other, MediaType) and self.matches(other)

    def __hash__(self) -> int:
        return hash(self.essence)

    def __repr__(self) -> str:
        return f"MediaType({self.raw!r})"

    def __str__(self) -> str:
        return self.raw


def effective_media_type(content_type: str | None) -> MediaType:
    """Media type from a ``content-type`` header value, JSON when absent."""
    if content_type is None:
        return MediaType(DEFAULT_MEDIA_TYPE)
    return MediaType(content_type)


def is_json(media_type: MediaType) -> bool:
    # no +json suffixes, no wildcards
    return media_type.main_type == "application" and media_type.sub_type == "json"


def lookup_media(content: dict | None, media_type: MediaType):
    """Find the media object declared for *media_type* in a content map."""
    for declared, media in (content or {}).items():
        if MediaType(str(declared)).matches(media_type):
            return media
    return None


def _media_ranges(accept: str) -> list[tuple[MediaType, float]]:
    ranges = []
    for item in accept.split(","):
        if not item.strip():
            continue
        media_range = MediaType(item)
        try:
            quality = float(media_range.parameters.get("q", "1"))
        except ValueError:
            quality = 1.0
        ranges.append((media_range, quality))
    return ranges


def accepts(accept: str | None, media_type: MediaType) -> bool:
    """Whether an ``Accept`` header value admits *media_type*.

    A missing header accepts everything; ``q=0`` ranges exclude.
    """
    if accept is None or not accept.strip():
        return True
    for media_range, quality in _media_ranges(accept):
        if quality <= 0:
            continue
        if media_range.opaque or media_type.opaque:
            if media_range.raw == media_type.raw:
                return True
            continue
        if media_range.main_type == "*" and media_range.sub_type == "*":
            return True
        if media_range.main_type == media_type.main_type and media_range.sub_type in ("*", media_type.sub_type):
            return True
    return False


def acceptable_any(accept: str | None, media_types: list[str]) -> bool:
    return any(accepts(accept, MediaType(m)) for m in media_types)
