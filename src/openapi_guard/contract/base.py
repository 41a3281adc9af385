"""Data models for operations resolved out of an OpenAPI contract.

The registry converts the raw contract mapping into these models so the
validation pipelines never have to walk the document themselves.
"""

from pydantic import BaseModel


class ParameterSpec(BaseModel):
    """A single declared operation parameter."""

    name: str
    location: str  # query / path / header / cookie
    required: bool = False
    allow_empty_value: bool = False
    param_schema: dict | None = None  # may still be a {"$ref": ...}

    model_config = {"frozen": True}


class ResolvedOperation(BaseModel):
    """One (method, template path) pair looked up for a live request."""

    template_path: str  # /articles/{articleId}
    method: str  # GET / POST / PUT / DELETE / PATCH ...
    parameters: list[ParameterSpec] = []
    request_body: dict | None = None  # {media_type: media object}
    responses: dict[str, dict] = {}  # {status | NXX | default: response object}
    declared: bool = True  # False for server-answered pre-flight requests

    model_config = {"frozen": True}

    def query_parameters(self) -> list[ParameterSpec]:
        return [p for p in self.parameters if p.location == "query"]

    def response_for(self, status: int) -> dict | None:
        """Pick the response declared for *status*.

        Exact code first, then the ``2XX`` style range, then ``default``.
        """
        for key in (str(status), f"{str(status)[0]}XX", "default"):
            for code, response in self.responses.items():
                if code.upper() == key.upper():
                    return response
        return None

    def declared_response_media_types(self) -> list[str]:
        media_types = []
        for response in self.responses.values():
            for media_type in (response.get("content") or {}):
                if media_type not in media_types:
                    media_types.append(media_type)
        return media_types
