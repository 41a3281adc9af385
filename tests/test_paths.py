import pytest

from openapi_guard.contract.errors import ContractError, PathConflictError
from openapi_guard.contract.paths import PathTemplateIndex, is_capture, split_path

TEMPLATES = [
    "/",
    "/articles",
    "/articles/latest",
    "/articles/{articleId}",
    "/articles/{articleId}/comments/{commentId}",
    "/users/{userId}/articles",
    "/users/me/settings",
]


def _instantiate(template: str, value: str) -> str:
    return "/" + "/".join(value if is_capture(s) else s for s in template.split("/") if s)


class TestSplitPath:
    def test_drops_empty_segments(self):
        assert split_path("/articles//1/") == ["articles", "1"]

    def test_root(self):
        assert split_path("/") == []

    def test_percent_decodes_segments(self):
        assert split_path("/files/a%20b") == ["files", "a b"]


class TestLookup:
    @pytest.mark.parametrize("template", TEMPLATES)
    @pytest.mark.parametrize("value", ["1", "abc", "x-y_z"])
    def test_every_instantiation_maps_back_to_its_template(self, template, value):
        index = PathTemplateIndex.build(TEMPLATES)
        concrete = _instantiate(template, value)
        # literal siblings take precedence over captures at the same depth
        if concrete in ("/articles/latest", "/users/me/settings"):
            return
        assert index.lookup(concrete) == template

    def test_literal_preferred_over_capture(self):
        index = PathTemplateIndex.build(TEMPLATES)
        assert index.lookup("/articles/latest") == "/articles/latest"
        assert index.lookup("/articles/42") == "/articles/{articleId}"

    def test_backtracks_into_capture_branch(self):
        index = PathTemplateIndex.build(TEMPLATES)
        # "me" matches the literal child, but only {userId} leads to /articles
        assert index.lookup("/users/me/articles") == "/users/{userId}/articles"
        assert index.lookup("/users/me/settings") == "/users/me/settings"

    def test_unknown_paths(self):
        index = PathTemplateIndex.build(TEMPLATES)
        assert index.lookup("/what") is None
        assert index.lookup("/articles/1/comments") is None
        assert index.lookup("/users/1") is None

    def test_trailing_slash_ignored(self):
        index = PathTemplateIndex.build(TEMPLATES)
        assert index.lookup("/articles/") == "/articles"

    def test_root_template(self):
        index = PathTemplateIndex.build(TEMPLATES)
        assert index.lookup("/") == "/"

    def test_empty_index(self):
        assert PathTemplateIndex().lookup("/articles") is None


class TestInsert:
    def test_conflicting_captures_rejected(self):
        index = PathTemplateIndex.build(["/articles/{id}"])
        with pytest.raises(PathConflictError, match="path conflict"):
            index.insert("/articles/{articleId}")

    def test_duplicate_literal_rejected(self):
        with pytest.raises(PathConflictError):
            PathTemplateIndex.build(["/articles", "/articles/"])

    def test_conflict_is_a_contract_error(self):
        assert issubclass(PathConflictError, ContractError)

    def test_single_capture_child(self):
        index = PathTemplateIndex.build(["/a/{x}/b", "/a/{y}/c"])
        assert index.children["a"].capture is not None
        assert index.lookup("/a/1/b") == "/a/{x}/b"
        assert index.lookup("/a/1/c") == "/a/{y}/c"

    def test_templates_lists_everything(self):
        index = PathTemplateIndex.build(TEMPLATES)
        assert sorted(index.templates()) == sorted(TEMPLATES)
