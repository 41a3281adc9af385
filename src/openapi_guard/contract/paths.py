"""Reverse lookup from concrete request paths to declared template paths.

See https://swagger.io/specification/#path-templating-matching
"""

from urllib.parse import unquote

from openapi_guard.contract.errors import PathConflictError


def split_path(path: str) -> list[str]:
    """Split a path into percent-decoded segments, ignoring empty ones."""
    return [unquote(segment) for segment in path.split("/") if segment]


def is_capture(segment: str) -> bool:
    return len(segment) >= 2 and segment.startswith("{") and segment.endswith("}")


class PathTemplateIndex:
    """Prefix trie over path segments with at most one capture child per node."""

    def __init__(self):
        self.terminal: str | None = None
        self.capture: PathTemplateIndex | None = None
        self.children: dict[str, PathTemplateIndex] = {}

    @classmethod
    def build(cls, templates) -> "PathTemplateIndex":
        index = cls()
        for template in templates:
            index.insert(template)
        return index

    def insert(self, template: str) -> None:
        node = self
        for segment in template.split("/"):
            if not segment:
                continue
            if is_capture(segment):
                if node.capture is None:
                    node.capture = PathTemplateIndex()
                node = node.capture
            else:
                node = node.children.setdefault(unquote(segment), PathTemplateIndex())

        if node.terminal is not None:
            raise PathConflictError(f"path conflict between {template} and {node.terminal}")
        node.terminal = template

    def lookup(self, path: str) -> str | None:
        """Return the declared template matching *path*, or None.

        Literal children are tried before the capture child; if the literal
        branch dead-ends, the search backtracks into the capture branch.
        """
        return self._lookup(split_path(path))

    def _lookup(self, segments: list[str]) -> str | None:
        if not segments:
            return self.terminal

        head, rest = segments[0], segments[1:]
        child = self.children.get(head)
        if child is not None:
            found = child._lookup(rest)
            if found is not None:
                return found
        if self.capture is not None:
            return self.capture._lookup(rest)
        return None

    def templates(self) -> list[str]:
        """All templates stored in the trie, depth-first."""
        found = [self.terminal] if self.terminal is not None else []
        for child in self.children.values():
            found.extend(child.templates())
        if self.capture is not None:
            found.extend(self.capture.templates())
        return found
