"""Errors raised while loading a contract or building its registry."""


class ContractError(ValueError):
    """The contract document is unusable (unreadable, malformed, bad $ref)."""


class PathConflictError(ContractError):
    """Two declared templates end at the same node of the path index."""
