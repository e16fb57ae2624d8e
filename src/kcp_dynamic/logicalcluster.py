"""Logical cluster selectors: a concrete cluster name or the all-clusters wildcard."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from kcp_dynamic.validation import validate_cluster_name

SEPARATOR = ":"
WILDCARD_TOKEN = "*"


@dataclass(frozen=True)
class ClusterName:
    """A concrete logical cluster, e.g. ``root:org:team``."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            msg = f"Logical cluster name must be a string, got {type(self.value).__name__}."
            raise TypeError(msg)
        validate_cluster_name(self.value)

    def __str__(self) -> str:
        return self.value

    @property
    def path(self) -> str:
        return f"/clusters/{self.value}"

    def is_root(self) -> bool:
        return SEPARATOR not in self.value

    def parent(self) -> ClusterName | None:
        """Return the enclosing cluster, or None for a root-level name."""
        head, sep, _ = self.value.rpartition(SEPARATOR)
        if not sep:
            return None
        return ClusterName(head)

    def base(self) -> str:
        """Return the last segment of the name."""
        return self.value.rpartition(SEPARATOR)[2]

    def join(self, child: str) -> ClusterName:
        return ClusterName(f"{self.value}{SEPARATOR}{child}")


class _Wildcard:
    """Selector matching every logical cluster. Use the ``WILDCARD`` singleton."""

    _instance: _Wildcard | None = None

    def __new__(cls) -> _Wildcard:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "WILDCARD"

    def __str__(self) -> str:
        return WILDCARD_TOKEN

    def __reduce__(self) -> str:
        return "WILDCARD"

    @property
    def path(self) -> str:
        return f"/clusters/{WILDCARD_TOKEN}"


WILDCARD: Final = _Wildcard()

ClusterSelector = ClusterName | _Wildcard


def is_wildcard(selector: ClusterSelector) -> bool:
    return selector is WILDCARD


def ensure_selector(selector: object) -> ClusterSelector:
    """Check that ``selector`` is a ClusterName or WILDCARD, never a bare string."""
    if isinstance(selector, ClusterName) or selector is WILDCARD:
        return selector  # type: ignore[return-value]
    if isinstance(selector, str):
        msg = (
            f"Cluster selector must be ClusterName(...) or WILDCARD, got the string {selector!r}. "
            "Wrap concrete names in ClusterName."
        )
        raise TypeError(msg)
    msg = f"Cluster selector must be ClusterName or WILDCARD, got {type(selector).__name__}."
    raise TypeError(msg)
