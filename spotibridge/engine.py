"""Contracts consumed from the host playback engine.

The dispatcher only needs three things from its host: the pre-existing
`resolve` entry point, the least-used node (for its REST API revision) and a
generic track constructor. `UnresolvedTrack` and `StandaloneEngine` are small
default implementations for hosts that do not provide their own, and for the
CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from spotibridge.domain.models import LoadResult


@runtime_checkable
class EngineNode(Protocol):
    rest_version: str


@runtime_checkable
class PlaybackEngine(Protocol):
    """Minimal host surface the resolver is installed onto."""

    async def resolve(self, *args: Any, **kwargs: Any) -> Any: ...

    def least_used_node(self) -> EngineNode: ...


# (metadata, requester, node) -> engine track
TrackFactory = Callable[[dict[str, Any], Any, Optional[EngineNode]], Any]


@dataclass
class UnresolvedTrack:
    """Generic engine track that still needs a playable stream (`track` is empty)."""

    track: str
    info: dict[str, Any]
    requester: Any = None
    node: Optional[EngineNode] = None

    @classmethod
    def from_metadata(
        cls, metadata: dict[str, Any], requester: Any, node: Optional[EngineNode]
    ) -> "UnresolvedTrack":
        return cls(
            track=metadata.get("track", ""),
            info=dict(metadata.get("info") or {}),
            requester=requester,
            node=node,
        )

    @property
    def identifier(self) -> str:
        return self.info["identifier"]

    @property
    def title(self) -> str:
        return self.info["title"]

    @property
    def author(self) -> str:
        return self.info["author"]

    @property
    def length(self) -> int:
        return self.info["length"]

    @property
    def uri(self) -> str:
        return self.info["uri"]

    def to_dict(self) -> dict[str, Any]:
        return {"track": self.track, "info": dict(self.info)}


@dataclass
class Node:
    rest_version: str = "v4"
    name: str = "local"


@dataclass
class StandaloneEngine:
    """
    Host with a single node whose own resolver finds nothing.

    Used when SpotiBridge runs without a real playback engine (CLI, tests).
    """

    nodes: list[Node] = field(default_factory=lambda: [Node()])

    def least_used_node(self) -> Node:
        if not self.nodes:
            raise LookupError("No playback nodes available")
        return self.nodes[0]

    async def resolve(self, query: Any = None, requester: Any = None, **_: Any) -> LoadResult:
        empty = "empty" if self.least_used_node().rest_version == "v4" else "NO_MATCHES"
        return LoadResult(load_type=empty, tracks=[])
