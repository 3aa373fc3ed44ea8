"""
Node Registry

Static set of TEE nodes known to this instance.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from .models import TeeNode

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Read-only view of the TEE network.

    Loaded once at startup; the node tuple never changes afterwards, so a
    running cycle can iterate it without copying.
    """

    def __init__(self, self_id: str, nodes: Iterable[TeeNode]):
        if not self_id:
            raise ValueError("Local node identity (APP_ID) is required")

        seen = set()
        ordered = []
        for node in nodes:
            if node.id in seen:
                logger.warning(f"Ignoring duplicate node entry '{node.id}'")
                continue
            seen.add(node.id)
            ordered.append(node.model_copy(update={"is_self": node.id == self_id}))

        self.self_id = self_id
        self._nodes: Tuple[TeeNode, ...] = tuple(ordered)
        logger.info(f"Loaded {len(self._nodes)} TEE nodes (self: {self_id})")

    @classmethod
    def from_entries(
        cls, self_id: str, entries: Iterable[Tuple[str, str]]
    ) -> "NodeRegistry":
        """Build from (app_id, endpoint) pairs, e.g. Settings.peer_entries()."""
        return cls(
            self_id,
            (TeeNode(id=app_id, endpoint=endpoint) for app_id, endpoint in entries),
        )

    @property
    def nodes(self) -> Tuple[TeeNode, ...]:
        return self._nodes

    def peers(self) -> List[TeeNode]:
        """All nodes except self, in registry order."""
        return [node for node in self._nodes if not node.is_self]

    def get(self, tee_id: str) -> Optional[TeeNode]:
        for node in self._nodes:
            if node.id == tee_id:
                return node
        return None

    def __len__(self) -> int:
        return len(self._nodes)
