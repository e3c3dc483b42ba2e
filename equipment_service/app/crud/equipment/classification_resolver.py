# app/crud/equipment/classification_resolver.py
from typing import Callable, Dict, Iterable, Optional
from sqlalchemy.orm import Session

from shared.core.exceptions import NotFoundError
from ...models.equipment.classification_node import ClassificationNode


def classification_forest(db: Session) -> Callable[[], Iterable[ClassificationNode]]:
    """Tree provider returning every top-level node."""
    def load():
        return (
            db.query(ClassificationNode)
            .filter(ClassificationNode.parent_id.is_(None))
            .order_by(ClassificationNode.code.asc())
            .all()
        )
    return load


class ClassificationResolver:
    """
    Resolves a classification code against the forest handed out by
    `tree_provider`.

    The forest is walked depth-first once, each node's code checked before its
    children, and the resulting code -> node index is reused by later calls.
    The provider must hand out an acyclic forest. When two nodes share a code
    the first one met in the walk wins.
    """

    def __init__(self, tree_provider: Callable[[], Iterable[ClassificationNode]]):
        self.tree_provider = tree_provider
        self._index: Optional[Dict[str, ClassificationNode]] = None

    def _build_index(self) -> Dict[str, ClassificationNode]:
        index: Dict[str, ClassificationNode] = {}
        stack = list(reversed(list(self.tree_provider())))
        while stack:
            node = stack.pop()
            index.setdefault(node.code, node)
            # reversed so the first child is visited first
            stack.extend(reversed(list(node.children or [])))
        return index

    def refresh(self):
        self._index = None

    def find(self, code: Optional[str]) -> Optional[ClassificationNode]:
        if not code:
            return None
        if self._index is None:
            self._index = self._build_index()
        return self._index.get(code)

    def resolve(self, code: Optional[str]) -> ClassificationNode:
        node = self.find(code)
        if node is None:
            raise NotFoundError(f"Classification code '{code}' not found")
        return node
