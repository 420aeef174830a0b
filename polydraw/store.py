"""
Per-surface shape store with staged, all-or-nothing updates.

Changes are made on a transaction's working copy and only reach the store on
commit, so a failure part-way through an operation leaves the store as it was.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .merge import MergeResult
from .shape import Shape

logger = logging.getLogger(__name__)


class StoreTransaction:
    """
    Staged set of changes to a :class:`ShapeStore`.

    Example:
        ```python
        transaction = store.transaction()
        transaction.apply(merge(candidate, transaction.shapes))
        if transaction.size <= limit:
            transaction.commit()
        ```

    Attributes:
        store: Store the transaction will be committed to
        added: Shapes added by this transaction that are still staged
    """

    def __init__(self, store: "ShapeStore"):
        self.store = store
        self._staged: Dict[Shape, None] = dict.fromkeys(store)
        self._revision = store.revision
        self.added: List[Shape] = []
        self.committed = False

    @property
    def shapes(self) -> List[Shape]:
        """Shapes as they will be after commit."""
        return list(self._staged)

    @property
    def size(self) -> int:
        return len(self._staged)

    def add(self, shape: Shape) -> None:
        self._staged[shape] = None
        self.added.append(shape)

    def discard(self, shape: Shape) -> None:
        self._staged.pop(shape, None)
        if shape in self.added:
            self.added.remove(shape)

    def apply(self, result: MergeResult) -> None:
        """Stage the removals and additions of a merge."""
        for shape in result.replaced:
            self.discard(shape)
        for shape in result.created:
            self.add(shape)

    def commit(self) -> List[Shape]:
        """
        Write the staged shapes to the store.

        Returns:
            Shapes added by this transaction

        Raises:
            RuntimeError: If the transaction was already committed or the
                store changed since the transaction started
        """
        if self.committed:
            raise RuntimeError("Transaction already committed")
        if self.store.revision != self._revision:
            raise RuntimeError("Store changed while the transaction was open")

        self.store._replace(self._staged)
        self.committed = True

        logger.info(
            "Committed %d new shape(s); store now holds %d", len(self.added), len(self._staged)
        )
        return list(self.added)


class ShapeStore:
    """
    Set of shapes active on one surface.

    Shapes are keyed by identity. Iteration follows insertion order.
    """

    def __init__(self, shapes: Optional[Iterable[Shape]] = None):
        self._shapes: Dict[Shape, None] = dict.fromkeys(shapes or ())
        self.revision = 0

    def __len__(self) -> int:
        return len(self._shapes)

    def __iter__(self) -> Iterator[Shape]:
        return iter(list(self._shapes))

    def __contains__(self, shape: object) -> bool:
        return shape in self._shapes

    def transaction(self) -> StoreTransaction:
        return StoreTransaction(self)

    def discard(self, shape: Shape) -> bool:
        """Remove a shape. Returns False if it was not in the store."""
        if shape not in self._shapes:
            return False
        del self._shapes[shape]
        self.revision += 1
        return True

    def clear(self) -> None:
        self._shapes.clear()
        self.revision += 1

    def _replace(self, shapes: Dict[Shape, None]) -> None:
        self._shapes = dict(shapes)
        self.revision += 1


__all__ = ['ShapeStore', 'StoreTransaction']
