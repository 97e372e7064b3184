"""Key/value Merkle tree over field elements.

Used for both levels of group membership:
- Accounts Tree: one per group, keys are member addresses
- Registry Tree: global, keys are Accounts Tree roots
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Tuple

from zkcred.core.field import ADDRESS_BYTES, FieldLike, to_field_int, to_hex, zero_pad_hex
from zkcred.utils.hash import Hasher, hash_fields
from zkcred.exceptions import (
    DuplicateKeyError,
    KeyNotFoundError,
    TreeCapacityError,
)

logger = logging.getLogger(__name__)


def normalize_key(key: FieldLike) -> str:
    """
    Canonical tree key: lower-case hex, zero-padded to at least 20 bytes.

    Addresses and identifiers shorter than 20 bytes are left-padded,
    longer keys (e.g. tree roots) are kept as is.
    """
    return zero_pad_hex(key, ADDRESS_BYTES)


@dataclass(frozen=True)
class MerklePath:
    """Membership path from a leaf to the root."""

    elements: Tuple[int, ...]  # Sibling hashes, leaf level first
    indices: Tuple[int, ...]  # 1 where the node is a right child

    def __len__(self) -> int:
        return len(self.elements)

    def compute_root(self, hasher: Hasher, leaf: int) -> int:
        """Recompute the root from a leaf hash and this path."""
        current = leaf
        for sibling, index in zip(self.elements, self.indices):
            if index:
                current = hash_fields(hasher, sibling, current)
            else:
                current = hash_fields(hasher, current, sibling)
        return current


class KVMerkleTree:
    """
    Fixed-height sparse Merkle tree mapping keys to values.

    Leaves are H(key, value) in insertion order, empty leaves are zero.
    Only non-empty nodes are stored; empty subtrees use precomputed
    zero hashes, so height 20 trees with a handful of entries stay cheap.
    """

    DEFAULT_HEIGHT = 20
    ZERO_LEAF = 0

    def __init__(
        self,
        data: Mapping[FieldLike, FieldLike],
        hasher: Hasher,
        height: int = DEFAULT_HEIGHT,
    ):
        """
        Build the tree.

        Args:
            data: Mapping of keys to values
            hasher: Field hash permutation
            height: Number of levels below the root (default 20)

        Raises:
            ValueError: If height is invalid
            TreeCapacityError: If there are more entries than leaves
            DuplicateKeyError: If two keys normalize to the same tree key
        """
        if height < 1 or height > 64:
            raise ValueError("Tree height must be between 1 and 64")

        if len(data) > 2**height:
            raise TreeCapacityError(f"Tree is full (max {2**height} entries)")

        self.height = height
        self._hasher = hasher

        self._values: Dict[str, int] = {}
        self._positions: Dict[str, int] = {}
        for key, value in data.items():
            tree_key = normalize_key(key)
            if tree_key in self._values:
                raise DuplicateKeyError(f"Duplicate tree key: {tree_key}")
            self._positions[tree_key] = len(self._values)
            self._values[tree_key] = to_field_int(value)

        self._zero_hashes = self._compute_zero_hashes()

        # (level, position) -> hash, only for non-empty subtrees
        self.nodes: Dict[Tuple[int, int], int] = {}
        self._root = self._build()

        logger.debug(f"Built {self!r}")

    def _compute_zero_hashes(self) -> List[int]:
        """Root of an empty subtree at each level."""
        zero_hashes = [self.ZERO_LEAF]
        for _ in range(self.height):
            previous = zero_hashes[-1]
            zero_hashes.append(hash_fields(self._hasher, previous, previous))
        return zero_hashes

    def _build(self) -> int:
        for tree_key, position in self._positions.items():
            self.nodes[(0, position)] = hash_fields(
                self._hasher, int(tree_key, 16), self._values[tree_key]
            )

        level_positions = sorted(self._positions.values())
        for level in range(self.height):
            parents = sorted({position >> 1 for position in level_positions})
            for parent in parents:
                left = self._node(level, parent * 2)
                right = self._node(level, parent * 2 + 1)
                self.nodes[(level + 1, parent)] = hash_fields(self._hasher, left, right)
            level_positions = parents

        return self._node(self.height, 0)

    def _node(self, level: int, position: int) -> int:
        return self.nodes.get((level, position), self._zero_hashes[level])

    @property
    def root(self) -> int:
        """Tree root as a field element."""
        return self._root

    @property
    def root_hex(self) -> str:
        """Tree root as minimal hex, the form used to key the registry."""
        return to_hex(self._root)

    def value_of(self, key: FieldLike) -> int:
        """
        Return the value stored for a key.

        Raises:
            KeyNotFoundError: If the key is absent
        """
        tree_key = normalize_key(key)
        try:
            return self._values[tree_key]
        except KeyError:
            raise KeyNotFoundError(f"Key {tree_key} not found in tree") from None

    def path_of(self, key: FieldLike) -> MerklePath:
        """
        Return the membership path for a key.

        Raises:
            KeyNotFoundError: If the key is absent
        """
        tree_key = normalize_key(key)
        if tree_key not in self._positions:
            raise KeyNotFoundError(f"Key {tree_key} not found in tree")

        elements = []
        indices = []
        position = self._positions[tree_key]

        for level in range(self.height):
            elements.append(self._node(level, position ^ 1))
            indices.append(position & 1)
            position >>= 1

        return MerklePath(elements=tuple(elements), indices=tuple(indices))

    def leaf_of(self, key: FieldLike) -> int:
        """Return H(key, value) for a stored key."""
        tree_key = normalize_key(key)
        return hash_fields(self._hasher, int(tree_key, 16), self.value_of(tree_key))

    def verify_path(self, key: FieldLike, path: MerklePath) -> bool:
        """Check that ``path`` leads from the key's leaf to the current root."""
        if len(path) != self.height:
            return False
        try:
            leaf = self.leaf_of(key)
        except KeyNotFoundError:
            return False
        return path.compute_root(self._hasher, leaf) == self._root

    def keys(self) -> List[str]:
        """Normalized keys in insertion order."""
        return list(self._values)

    def __contains__(self, key: object) -> bool:
        try:
            return normalize_key(key) in self._values
        except (TypeError, ValueError):
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        """Return the number of entries in the tree."""
        return len(self._values)

    def __repr__(self) -> str:
        return (
            f"KVMerkleTree(height={self.height}, "
            f"entries={len(self._values)}, "
            f"root={self.root_hex[:18]}...)"
        )
