"""Building the two-level group trees from credential data."""

import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from zkcred.config import ACCOUNTS_TREE_HEIGHT, REGISTRY_TREE_HEIGHT
from zkcred.core.field import FieldLike
from zkcred.core.merkle_tree import KVMerkleTree, normalize_key
from zkcred.models.schemas import CredentialModel
from zkcred.utils.hash import Hasher
from zkcred.exceptions import KeyNotFoundError

logger = logging.getLogger(__name__)

MEMBER_VALUE = 1


def build_accounts_tree(
    addresses: Iterable[FieldLike],
    hasher: Hasher,
    value: FieldLike = MEMBER_VALUE,
    height: int = ACCOUNTS_TREE_HEIGHT,
) -> KVMerkleTree:
    """
    Build a group's Accounts Tree.

    Every member address gets the same value (1 by default).

    Args:
        addresses: Member addresses
        hasher: Field hash permutation
        value: Value stored for each member
        height: Tree height

    Returns:
        KVMerkleTree: The group's Accounts Tree
    """
    data = {address: value for address in addresses}
    tree = KVMerkleTree(data, hasher, height)
    logger.info(f"Built accounts tree with {len(tree)} members, root {tree.root_hex}")
    return tree


def build_registry_tree(
    groups: Iterable[Union[KVMerkleTree, FieldLike]],
    hasher: Hasher,
    values: Optional[Union[Sequence[FieldLike], Mapping[str, FieldLike]]] = None,
    height: int = REGISTRY_TREE_HEIGHT,
) -> KVMerkleTree:
    """
    Build the Registry Tree over all groups' Accounts Tree roots.

    Args:
        groups: Accounts Trees or their roots
        hasher: Field hash permutation
        values: Per-group registry values, either in the order of ``groups``
            or keyed by root hex. Defaults to 1 (strict) for every group.
        height: Tree height

    Returns:
        KVMerkleTree: The Registry Tree
    """
    roots = [g.root_hex if isinstance(g, KVMerkleTree) else g for g in groups]

    if values is None:
        data = {root: MEMBER_VALUE for root in roots}
    elif isinstance(values, Mapping):
        data = {root: values.get(root, MEMBER_VALUE) for root in roots}
    else:
        if len(values) != len(roots):
            raise ValueError("values must have one entry per group")
        data = dict(zip(roots, values))

    tree = KVMerkleTree(data, hasher, height)
    logger.info(f"Built registry tree with {len(tree)} groups, root {tree.root_hex}")
    return tree


def is_strict_group(registry_tree: KVMerkleTree, accounts_tree: KVMerkleTree) -> bool:
    """
    Whether proofs for this group must claim exactly the stored value.

    The group's registry value, read as a boolean.

    Raises:
        KeyNotFoundError: If the group is not registered
    """
    try:
        return bool(registry_tree.value_of(accounts_tree.root_hex))
    except KeyNotFoundError:
        logger.warning(f"Accounts tree {accounts_tree.root_hex} is not registered")
        raise


def credentials_containing(
    address: FieldLike, credentials: Iterable[CredentialModel]
) -> List[CredentialModel]:
    """
    Credentials whose member list contains an address.

    Addresses are compared as tree keys, so hex case and zero padding
    do not matter.
    """
    key = normalize_key(address)
    return [
        credential
        for credential in credentials
        if any(normalize_key(member) == key for member in credential.addresses)
    ]
