"""Commitment verification and mapping (consumed interfaces).

The commitment mapper is a trusted service that countersigns
C = H(secret) for an identifier. Its signature (the commitment receipt)
is later checked against the mapper's public key. Both the service and
the signature scheme are external; only their call shapes live here.
"""

import logging
from typing import Any, Mapping, Protocol, Sequence, Tuple

from zkcred.core.field import FieldLike, to_field_int
from zkcred.exceptions import CommitmentMapperError

logger = logging.getLogger(__name__)

PubKey = Tuple[int, int]
Receipt = Tuple[int, int, int]


class CommitmentVerifier(Protocol):
    """Checks a receipt: a signature over H(identifier, secret) under ``pub_key``."""

    async def __call__(
        self,
        identifier: int,
        secret: int,
        receipt: Receipt,
        pub_key: PubKey,
    ) -> bool:
        ...


class CommitmentMapper(Protocol):
    """
    Given a commitment, returns the mapper response:
    ``{"commitmentMapperPubKey": [x, y], "commitmentReceipt": [r0, r1, r2]}``.
    """

    async def __call__(self, commitment: int) -> Mapping[str, Any]:
        ...


def to_pub_key(values: Sequence[FieldLike]) -> PubKey:
    """Canonicalize a two-coordinate public key."""
    if len(values) != 2:
        raise CommitmentMapperError(f"Public key must have 2 coordinates, got {len(values)}")
    return (to_field_int(values[0]), to_field_int(values[1]))


def to_receipt(values: Sequence[FieldLike]) -> Receipt:
    """Canonicalize a three-element commitment receipt."""
    if len(values) != 3:
        raise CommitmentMapperError(f"Commitment receipt must have 3 elements, got {len(values)}")
    return (to_field_int(values[0]), to_field_int(values[1]), to_field_int(values[2]))


async def verify_commitment(
    verifier: CommitmentVerifier,
    identifier: FieldLike,
    secret: FieldLike,
    receipt: Sequence[FieldLike],
    pub_key: Sequence[FieldLike],
) -> bool:
    """
    Verify a commitment receipt with the external verifier.

    Args:
        verifier: External signature verifier
        identifier: Account identifier
        secret: Account secret
        receipt: Commitment receipt (3 field elements)
        pub_key: Commitment mapper public key (2 field elements)

    Returns:
        bool: True if the receipt is valid for (identifier, secret)
    """
    is_valid = bool(
        await verifier(
            to_field_int(identifier),
            to_field_int(secret),
            tuple(to_field_int(r) for r in receipt),
            tuple(to_field_int(k) for k in pub_key),
        )
    )
    if not is_valid:
        logger.info(f"Commitment receipt rejected for identifier {hex(to_field_int(identifier))}")
    return is_valid
