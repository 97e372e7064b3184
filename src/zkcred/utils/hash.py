"""Hash helpers built on an externally supplied field hash permutation.

The permutation itself (Poseidon in the deployed circuit) comes from a
cryptographic primitive library and is passed in as a ``Hasher``.
"""

from typing import Callable, Sequence

from zkcred.core.field import FieldLike, is_in_field, to_field_int
from zkcred.exceptions import HashError

Hasher = Callable[[Sequence[int]], int]

SECRET_HASH_TAG = 1


def hash_fields(hasher: Hasher, *values: FieldLike) -> int:
    """
    Hash a fixed-arity sequence of field values.

    Args:
        hasher: Field hash permutation
        *values: Values to hash, canonicalized with ``to_field_int``

    Returns:
        int: Field element digest

    Raises:
        HashError: If the primitive returns something that is not a field element
    """
    digest = hasher([to_field_int(v) for v in values])
    try:
        digest = to_field_int(digest)
    except (TypeError, ValueError) as e:
        raise HashError(f"Hash primitive returned a non-numeric value: {e}") from e

    if not is_in_field(digest):
        raise HashError("Hash primitive returned a value outside the snark field")
    return digest


def compute_commitment(hasher: Hasher, secret: FieldLike) -> int:
    """
    Compute the commitment C = H(secret) sent to the commitment mapper.
    """
    return hash_fields(hasher, secret)


def compute_secret_hash(hasher: Hasher, secret: FieldLike) -> int:
    """Compute H(secret, 1)."""
    return hash_fields(hasher, secret, SECRET_HASH_TAG)


def compute_nullifier(hasher: Hasher, secret: FieldLike, external_nullifier: FieldLike) -> int:
    """
    Compute nullifier nf = H(H(secret, 1), external_nullifier).

    Deterministic per (secret, external_nullifier): the same account proving
    for the same group always yields the same nullifier, so a verifier can
    detect reuse without learning the secret.
    """
    return hash_fields(hasher, compute_secret_hash(hasher, secret), external_nullifier)
