"""Proving one source account's membership in several groups.

Each group needs its own proof. Witness generation is CPU and memory
heavy, so proofs run one after another with a single backend call in
flight. Progress is reported after each proof, and cancellation is
checked only between proofs since a running backend call cannot be
interrupted.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from zkcred.core.account import Account
from zkcred.core.field import FieldLike, to_field_int
from zkcred.core.groups import build_accounts_tree, is_strict_group
from zkcred.core.inputs import ProofParameters
from zkcred.core.merkle_tree import KVMerkleTree
from zkcred.core.proof import Proof
from zkcred.core.prover import CredentialProver
from zkcred.models.schemas import CredentialModel
from zkcred.utils.hash import Hasher
from zkcred.exceptions import (
    KeyNotFoundError,
    ProofCancelledError,
    RootMismatchError,
    TreeRootNotFoundError,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, Proof], None]


@dataclass(frozen=True)
class GroupClaim:
    """
    One group to prove membership in.

    ``is_strict=None`` reads strictness from the group's registry value.
    """

    accounts_tree: KVMerkleTree
    external_nullifier: int
    claimed_value: int = 1
    is_strict: Optional[bool] = None

    @classmethod
    def from_credential(
        cls,
        credential: CredentialModel,
        hasher: Hasher,
        claimed_value: FieldLike = 1,
    ) -> "GroupClaim":
        """
        Build the claim for a credential; its id is the external nullifier.

        Raises:
            RootMismatchError: If the credential advertises an accounts tree
                root that differs from the one rebuilt from its addresses
        """
        accounts_tree = build_accounts_tree(credential.addresses, hasher)
        if (
            credential.addresses_root is not None
            and to_field_int(credential.addresses_root) != accounts_tree.root
        ):
            raise RootMismatchError(
                f"Credential {credential.id} advertises root {credential.addresses_root}, "
                f"rebuilt root is {accounts_tree.root_hex}"
            )

        return cls(
            accounts_tree=accounts_tree,
            external_nullifier=to_field_int(credential.id),
            claimed_value=to_field_int(claimed_value),
        )


class CancellationToken:
    """Cooperative cancellation flag, polled between proofs."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


async def generate_proofs(
    prover: CredentialProver,
    source: Account,
    destination: Account,
    claims: Iterable[GroupClaim],
    chain_id: FieldLike,
    *,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[Proof]:
    """
    Generate one proof per group, sequentially.

    Args:
        prover: Configured prover
        source: Account whose membership is proven
        destination: Account receiving the credentials
        claims: Groups to prove
        chain_id: Target chain id
        on_progress: Called with (index, proof) after each proof
        cancel_token: Checked before each proof

    Returns:
        List[Proof]: Proofs in claim order

    Raises:
        ProofCancelledError: If cancelled before all proofs were generated
        ValidationError: If a claim's parameters are invalid
        ProofError: If the backend fails
    """
    proofs: List[Proof] = []

    for index, claim in enumerate(claims):
        if cancel_token is not None and cancel_token.cancelled:
            logger.info(f"Proof generation cancelled after {len(proofs)} proofs")
            raise ProofCancelledError(f"Cancelled after {len(proofs)} proofs")

        is_strict = claim.is_strict
        if is_strict is None:
            try:
                is_strict = is_strict_group(prover.registry_tree, claim.accounts_tree)
            except KeyNotFoundError:
                raise TreeRootNotFoundError(
                    f"Accounts tree root {claim.accounts_tree.root_hex} not found in the Registry tree"
                ) from None

        params = ProofParameters(
            source=source,
            destination=destination,
            claimed_value=claim.claimed_value,
            chain_id=chain_id,
            accounts_tree=claim.accounts_tree,
            external_nullifier=claim.external_nullifier,
            is_strict=is_strict,
        )

        proof = await prover.generate_proof(params)
        proofs.append(proof)

        if on_progress is not None:
            on_progress(index, proof)

    return proofs
