"""Proof parameter validation.

Every precondition of the circuit is checked here before any proving
work starts. Checks run in a fixed order and the first failure raises
a specific ``ValidationError`` subclass.
"""

import logging
from typing import Sequence

from zkcred.config import ACCOUNTS_TREE_HEIGHT, REGISTRY_TREE_HEIGHT
from zkcred.core.commitment import CommitmentVerifier, to_pub_key, verify_commitment
from zkcred.core.field import FieldLike, is_in_field
from zkcred.core.inputs import ProofParameters
from zkcred.core.merkle_tree import KVMerkleTree
from zkcred.exceptions import (
    ClaimedValueExceedsSourceError,
    ClaimedValueMismatchStrictError,
    FieldOverflowError,
    InvalidAccountsHeightError,
    InvalidDestinationCommitmentError,
    InvalidRegistryHeightError,
    InvalidSourceCommitmentError,
    KeyNotFoundError,
    NegativeClaimedValueError,
    SourceNotInTreeError,
    TreeRootNotFoundError,
)

logger = logging.getLogger(__name__)


class ParameterValidator:
    """
    Validates proof parameters against a registry tree snapshot.

    Read-only: neither the trees nor the parameters are modified.
    """

    def __init__(
        self,
        registry_tree: KVMerkleTree,
        commitment_mapper_pub_key: Sequence[FieldLike],
        commitment_verifier: CommitmentVerifier,
    ):
        self.registry_tree = registry_tree
        self.commitment_mapper_pub_key = to_pub_key(commitment_mapper_pub_key)
        self.commitment_verifier = commitment_verifier

    async def validate(self, params: ProofParameters) -> None:
        """
        Check all preconditions for proving.

        Check order:
        1. Accounts tree registered in the registry tree
        2. Registry tree height
        3. Accounts tree height
        4. Source commitment receipt
        5. Destination commitment receipt
        6. Source present in the accounts tree
        7. Claimed value not above the source value
        8. Strict claims equal the source value
        9. Claimed value not negative
        10. All field values inside the snark field

        Args:
            params: Proof parameters to check

        Raises:
            ValidationError: The subclass for the first failing check
        """
        accounts_tree = params.accounts_tree
        source = params.source
        destination = params.destination

        if accounts_tree.root_hex not in self.registry_tree:
            raise TreeRootNotFoundError(
                f"Accounts tree root {accounts_tree.root_hex} not found in the Registry tree"
            )

        if self.registry_tree.height != REGISTRY_TREE_HEIGHT:
            raise InvalidRegistryHeightError(
                f"Invalid Registry tree height {self.registry_tree.height}, "
                f"expected {REGISTRY_TREE_HEIGHT}"
            )

        if accounts_tree.height != ACCOUNTS_TREE_HEIGHT:
            raise InvalidAccountsHeightError(
                f"Invalid Accounts tree height {accounts_tree.height}, "
                f"expected {ACCOUNTS_TREE_HEIGHT}"
            )

        if not await verify_commitment(
            self.commitment_verifier,
            source.identifier,
            source.secret,
            source.commitment_receipt,
            self.commitment_mapper_pub_key,
        ):
            raise InvalidSourceCommitmentError("Invalid source commitment receipt")

        if not await verify_commitment(
            self.commitment_verifier,
            destination.identifier,
            destination.secret,
            destination.commitment_receipt,
            self.commitment_mapper_pub_key,
        ):
            raise InvalidDestinationCommitmentError("Invalid destination commitment receipt")

        # Negative identifiers have no tree key
        try:
            source_value = accounts_tree.value_of(params.source_key)
        except (KeyNotFoundError, ValueError):
            raise SourceNotInTreeError(
                f"Could not find the source {hex(source.identifier)} in the Accounts tree"
            ) from None

        claimed_value = params.claimed_value
        if claimed_value > source_value:
            raise ClaimedValueExceedsSourceError(
                f"Claimed value {claimed_value} can't be superior to Source value {source_value}"
            )

        if params.is_strict and claimed_value != source_value:
            raise ClaimedValueMismatchStrictError(
                f"Claimed value {claimed_value} must be equal with Source value "
                f"{source_value} when isStrict == 1"
            )

        if claimed_value < 0:
            raise NegativeClaimedValueError(f"Claimed value {claimed_value} can't be negative")

        field_values = (
            ("external nullifier", params.external_nullifier),
            ("source identifier", source.identifier),
            ("source secret", source.secret),
            ("destination identifier", destination.identifier),
            ("destination secret", destination.secret),
            ("claimed value", claimed_value),
        )
        for name, value in field_values:
            if value < 0:
                raise FieldOverflowError(
                    name, f"{name} is negative, please use a {name} inside the snark field"
                )
            if not is_in_field(value):
                raise FieldOverflowError(name)

        logger.debug(f"Parameters valid for accounts tree {accounts_tree.root_hex}")
