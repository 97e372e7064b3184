"""Circuit input derivation.

Turns proof parameters and the accounts tree path into the exact private
and public input sets of the membership circuit. A pure projection: no
validation and no proving happens here.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple, Union

from zkcred.core.account import Account
from zkcred.core.commitment import PubKey, Receipt, to_pub_key
from zkcred.core.field import ADDRESS_BYTES, FieldLike, to_field_int, zero_pad_hex
from zkcred.core.merkle_tree import KVMerkleTree
from zkcred.utils.hash import Hasher, compute_nullifier

# Circuit signal value: a decimal string or a list of them
Signal = Union[str, List[str]]


@dataclass(frozen=True)
class ProofParameters:
    """Everything the caller supplies for one proof."""

    source: Account
    destination: Account
    claimed_value: int
    chain_id: int
    accounts_tree: KVMerkleTree
    external_nullifier: int
    is_strict: bool = False

    def __post_init__(self):
        object.__setattr__(self, "claimed_value", to_field_int(self.claimed_value))
        object.__setattr__(self, "chain_id", to_field_int(self.chain_id))
        object.__setattr__(self, "external_nullifier", to_field_int(self.external_nullifier))
        object.__setattr__(self, "is_strict", bool(self.is_strict))

    @property
    def source_key(self) -> str:
        """Source identifier zero-padded to a 20-byte accounts tree key."""
        return zero_pad_hex(self.source.identifier, ADDRESS_BYTES)


@dataclass(frozen=True)
class PrivateInputs:
    """Private circuit inputs."""

    source_identifier: int
    source_secret: int
    source_commitment_receipt: Receipt
    accounts_tree_root: int
    account_merkle_path_elements: Tuple[int, ...]
    account_merkle_path_indices: Tuple[int, ...]

    def to_signals(self) -> Dict[str, Signal]:
        """Circuit signal names mapped to decimal-string values."""
        return {
            "sourceIdentifier": str(self.source_identifier),
            "sourceSecret": str(self.source_secret),
            "sourceCommitmentReceipt": [str(v) for v in self.source_commitment_receipt],
            "accountsTreeRoot": str(self.accounts_tree_root),
            "accountMerklePathElements": [str(v) for v in self.account_merkle_path_elements],
            "accountMerklePathIndices": [str(v) for v in self.account_merkle_path_indices],
        }


@dataclass(frozen=True)
class PublicInputs:
    """Public circuit inputs, in the circuit's declared order."""

    destination_identifier: int
    commitment_mapper_pub_key: PubKey
    external_nullifier: int
    nullifier: int

    # Number of field elements once flattened
    SIGNAL_COUNT = 5

    def to_signals(self) -> Dict[str, Signal]:
        """Circuit signal names mapped to decimal-string values."""
        return {
            "destinationIdentifier": str(self.destination_identifier),
            "commitmentMapperPubKey": [str(v) for v in self.commitment_mapper_pub_key],
            "externalNullifier": str(self.external_nullifier),
            "nullifier": str(self.nullifier),
        }

    def flatten(self) -> Tuple[int, ...]:
        """Flatten in declared key order, as the backend emits public signals."""
        return (
            self.destination_identifier,
            *self.commitment_mapper_pub_key,
            self.external_nullifier,
            self.nullifier,
        )

    @classmethod
    def from_signals(cls, signals: Sequence[FieldLike]) -> "PublicInputs":
        """
        Decode flattened public signals.

        Raises:
            ValueError: If the number of signals is wrong
        """
        if len(signals) != cls.SIGNAL_COUNT:
            raise ValueError(
                f"Expected {cls.SIGNAL_COUNT} public signals, got {len(signals)}"
            )
        values = [to_field_int(s) for s in signals]
        return cls(
            destination_identifier=values[0],
            commitment_mapper_pub_key=(values[1], values[2]),
            external_nullifier=values[3],
            nullifier=values[4],
        )


@dataclass(frozen=True)
class Inputs:
    """Private and public inputs for one proof."""

    private_inputs: PrivateInputs
    public_inputs: PublicInputs

    def to_witness(self) -> Dict[str, Signal]:
        """Merged flat input mapping handed to the proving backend."""
        return {**self.private_inputs.to_signals(), **self.public_inputs.to_signals()}


def build_inputs(
    params: ProofParameters,
    commitment_mapper_pub_key: Sequence[FieldLike],
    hasher: Hasher,
) -> Inputs:
    """
    Derive the circuit inputs for a proof.

    Args:
        params: Proof parameters
        commitment_mapper_pub_key: Mapper public key (2 field elements)
        hasher: Field hash permutation

    Returns:
        Inputs: Private and public input sets

    Raises:
        KeyNotFoundError: If the source is not in the accounts tree
    """
    source = params.source
    accounts_tree = params.accounts_tree

    account_merkle_path = accounts_tree.path_of(params.source_key)
    nullifier = compute_nullifier(hasher, source.secret, params.external_nullifier)

    private_inputs = PrivateInputs(
        source_identifier=source.identifier,
        source_secret=source.secret,
        source_commitment_receipt=source.commitment_receipt,
        accounts_tree_root=accounts_tree.root,
        account_merkle_path_elements=account_merkle_path.elements,
        account_merkle_path_indices=account_merkle_path.indices,
    )

    public_inputs = PublicInputs(
        destination_identifier=params.destination.identifier,
        commitment_mapper_pub_key=to_pub_key(commitment_mapper_pub_key),
        external_nullifier=params.external_nullifier,
        nullifier=nullifier,
    )

    return Inputs(private_inputs=private_inputs, public_inputs=public_inputs)
