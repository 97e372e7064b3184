"""Main package initialization."""

__version__ = "0.1.0"
__author__ = "ZK-Cred Team"
__description__ = "Zero-knowledge group membership proofs over two-level key/value Merkle trees"

from .core.account import Account, make_account
from .core.merkle_tree import KVMerkleTree, MerklePath
from .core.inputs import Inputs, PrivateInputs, PublicInputs, ProofParameters, build_inputs
from .core.validator import ParameterValidator
from .core.prover import CredentialProver
from .core.proof import Proof
from .core.batch import CancellationToken, GroupClaim, generate_proofs

__all__ = [
    "Account",
    "make_account",
    "KVMerkleTree",
    "MerklePath",
    "Inputs",
    "PrivateInputs",
    "PublicInputs",
    "ProofParameters",
    "build_inputs",
    "ParameterValidator",
    "CredentialProver",
    "Proof",
    "CancellationToken",
    "GroupClaim",
    "generate_proofs",
]
