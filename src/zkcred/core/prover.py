"""Proof orchestration: validation, input derivation and proving.

Flow for one proof:
    1. Validate parameters against the registry snapshot (fail fast)
    2. Derive private and public circuit inputs
    3. Merge them into one flat witness input set
    4. Hand the witness input and circuit artifacts to the proving backend
    5. Wrap (proof, public signals) into a ``Proof``

Proving is orders of magnitude more expensive than validation, so step 4
never runs on parameters that fail step 1.
"""

import logging
from typing import Optional, Sequence

from zkcred.config import Settings, get_settings
from zkcred.core.commitment import CommitmentVerifier, PubKey, to_pub_key
from zkcred.core.field import FieldLike
from zkcred.core.inputs import Inputs, ProofParameters, build_inputs
from zkcred.core.merkle_tree import KVMerkleTree
from zkcred.core.proof import Proof
from zkcred.core.validator import ParameterValidator
from zkcred.crypto.backend import ProvingBackend
from zkcred.utils.hash import Hasher
from zkcred.exceptions import BackendError, ProofError

logger = logging.getLogger(__name__)


class CredentialProver:
    """
    Generates group membership proofs for one registry snapshot.

    Built once per (registry tree, commitment mapper public key) pair and
    not modified afterwards; every ``generate_proof`` call is independent.
    """

    def __init__(
        self,
        registry_tree: KVMerkleTree,
        commitment_mapper_pub_key: Sequence[FieldLike],
        *,
        hasher: Hasher,
        commitment_verifier: CommitmentVerifier,
        backend: ProvingBackend,
        settings: Optional[Settings] = None,
    ):
        """
        Args:
            registry_tree: Registry Tree over all groups' Accounts Tree roots
            commitment_mapper_pub_key: Mapper public key (2 field elements)
            hasher: Field hash permutation
            commitment_verifier: External receipt verifier
            backend: Proving backend
            settings: Artifact locations (defaults to environment settings)
        """
        self._registry_tree = registry_tree
        self._pub_key = to_pub_key(commitment_mapper_pub_key)
        self._hasher = hasher
        self._backend = backend
        self._settings = settings or get_settings()
        self._validator = ParameterValidator(registry_tree, self._pub_key, commitment_verifier)

    @property
    def registry_tree(self) -> KVMerkleTree:
        return self._registry_tree

    @property
    def commitment_mapper_pub_key(self) -> PubKey:
        return self._pub_key

    async def validate(self, params: ProofParameters) -> None:
        """
        Check all proving preconditions.

        Raises:
            ValidationError: On the first failing check
        """
        await self._validator.validate(params)

    async def generate_inputs(self, params: ProofParameters) -> Inputs:
        """Derive circuit inputs without validating."""
        return build_inputs(params, self._pub_key, self._hasher)

    async def generate_proof(self, params: ProofParameters) -> Proof:
        """
        Validate parameters, derive inputs and prove.

        Args:
            params: Proof parameters

        Returns:
            Proof: Backend proof and public signals

        Raises:
            ValidationError: If parameters are invalid (no proving attempted)
            ArtifactLoadError: If circuit artifacts cannot be loaded
            BackendError: If the backend fails
        """
        await self.validate(params)

        inputs = await self.generate_inputs(params)
        witness = inputs.to_witness()

        logger.info(
            f"Proving membership in accounts tree {params.accounts_tree.root_hex} "
            f"for external nullifier {params.external_nullifier}"
        )

        try:
            proof, public_signals = await self._backend.prove(
                witness, self._settings.wasm_path, self._settings.zkey_path
            )
            result = Proof(public_signals=tuple(public_signals), proof=proof)
        except ProofError:
            raise
        except Exception as e:
            logger.error(f"Proving backend failed: {e}", exc_info=True)
            raise BackendError(f"Proving backend failed: {e}") from e

        logger.info(f"Proof generated, nullifier {inputs.public_inputs.nullifier}")
        return result
