"""Proof values returned by the orchestrator."""

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from zkcred.core.field import FieldLike, to_field_int
from zkcred.core.inputs import PublicInputs
from zkcred.crypto.backend import proof_to_calldata
from zkcred.models.schemas import SnarkProofModel


@dataclass(frozen=True)
class Proof:
    """
    A membership proof.

    ``proof`` is whatever the proving backend produced (a groth16 proof
    object for snarkjs); ``public_signals`` are the public inputs in
    declared key order.
    """

    public_signals: Tuple[int, ...]
    proof: Any

    def __post_init__(self):
        object.__setattr__(
            self, "public_signals", tuple(to_field_int(s) for s in self.public_signals)
        )

    def public_inputs(self) -> PublicInputs:
        """Decode the public signals back into named public inputs."""
        return PublicInputs.from_signals(self.public_signals)

    @property
    def nullifier(self) -> int:
        """The proof's nullifier."""
        return self.public_inputs().nullifier

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe form, signals as decimal strings."""
        return {
            "publicSignals": [str(s) for s in self.public_signals],
            "proof": self.proof,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proof":
        """Rebuild from ``to_dict`` output or snarkjs JSON."""
        signals: Sequence[FieldLike] = data.get("publicSignals", data.get("public_signals"))
        if signals is None:
            raise ValueError("Missing public signals")
        return cls(public_signals=tuple(signals), proof=data.get("proof"))

    def to_calldata(self) -> Dict[str, Any]:
        """Groth16 (a, b, c) points plus public input, for on-chain verifiers."""
        return {**proof_to_calldata(self.proof), "input": [str(s) for s in self.public_signals]}

    def to_model(self) -> SnarkProofModel:
        """Pydantic model of this proof."""
        return SnarkProofModel(
            public_signals=[str(s) for s in self.public_signals],
            proof=self.proof,
        )
