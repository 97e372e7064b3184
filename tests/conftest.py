"""Pytest configuration and fixtures."""

import hashlib
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from zkcred.config import Settings
from zkcred.core.account import Account
from zkcred.core.field import SNARK_FIELD
from zkcred.core.groups import build_accounts_tree, build_registry_tree
from zkcred.core.prover import CredentialProver


SOURCE_ADDRESS = "0x7e2b1ab2d9e0e4c4c7f25ab1b5e0a5c4d2e3f401"
DESTINATION_ADDRESS = "0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc"
OTHER_ADDRESSES = [
    "0x70997970c51812dc3a010c7d01b50e0d17dc79c8",
    "0x90f79bf6eb2c4f870365e785982e1f101e93b906",
]
PUB_KEY = (
    0x1E3BD2F0B3A5C1D2E4F60718293A4B5C6D7E8F9012345678ABCDEF0123456789,
    0x0F1E2D3C4B5A69788796A5B4C3D2E1F00112233445566778899AABBCCDDEEFF0,
)


def sha256_hasher(values):
    """
    Deterministic stand-in for the circuit's field hash.

    Collision resistant and deterministic, which is all the protocol
    relies on. Not the hash the deployed circuit uses.
    """
    data = ",".join(str(v) for v in values).encode("utf-8")
    return int.from_bytes(hashlib.sha256(data).digest(), "big") % SNARK_FIELD


class StubVerifier:
    """Commitment verifier accepting everything except chosen identifiers."""

    def __init__(self, rejected=()):
        self.rejected = set(rejected)
        self.calls = []

    async def __call__(self, identifier, secret, receipt, pub_key):
        self.calls.append((identifier, secret, receipt, pub_key))
        return identifier not in self.rejected


class StubBackend:
    """
    Proving backend that echoes the circuit's public inputs.

    Emits public signals in declared key order, as a real groth16
    prover does for this circuit.
    """

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def prove(self, witness_inputs, wasm_path, zkey_path):
        self.calls.append((dict(witness_inputs), wasm_path, zkey_path))
        if self.error is not None:
            raise self.error
        public_signals = [
            witness_inputs["destinationIdentifier"],
            *witness_inputs["commitmentMapperPubKey"],
            witness_inputs["externalNullifier"],
            witness_inputs["nullifier"],
        ]
        proof = {
            "pi_a": ["1", "2", "1"],
            "pi_b": [["3", "4"], ["5", "6"], ["1", "0"]],
            "pi_c": ["7", "8", "1"],
            "protocol": "groth16",
            "curve": "bn128",
        }
        return proof, public_signals


@pytest.fixture
def hasher():
    """Fixture providing the test field hash."""
    return sha256_hasher


@pytest.fixture
def pub_key():
    return PUB_KEY


@pytest.fixture
def source():
    """Source account (the address being proven)."""
    return Account(
        identifier=SOURCE_ADDRESS,
        secret=0x2A9F3C1B7D8E4F5061728394A5B6C7D8,
        commitment_receipt=(101, 102, 103),
    )


@pytest.fixture
def destination():
    """Destination account (receives the credential)."""
    return Account(
        identifier=DESTINATION_ADDRESS,
        secret=0x11223344556677889900AABBCCDDEEFF,
        commitment_receipt=(201, 202, 203),
    )


@pytest.fixture
def accounts_tree(hasher):
    """Accounts tree with the source address valued 1."""
    return build_accounts_tree([SOURCE_ADDRESS, *OTHER_ADDRESSES], hasher)


@pytest.fixture
def other_accounts_tree(hasher):
    """A second registered group that also contains the source."""
    return build_accounts_tree([OTHER_ADDRESSES[0], SOURCE_ADDRESS], hasher, value=5)


@pytest.fixture
def registry_tree(hasher, accounts_tree, other_accounts_tree):
    """Registry tree with both groups; the second one is not strict."""
    return build_registry_tree([accounts_tree, other_accounts_tree], hasher, values=[1, 0])


@pytest.fixture
def verifier():
    return StubVerifier()


@pytest.fixture
def backend():
    return StubBackend()


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at scratch artifact paths."""
    return Settings(
        wasm_path=tmp_path / "hydra-s1.wasm",
        zkey_path=tmp_path / "hydra-s1.zkey",
    )


@pytest.fixture
def prover(registry_tree, pub_key, hasher, verifier, backend, settings):
    """Prover over the two-group registry."""
    return CredentialProver(
        registry_tree,
        pub_key,
        hasher=hasher,
        commitment_verifier=verifier,
        backend=backend,
        settings=settings,
    )
