#!/usr/bin/env python3
"""
Quick start guide for the credential prover.

Builds two groups, registers a source and a destination account, derives
the circuit inputs and, when the circuit artifacts and snarkjs are
installed, generates a real proof.

The hash below is a demo stand-in; proofs only verify with the hash the
deployed circuit uses.
"""

import asyncio
import hashlib
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from zkcred import CredentialProver, ProofParameters, make_account
from zkcred.config import configure_logging, get_settings
from zkcred.core.field import SNARK_FIELD
from zkcred.core.groups import build_accounts_tree, build_registry_tree
from zkcred.crypto.backend import SnarkjsBackend
from zkcred.exceptions import ProofError

ALICE = "0x7e2b1ab2d9e0e4c4c7f25ab1b5e0a5c4d2e3f401"
ALICE_FRESH_WALLET = "0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc"
GROUP_MEMBERS = [
    ALICE,
    "0x70997970c51812dc3a010c7d01b50e0d17dc79c8",
    "0x90f79bf6eb2c4f870365e785982e1f101e93b906",
]


def demo_hash(values):
    data = ",".join(str(v) for v in values).encode("utf-8")
    return int.from_bytes(hashlib.sha256(data).digest(), "big") % SNARK_FIELD


async def demo_mapper(commitment):
    """Local commitment mapper: signs nothing, returns a fixed key."""
    return {
        "commitmentMapperPubKey": ["0x01", "0x02"],
        "commitmentReceipt": [commitment % 97, commitment % 89, commitment % 83],
    }


async def demo_verifier(identifier, secret, receipt, pub_key):
    return True


async def main():
    """Run a simple example of the credential prover."""
    settings = get_settings()
    configure_logging(settings)

    print("=" * 70)
    print("ZK CREDENTIAL PROVER QUICK START")
    print("=" * 70)
    print()

    # Step 1: Register accounts with the commitment mapper
    print("Step 1: Register source and destination accounts")
    print("-" * 70)
    source, pub_key = await make_account(ALICE, demo_mapper, demo_hash)
    destination, _ = await make_account(ALICE_FRESH_WALLET, demo_mapper, demo_hash)
    print(f"✓ Source registered:      {source!r}")
    print(f"✓ Destination registered: {destination!r}")
    print()

    # Step 2: Build the group trees
    print("Step 2: Build accounts tree and registry tree")
    print("-" * 70)
    accounts = build_accounts_tree(GROUP_MEMBERS, demo_hash)
    registry = build_registry_tree([accounts], demo_hash)
    print(f"✓ Accounts tree root: {accounts.root_hex}")
    print(f"✓ Registry tree root: {registry.root_hex}")
    print()

    # Step 3: Validate and derive circuit inputs
    print("Step 3: Validate parameters and derive inputs")
    print("-" * 70)
    prover = CredentialProver(
        registry,
        pub_key,
        hasher=demo_hash,
        commitment_verifier=demo_verifier,
        backend=SnarkjsBackend.from_settings(settings),
        settings=settings,
    )
    params = ProofParameters(
        source=source,
        destination=destination,
        claimed_value=1,
        chain_id=137,
        accounts_tree=accounts,
        external_nullifier=0x1001,
        is_strict=True,
    )
    await prover.validate(params)
    inputs = await prover.generate_inputs(params)
    print("✓ Parameters valid")
    print(f"  Nullifier: {hex(inputs.public_inputs.nullifier)}")
    print(f"  Witness inputs: {', '.join(inputs.to_witness())}")
    print()

    # Step 4: Prove
    print("Step 4: Generate proof")
    print("-" * 70)
    try:
        proof = await prover.generate_proof(params)
    except ProofError as e:
        print(f"✗ Proving skipped: {e}")
        print(f"  Set ZKCRED_WASM_PATH and ZKCRED_ZKEY_PATH to the circuit artifacts")
        return

    print("✓ Proof generated")
    print(f"  Public signals: {proof.to_dict()['publicSignals']}")
    print()


if __name__ == "__main__":
    asyncio.run(main())
