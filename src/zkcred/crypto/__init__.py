"""Proving backends"""

from zkcred.crypto.backend import (
    ProvingBackend,
    SnarkjsBackend,
    proof_to_calldata,
)

__all__ = [
    'ProvingBackend',
    'SnarkjsBackend',
    'proof_to_calldata',
]
