"""Accounts: an identifier, its secret and the mapper's commitment receipt."""

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from zkcred.core.commitment import CommitmentMapper, PubKey, Receipt, to_pub_key, to_receipt
from zkcred.core.field import FieldLike, make_identifier, to_field_int, to_hex
from zkcred.models.schemas import AccountModel, CommitmentReceiptModel
from zkcred.utils.hash import Hasher, compute_commitment
from zkcred.exceptions import CommitmentMapperError

logger = logging.getLogger(__name__)

SECRET_SIZE = 16  # bytes


@dataclass(frozen=True)
class Account:
    """
    A prover account.

    Used in two roles: the source (the address being proven, kept private)
    and the destination (the address receiving the credential, public).
    Secrets are owned by the caller and never persisted.
    """

    identifier: int
    secret: int
    commitment_receipt: Receipt

    def __post_init__(self):
        """Canonicalize all values to field integers."""
        object.__setattr__(self, "identifier", to_field_int(self.identifier))
        object.__setattr__(self, "secret", to_field_int(self.secret))
        object.__setattr__(self, "commitment_receipt", to_receipt(self.commitment_receipt))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        """Build from a dict with camelCase or snake_case keys."""
        receipt = data.get("commitment_receipt", data.get("commitmentReceipt"))
        return cls(
            identifier=data["identifier"],
            secret=data["secret"],
            commitment_receipt=receipt,
        )

    @classmethod
    def from_model(cls, model: AccountModel) -> "Account":
        return cls(
            identifier=model.identifier,
            secret=model.secret,
            commitment_receipt=model.commitment_receipt,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Hex-encoded form. Contains the secret."""
        return {
            "identifier": to_hex(self.identifier),
            "secret": to_hex(self.secret),
            "commitmentReceipt": [str(r) for r in self.commitment_receipt],
        }

    def __repr__(self) -> str:
        return f"Account(identifier={to_hex(self.identifier)}, secret=<hidden>)"


def generate_secret() -> int:
    """
    Generate a random account secret.

    Returns:
        int: 16-byte cryptographically secure random secret
    """
    return int.from_bytes(secrets.token_bytes(SECRET_SIZE), "big")


async def make_account(
    address: FieldLike,
    mapper: CommitmentMapper,
    hasher: Hasher,
    *,
    secret: Optional[FieldLike] = None,
    token_id: Optional[FieldLike] = None,
) -> Tuple[Account, PubKey]:
    """
    Create an account by registering a fresh commitment with the mapper.

    Args:
        address: The account's address
        mapper: Commitment mapper service
        hasher: Field hash permutation
        secret: Secret to commit to (random if omitted)
        token_id: Optional credential token id appended to the identifier

    Returns:
        Tuple of the account and the mapper's public key
    """
    secret = generate_secret() if secret is None else to_field_int(secret)
    commitment = compute_commitment(hasher, secret)

    response = await mapper(commitment)
    try:
        mapped = CommitmentReceiptModel.model_validate(response)
    except PydanticValidationError as e:
        raise CommitmentMapperError(f"Malformed commitment mapper response: {e}") from e
    pub_key = to_pub_key(mapped.commitment_mapper_pub_key)

    account = Account(
        identifier=make_identifier(address, token_id),
        secret=secret,
        commitment_receipt=to_receipt(mapped.commitment_receipt),
    )
    logger.info(f"Registered commitment for {to_hex(account.identifier)}")
    return account, pub_key
