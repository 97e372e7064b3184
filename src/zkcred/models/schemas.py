"""Pydantic data models for the JSON shapes exchanged with external services."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional, Union

from zkcred.core.field import to_field_int


# Numbers travel as JSON numbers, decimal strings or 0x hex strings
FieldValue = Union[int, str]


def _check_numeric(value: FieldValue) -> FieldValue:
    to_field_int(value)
    return value


class AccountModel(BaseModel):
    """Account as stored by the caller (hex or decimal strings)."""
    model_config = ConfigDict(populate_by_name=True)

    identifier: FieldValue = Field(..., description="Address, optionally with token id suffix")
    secret: FieldValue = Field(..., description="Account secret")
    commitment_receipt: List[FieldValue] = Field(
        ..., alias="commitmentReceipt", min_length=3, max_length=3,
        description="Mapper signature over the commitment",
    )

    @field_validator("identifier", "secret")
    @classmethod
    def _numeric(cls, value: FieldValue) -> FieldValue:
        return _check_numeric(value)


class CommitmentReceiptModel(BaseModel):
    """Commitment mapper response."""
    model_config = ConfigDict(populate_by_name=True)

    commitment_mapper_pub_key: List[FieldValue] = Field(
        ..., alias="commitmentMapperPubKey", min_length=2, max_length=2
    )
    commitment_receipt: List[FieldValue] = Field(
        ..., alias="commitmentReceipt", min_length=3, max_length=3
    )


class CredentialModel(BaseModel):
    """A group (credential) and its member addresses."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Credential id, used as external nullifier")
    name: Optional[str] = None
    addresses: List[str] = Field(default_factory=list, description="Member addresses")
    addresses_root: Optional[str] = Field(
        default=None, alias="addressesRoot", description="Accounts tree root (hex)"
    )


class SnarkProofModel(BaseModel):
    """Serialized proof, snarkjs layout."""
    model_config = ConfigDict(populate_by_name=True)

    public_signals: List[FieldValue] = Field(..., alias="publicSignals")
    proof: Any = None

    @field_validator("public_signals")
    @classmethod
    def _numeric_signals(cls, values: List[FieldValue]) -> List[FieldValue]:
        return [_check_numeric(v) for v in values]
