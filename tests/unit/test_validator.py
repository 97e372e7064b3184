"""Tests for proof parameter validation."""

import pytest

from conftest import DESTINATION_ADDRESS, SOURCE_ADDRESS, StubVerifier
from zkcred.core.account import Account
from zkcred.core.field import SNARK_FIELD
from zkcred.core.groups import build_accounts_tree, build_registry_tree
from zkcred.core.inputs import ProofParameters
from zkcred.core.merkle_tree import KVMerkleTree
from zkcred.core.validator import ParameterValidator
from zkcred.exceptions import (
    ClaimedValueExceedsSourceError,
    ClaimedValueMismatchStrictError,
    FieldOverflowError,
    InvalidAccountsHeightError,
    InvalidDestinationCommitmentError,
    InvalidRegistryHeightError,
    InvalidSourceCommitmentError,
    NegativeClaimedValueError,
    SourceNotInTreeError,
    TreeRootNotFoundError,
    ValidationError,
)


def make_params(source, destination, accounts_tree, **overrides):
    values = dict(
        source=source,
        destination=destination,
        claimed_value=1,
        chain_id=1,
        accounts_tree=accounts_tree,
        external_nullifier=0x1234,
        is_strict=True,
    )
    values.update(overrides)
    return ProofParameters(**values)


@pytest.fixture
def validator(registry_tree, pub_key, verifier):
    return ParameterValidator(registry_tree, pub_key, verifier)


@pytest.fixture
def valued_setup(hasher, pub_key):
    """Registry with one group where the source is valued 5."""
    accounts = KVMerkleTree({SOURCE_ADDRESS: 5}, hasher)
    registry = build_registry_tree([accounts], hasher)
    return accounts, ParameterValidator(registry, pub_key, StubVerifier())


class TestValidParameters:
    """Parameters that must pass."""

    @pytest.mark.asyncio
    async def test_strict_exact_claim_passes(self, validator, source, destination, accounts_tree):
        params = make_params(source, destination, accounts_tree)
        assert await validator.validate(params) is None

    @pytest.mark.asyncio
    async def test_non_strict_lower_claim_passes(self, valued_setup, source, destination):
        accounts, validator = valued_setup
        params = make_params(source, destination, accounts, claimed_value=3, is_strict=False)
        await validator.validate(params)

    @pytest.mark.asyncio
    async def test_zero_claim_passes(self, valued_setup, source, destination):
        accounts, validator = valued_setup
        params = make_params(source, destination, accounts, claimed_value=0, is_strict=False)
        await validator.validate(params)

    @pytest.mark.asyncio
    async def test_verifier_sees_both_accounts(
        self, validator, verifier, source, destination, accounts_tree, pub_key
    ):
        await validator.validate(make_params(source, destination, accounts_tree))
        assert [call[0] for call in verifier.calls] == [source.identifier, destination.identifier]
        assert all(call[3] == pub_key for call in verifier.calls)


class TestTreeChecks:
    """Registry membership and tree heights."""

    @pytest.mark.asyncio
    async def test_unregistered_accounts_tree(self, validator, hasher, source, destination):
        unregistered = build_accounts_tree([SOURCE_ADDRESS, DESTINATION_ADDRESS], hasher)
        with pytest.raises(TreeRootNotFoundError, match="Registry tree"):
            await validator.validate(make_params(source, destination, unregistered))

    @pytest.mark.asyncio
    async def test_wrong_registry_height(self, hasher, pub_key, verifier, source, destination, accounts_tree):
        registry = build_registry_tree([accounts_tree], hasher, height=19)
        validator = ParameterValidator(registry, pub_key, verifier)
        with pytest.raises(InvalidRegistryHeightError, match="Registry"):
            await validator.validate(make_params(source, destination, accounts_tree))

    @pytest.mark.asyncio
    async def test_wrong_accounts_height(self, hasher, pub_key, source, destination):
        accounts = build_accounts_tree([SOURCE_ADDRESS], hasher, height=19)
        registry = build_registry_tree([accounts], hasher)
        # Rejecting verifier: the height check must fire before commitments are checked
        validator = ParameterValidator(
            registry, pub_key, StubVerifier(rejected={source.identifier})
        )
        with pytest.raises(InvalidAccountsHeightError, match="Accounts"):
            await validator.validate(
                make_params(source, destination, accounts, claimed_value=99)
            )


class TestCommitmentChecks:
    """Commitment receipt verification."""

    @pytest.mark.asyncio
    async def test_invalid_source_commitment(self, registry_tree, pub_key, source, destination, accounts_tree):
        validator = ParameterValidator(registry_tree, pub_key, StubVerifier(rejected={source.identifier}))
        with pytest.raises(InvalidSourceCommitmentError):
            await validator.validate(make_params(source, destination, accounts_tree))

    @pytest.mark.asyncio
    async def test_invalid_destination_commitment(self, registry_tree, pub_key, source, destination, accounts_tree):
        validator = ParameterValidator(
            registry_tree, pub_key, StubVerifier(rejected={destination.identifier})
        )
        with pytest.raises(InvalidDestinationCommitmentError):
            await validator.validate(make_params(source, destination, accounts_tree))


class TestValueChecks:
    """Source membership and claimed value bounds."""

    @pytest.mark.asyncio
    async def test_source_not_in_tree(self, validator, destination, accounts_tree):
        stranger = Account(
            identifier="0x" + "42" * 20, secret=9, commitment_receipt=(1, 2, 3)
        )
        with pytest.raises(SourceNotInTreeError, match="0x" + "42" * 20):
            await validator.validate(make_params(stranger, destination, accounts_tree))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("is_strict", [True, False])
    async def test_claim_exceeds_source(self, valued_setup, source, destination, is_strict):
        accounts, validator = valued_setup
        params = make_params(source, destination, accounts, claimed_value=6, is_strict=is_strict)
        with pytest.raises(ClaimedValueExceedsSourceError):
            await validator.validate(params)

    @pytest.mark.asyncio
    async def test_strict_mismatch(self, valued_setup, source, destination):
        accounts, validator = valued_setup
        params = make_params(source, destination, accounts, claimed_value=3, is_strict=True)
        with pytest.raises(ClaimedValueMismatchStrictError, match="isStrict"):
            await validator.validate(params)

    @pytest.mark.asyncio
    async def test_negative_claim(self, valued_setup, source, destination):
        accounts, validator = valued_setup
        params = make_params(source, destination, accounts, claimed_value=-1, is_strict=False)
        with pytest.raises(NegativeClaimedValueError):
            await validator.validate(params)


class TestFieldOverflow:
    """Every field value must be below the snark field modulus."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("offset", [0, 1])
    async def test_external_nullifier_overflow(self, validator, source, destination, accounts_tree, offset):
        params = make_params(
            source, destination, accounts_tree, external_nullifier=SNARK_FIELD + offset
        )
        with pytest.raises(FieldOverflowError) as exc_info:
            await validator.validate(params)
        assert exc_info.value.field == "external nullifier"

    @pytest.mark.asyncio
    async def test_source_secret_overflow(self, validator, source, destination, accounts_tree):
        overflowing = Account(
            identifier=source.identifier,
            secret=SNARK_FIELD,
            commitment_receipt=source.commitment_receipt,
        )
        with pytest.raises(FieldOverflowError) as exc_info:
            await validator.validate(make_params(overflowing, destination, accounts_tree))
        assert exc_info.value.field == "source secret"

    @pytest.mark.asyncio
    async def test_destination_identifier_overflow(self, validator, source, destination, accounts_tree):
        overflowing = Account(
            identifier=SNARK_FIELD,
            secret=destination.secret,
            commitment_receipt=destination.commitment_receipt,
        )
        with pytest.raises(FieldOverflowError) as exc_info:
            await validator.validate(make_params(source, overflowing, accounts_tree))
        assert exc_info.value.field == "destination identifier"

    @pytest.mark.asyncio
    async def test_destination_secret_overflow(self, validator, source, destination, accounts_tree):
        overflowing = Account(
            identifier=destination.identifier,
            secret=SNARK_FIELD + 5,
            commitment_receipt=destination.commitment_receipt,
        )
        with pytest.raises(FieldOverflowError) as exc_info:
            await validator.validate(make_params(source, overflowing, accounts_tree))
        assert exc_info.value.field == "destination secret"

    @pytest.mark.asyncio
    async def test_source_identifier_overflow(self, hasher, pub_key, verifier, destination):
        identifier = SNARK_FIELD + 7
        accounts = KVMerkleTree({identifier: 1}, hasher)
        registry = build_registry_tree([accounts], hasher)
        validator = ParameterValidator(registry, pub_key, verifier)
        overflowing = Account(identifier=identifier, secret=3, commitment_receipt=(1, 2, 3))

        with pytest.raises(FieldOverflowError) as exc_info:
            await validator.validate(make_params(overflowing, destination, accounts))
        assert exc_info.value.field == "source identifier"

    @pytest.mark.asyncio
    async def test_claimed_value_overflow(self, hasher, pub_key, verifier, source, destination):
        accounts = KVMerkleTree({SOURCE_ADDRESS: SNARK_FIELD}, hasher)
        registry = build_registry_tree([accounts], hasher)
        validator = ParameterValidator(registry, pub_key, verifier)

        with pytest.raises(FieldOverflowError) as exc_info:
            await validator.validate(
                make_params(source, destination, accounts, claimed_value=SNARK_FIELD)
            )
        assert exc_info.value.field == "claimed value"
        assert "claimed value" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_negative_external_nullifier(self, validator, source, destination, accounts_tree):
        params = make_params(source, destination, accounts_tree, external_nullifier="-0x05")
        with pytest.raises(FieldOverflowError, match="negative") as exc_info:
            await validator.validate(params)
        assert exc_info.value.field == "external nullifier"

    @pytest.mark.asyncio
    async def test_negative_source_secret(self, validator, source, destination, accounts_tree):
        negative = Account(
            identifier=source.identifier,
            secret=-1,
            commitment_receipt=source.commitment_receipt,
        )
        with pytest.raises(FieldOverflowError) as exc_info:
            await validator.validate(make_params(negative, destination, accounts_tree))
        assert exc_info.value.field == "source secret"

    @pytest.mark.asyncio
    async def test_negative_destination_identifier(self, validator, source, destination, accounts_tree):
        negative = Account(
            identifier=-destination.identifier,
            secret=destination.secret,
            commitment_receipt=destination.commitment_receipt,
        )
        with pytest.raises(FieldOverflowError) as exc_info:
            await validator.validate(make_params(source, negative, accounts_tree))
        assert exc_info.value.field == "destination identifier"

    @pytest.mark.asyncio
    async def test_negative_source_identifier(self, validator, destination, accounts_tree):
        negative = Account(identifier=-5, secret=3, commitment_receipt=(1, 2, 3))
        with pytest.raises(SourceNotInTreeError, match="-0x5"):
            await validator.validate(make_params(negative, destination, accounts_tree))

    @pytest.mark.asyncio
    async def test_errors_are_validation_errors(self, validator, source, destination, accounts_tree):
        params = make_params(source, destination, accounts_tree, external_nullifier=SNARK_FIELD)
        with pytest.raises(ValidationError) as exc_info:
            await validator.validate(params)
        assert exc_info.value.retryable is False
