"""Custom exceptions for the credential prover."""


class ZKCredException(Exception):
    """Base exception for all credential prover errors."""
    pass


# Validation Errors
class ValidationError(ZKCredException):
    """
    Base exception for proof parameter validation failures.

    Raised before any proving work starts. Never retryable: the caller
    must change its inputs.
    """
    retryable = False


class TreeRootNotFoundError(ValidationError):
    """Raised when the accounts tree root is not registered in the registry tree."""
    pass


class InvalidRegistryHeightError(ValidationError):
    """Raised when the registry tree has the wrong height."""
    pass


class InvalidAccountsHeightError(ValidationError):
    """Raised when the accounts tree has the wrong height."""
    pass


class InvalidSourceCommitmentError(ValidationError):
    """Raised when the source commitment receipt does not verify."""
    pass


class InvalidDestinationCommitmentError(ValidationError):
    """Raised when the destination commitment receipt does not verify."""
    pass


class SourceNotInTreeError(ValidationError):
    """Raised when the source identifier is missing from the accounts tree."""
    pass


class ClaimedValueExceedsSourceError(ValidationError):
    """Raised when the claimed value is greater than the stored source value."""
    pass


class ClaimedValueMismatchStrictError(ValidationError):
    """Raised when a strict claim does not equal the stored source value."""
    pass


class NegativeClaimedValueError(ValidationError):
    """Raised when the claimed value is negative."""
    pass


class FieldOverflowError(ValidationError):
    """Raised when a value does not fit in the SNARK scalar field."""

    def __init__(self, field: str, message: str = ""):
        self.field = field
        super().__init__(
            message
            or f"{field} overflows the snark field, please use a {field} inside the snark field"
        )


# Proof Errors
class ProofError(ZKCredException):
    """Base exception for proof generation errors."""
    retryable = False


class ArtifactLoadError(ProofError):
    """
    Raised when circuit artifacts (witness program, proving key) cannot be loaded.

    Possibly transient, callers may retry with backoff.
    """
    retryable = True


class BackendError(ProofError):
    """Raised when the proving backend fails. Deterministic for identical inputs."""
    pass


class ProofCancelledError(ProofError):
    """Raised when a batch of proofs is cancelled between two proofs."""
    pass


# Merkle Tree Errors
class MerkleTreeError(ZKCredException):
    """Base exception for Merkle tree errors."""
    pass


class KeyNotFoundError(MerkleTreeError, KeyError):
    """Raised when a key is not present in the tree."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class TreeCapacityError(MerkleTreeError):
    """Raised when more entries are given than the tree height allows."""
    pass


class DuplicateKeyError(MerkleTreeError):
    """Raised when two entries normalize to the same tree key."""
    pass


class RootMismatchError(MerkleTreeError):
    """Raised when a rebuilt tree root differs from the advertised one."""
    pass


# Cryptography Errors
class CryptoError(ZKCredException):
    """Base exception for errors raised by external cryptographic collaborators."""
    pass


class HashError(CryptoError):
    """Raised when the hash primitive returns an invalid field element."""
    pass


class CommitmentMapperError(CryptoError):
    """Raised when the commitment mapper returns a malformed response."""
    pass
