"""Field element helpers for the BN254 scalar field.

Every value that reaches the circuit is an integer strictly below
``SNARK_FIELD``. Canonicalization never reduces modulo the field: an
out-of-range value stays out of range so validation can report it.
"""

from typing import Optional, Union

from zkcred.utils.encoding import hex_zero_pad, int_to_hex

FieldLike = Union[int, str, bytes]

SNARK_FIELD = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# Accounts tree keys are 20-byte addresses
ADDRESS_BYTES = 20
TOKEN_ID_HEX_DIGITS = 20


def to_field_int(value: FieldLike) -> int:
    """
    Canonicalize a numeric value to a Python integer.

    Accepts ints, '0x' hex strings, decimal strings and big-endian bytes.

    Raises:
        TypeError: If the value has an unsupported type
        ValueError: If a string cannot be parsed
    """
    if isinstance(value, bool):
        raise TypeError("Booleans are not field values")
    if isinstance(value, int):
        return value
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(bytes(value), "big")
    if isinstance(value, str):
        text = value.strip()
        if text.startswith(("0x", "0X")):
            return int(text, 16)
        if text.startswith(("-0x", "-0X")):
            return -int(text[1:], 16)
        return int(text, 10)
    raise TypeError(f"Expected int, str or bytes, got {type(value)}")


def is_in_field(value: int) -> bool:
    """Return True if ``0 <= value < SNARK_FIELD``."""
    return 0 <= value < SNARK_FIELD


def to_hex(value: FieldLike) -> str:
    """Minimal even-length '0x' hex form of a field value."""
    return int_to_hex(to_field_int(value))


def zero_pad_hex(value: FieldLike, length: int = ADDRESS_BYTES) -> str:
    """Left-pad a value with zero bytes to ``length`` bytes, lower-case hex."""
    return hex_zero_pad(to_field_int(value), length)


def make_identifier(address: FieldLike, token_id: Optional[FieldLike] = None) -> int:
    """
    Build an account identifier from an address.

    With a token id, its hex digits (left-padded to 20 characters) are
    appended to the address, giving ``address || tokenId``.

    Args:
        address: 20-byte address
        token_id: Optional credential token id

    Returns:
        int: The identifier as a field value
    """
    address_hex = zero_pad_hex(address, ADDRESS_BYTES)
    if token_id is None:
        return int(address_hex, 16)

    token_digits = format(to_field_int(token_id), "x").rjust(TOKEN_ID_HEX_DIGITS, "0")
    return int(address_hex + token_digits, 16)
