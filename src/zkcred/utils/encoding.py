"""Encoding and decoding utilities for field values."""

from typing import Union


def int_to_hex(value: int) -> str:
    """
    Convert a non-negative integer to its minimal hexadecimal string.

    The result always has an even number of digits, matching the
    ``toHexString`` form used by Ethereum tooling.

    Args:
        value: Integer to convert

    Returns:
        str: Hexadecimal string with '0x' prefix

    Raises:
        ValueError: If value is negative
    """
    if value < 0:
        raise ValueError("Cannot hex-encode a negative value")

    digits = format(value, "x")
    if len(digits) % 2 != 0:
        digits = "0" + digits
    return "0x" + digits


def hex_to_bytes(hex_str: str) -> bytes:
    """
    Convert hexadecimal string to bytes.

    Odd-length strings are accepted and left-padded with a zero nibble.

    Args:
        hex_str: Hexadecimal string (with or without '0x' prefix)

    Returns:
        bytes: Decoded bytes

    Raises:
        ValueError: If hex string is invalid
    """
    if hex_str.startswith(("0x", "0X")):
        hex_str = hex_str[2:]

    if len(hex_str) % 2 != 0:
        hex_str = "0" + hex_str

    return bytes.fromhex(hex_str)


def hex_zero_pad(data: Union[int, str, bytes], length: int) -> str:
    """
    Left-pad a value with zero bytes to ``length`` bytes.

    Values already longer than ``length`` bytes are returned unchanged.

    Args:
        data: Integer, hex string or bytes
        length: Target width in bytes

    Returns:
        str: Lower-case hex string with '0x' prefix
    """
    if isinstance(data, int):
        raw = hex_to_bytes(int_to_hex(data))
    elif isinstance(data, str):
        raw = hex_to_bytes(data)
    elif isinstance(data, (bytes, bytearray)):
        raw = bytes(data)
    else:
        raise TypeError(f"Expected int, str or bytes, got {type(data)}")

    return "0x" + raw.rjust(length, b"\x00").hex()
