from typing import Union

from eth_utils import encode_hex


def strip_hex_prefix(value: str) -> str:
    """Remove a leading 0x/0X if present"""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def to_hex(data: Union[bytes, bytearray]) -> str:
    """Encode bytes as lowercase 0x-prefixed hex"""
    return encode_hex(bytes(data))
