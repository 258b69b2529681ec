"""Base58 encoding with the Bitcoin alphabet."""

ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {char: value for value, char in enumerate(ALPHABET)}


def base58_encode(data: bytes) -> bytes:
    """Encode bytes as Base58; each leading zero byte becomes a '1'."""
    data = bytes(data)
    number = int.from_bytes(data, "big")
    digits = bytearray()
    while number:
        number, remainder = divmod(number, 58)
        digits.append(ALPHABET[remainder])
    zeros = len(data) - len(data.lstrip(b"\x00"))
    return ALPHABET[:1] * zeros + bytes(reversed(digits))


def base58_decode(data: bytes | str) -> bytes:
    """Decode Base58 text; raises ValueError on characters outside the alphabet."""
    if isinstance(data, str):
        try:
            data = data.encode("ascii")
        except UnicodeEncodeError as exc:
            raise ValueError("base58 text must be ASCII") from exc
    data = bytes(data)
    zeros = len(data) - len(data.lstrip(ALPHABET[:1]))
    number = 0
    for char in data[zeros:]:
        try:
            number = number * 58 + _INDEX[char]
        except KeyError:
            raise ValueError(f"invalid base58 character {chr(char)!r}") from None
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return b"\x00" * zeros + body