"""
Reversible obfuscation for secrets stored at rest.

XOR against a fixed salt, then base64. This is not encryption; it only
keeps API keys from sitting in plain text inside the credentials file.
"""
import base64
import binascii

_XOR_KEY = b"toolnames-ai-key-obfuscation-salt"


def _xor(data: bytes) -> bytes:
    return bytes(b ^ _XOR_KEY[i % len(_XOR_KEY)] for i, b in enumerate(data))


def obfuscate(text: str) -> str:
    return base64.b64encode(_xor(text.encode("utf-8"))).decode("ascii")


def deobfuscate(encoded: str) -> str:
    """Reverse :func:`obfuscate`. Returns an empty string for garbage input."""
    try:
        return _xor(base64.b64decode(encoded, validate=True)).decode("utf-8")
    except (binascii.Error, ValueError):
        return ""
