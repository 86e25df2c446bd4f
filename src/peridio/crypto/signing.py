"""Ed25519 helpers for signing keys and binary signatures.

Signing keys are registered by their PEM SubjectPublicKeyInfo encoding. A
binary signature is the Ed25519 signature over the raw bytes of the binary's
SHA-256 hash, sent as uppercase hex.
"""

from __future__ import annotations

from pathlib import Path

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
    load_pem_private_key,
    load_pem_public_key,
)

_HASH_HEX_LEN = 64


class SigningKeyError(ValueError):
    """Raised when key material is missing, malformed or not Ed25519."""


def _read_pem(path: str | Path) -> bytes:
    key_path = Path(path)
    try:
        return key_path.read_bytes()
    except OSError as exc:
        raise SigningKeyError(f"cannot read key file: {key_path}") from exc


def load_private_key(path: str | Path) -> Ed25519PrivateKey:
    raw = _read_pem(path)
    try:
        key = load_pem_private_key(raw, password=None)
    except (TypeError, ValueError) as exc:
        raise SigningKeyError(f"invalid private key PEM: {path}") from exc
    if not isinstance(key, Ed25519PrivateKey):
        raise SigningKeyError("signing key must be an Ed25519 key")
    return key


def load_public_key(path: str | Path) -> Ed25519PublicKey:
    """Load a public key, or derive it from a private key PEM."""
    raw = _read_pem(path)
    if b"PRIVATE KEY" in raw:
        return load_private_key(path).public_key()
    try:
        key = load_pem_public_key(raw)
    except ValueError as exc:
        raise SigningKeyError(f"invalid public key PEM: {path}") from exc
    if not isinstance(key, Ed25519PublicKey):
        raise SigningKeyError("signing key must be an Ed25519 key")
    return key


def public_key_pem(key: Ed25519PublicKey) -> str:
    return key.public_bytes(Encoding.PEM, PublicFormat.SubjectPublicKeyInfo).decode("ascii")


def _hash_bytes(binary_hash: str) -> bytes:
    if len(binary_hash) != _HASH_HEX_LEN:
        raise SigningKeyError("binary hash must be a 64-character hex SHA-256 digest")
    try:
        return bytes.fromhex(binary_hash)
    except ValueError as exc:
        raise SigningKeyError("binary hash must be hex encoded") from exc


def sign_binary_hash(private_key: Ed25519PrivateKey, binary_hash: str) -> str:
    return private_key.sign(_hash_bytes(binary_hash)).hex().upper()


def verify_binary_signature(
    public_key: Ed25519PublicKey,
    binary_hash: str,
    signature_hex: str,
) -> bool:
    try:
        public_key.verify(bytes.fromhex(signature_hex), _hash_bytes(binary_hash))
    except (InvalidSignature, ValueError):
        return False
    return True
