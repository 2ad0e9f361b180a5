"""Recover the secp256k1 public key that produced a signature.

Used by the session-pairing handshake: the peer signs a message, we
recover its public key and derive the address it claims to control.
"""

from Crypto.Hash import keccak
from coincurve import PublicKey
from coincurve.ecdsa import deserialize_recoverable, recover

from sigcore.core.errors import RecoveryFailedError, SignatureParseFailedError
from sigcore.recovery.types import SECP256K1_COMPONENT_SIZE, RecoverableSignature

MESSAGE_DIGEST_SIZE = 32
PUBLIC_POINT_SIZE = 64
ADDRESS_SIZE = 20

# (first, last, offset) bands for legacy, compressed-key and EIP-155 ids.
_RECOVERY_ID_BANDS = ((27, 30, 27), (31, 34, 31), (35, 38, 35))
_EIP155_BASE = 35


def normalize_recovery_id(v: int) -> int:
    """Map a wallet-supplied v onto the curve library's recovery id."""
    for first, last, offset in _RECOVERY_ID_BANDS:
        if first <= v <= last:
            return v - offset
    if v > _RECOVERY_ID_BANDS[-1][1]:
        return (v - _EIP155_BASE) % 2
    return v


def recover_public_key(signature: RecoverableSignature, message_digest: bytes) -> bytes:
    """Return the signer's 64-byte X || Y point for a 32-byte digest."""
    if len(message_digest) != MESSAGE_DIGEST_SIZE:
        raise RecoveryFailedError(
            f"Message digest must be {MESSAGE_DIGEST_SIZE} bytes, "
            f"got {len(message_digest)}."
        )

    compact = _component(signature.r) + _component(signature.s)
    recovery_id = normalize_recovery_id(signature.v)

    try:
        recoverable = deserialize_recoverable(compact + bytes([recovery_id]))
    except ValueError as exc:
        raise SignatureParseFailedError() from exc

    try:
        point = recover(message_digest, recoverable, hasher=None)
    except ValueError as exc:
        raise RecoveryFailedError() from exc

    # Drop the 0x04 uncompressed-point marker.
    return PublicKey(point).format(compressed=False)[1:]


def recover_message_signer(signature: RecoverableSignature, message: bytes) -> bytes:
    """Hash message with Keccak-256 and recover the signer's point."""
    return recover_public_key(signature, keccak256(message))


def keccak256(data: bytes) -> bytes:
    digest = keccak.new(digest_bits=256)
    digest.update(data)
    return digest.digest()


def public_key_to_address(public_key: bytes) -> str:
    """Derive the EIP-55 checksummed address of a 64-byte X || Y point."""
    if len(public_key) != PUBLIC_POINT_SIZE:
        raise ValueError(f"public key must be {PUBLIC_POINT_SIZE} bytes")
    address = keccak256(public_key)[-ADDRESS_SIZE:].hex()
    checksum = keccak256(address.encode("ascii")).hex()
    return "0x" + "".join(
        char.upper() if int(nibble, 16) >= 8 else char
        for char, nibble in zip(address, checksum)
    )


def _component(value: bytes) -> bytes:
    stripped = value.lstrip(b"\x00")
    if len(stripped) > SECP256K1_COMPONENT_SIZE:
        raise SignatureParseFailedError(
            f"Signature component wider than {SECP256K1_COMPONENT_SIZE} bytes."
        )
    return stripped.rjust(SECP256K1_COMPONENT_SIZE, b"\x00")
