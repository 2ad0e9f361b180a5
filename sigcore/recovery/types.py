"""Type definitions for secp256k1 signer recovery."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field

from sigcore.core.errors import SignatureParseFailedError

SECP256K1_COMPONENT_SIZE = 32
RECOVERABLE_SIGNATURE_SIZE = 2 * SECP256K1_COMPONENT_SIZE + 1


class RecoverableSignature(BaseModel):
    """ECDSA signature with recovery id as sent by wallets.

    r and s are big-endian unsigned integers of any length up to the
    curve width. v may use the raw 0/1, legacy 27/28, or EIP-155
    conventions.
    """

    model_config = ConfigDict(frozen=True)

    r: bytes
    s: bytes
    v: int = Field(ge=0)

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """Parse a 65-byte r || s || v signature."""
        if len(data) != RECOVERABLE_SIGNATURE_SIZE:
            raise SignatureParseFailedError(
                f"Recoverable signature must be {RECOVERABLE_SIGNATURE_SIZE} bytes, "
                f"got {len(data)}."
            )
        return cls(
            r=data[:SECP256K1_COMPONENT_SIZE],
            s=data[SECP256K1_COMPONENT_SIZE : 2 * SECP256K1_COMPONENT_SIZE],
            v=data[-1],
        )
