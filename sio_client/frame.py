# =============================================================================
# SIO Client -- WebSocket Frame Codec
# =============================================================================
#
# RFC 6455 base framing, no extensions, no fragmentation:
#
#   byte 0   fin(1) rsv1(1) rsv2(1) rsv3(1) opcode(4)
#   byte 1   mask(1) length(7)
#   +0/2/8   extended length (126 -> !H, 127 -> two !I halves)
#   +0/4     mask key
#   payload
# =============================================================================

from __future__ import annotations

import secrets
import struct
import sys
from functools import cached_property

from websockets.utils import apply_mask

from .constants import (
    LENGTH_16BIT,
    LENGTH_64BIT,
    MASK_KEY_SIZE,
    MAX_INLINE_LENGTH,
    MAX_SHORT_LENGTH,
    MIN_FRAME_SIZE,
)
from .errors import SIOArchitectureError, SIOProtocolError
from .types import Frame, Opcode

_EMPTY_FRAME = Frame(
    fin=1, rsv=(0, 0, 0), opcode=Opcode.CONTINUATION, masked=False, mask_key=None, payload=b""
)


def mask_data(data: bytes, mask_key: bytes) -> bytes:
    """XOR *data* with *mask_key* cycled over its 4 bytes.

    Masking and unmasking are the same operation.
    """
    if len(mask_key) != MASK_KEY_SIZE:
        raise ValueError(f"mask key must be {MASK_KEY_SIZE} bytes, got {len(mask_key)}")
    return apply_mask(data, mask_key)


def ensure_64bit() -> None:
    """Raise if this interpreter cannot hold a 64-bit payload length."""
    if sys.maxsize < 2**63 - 1:
        raise SIOArchitectureError(
            "64 bits unsigned integer are not supported on this architecture"
        )


def encode_frame(
    data: bytes,
    opcode: Opcode = Opcode.TEXT,
    mask: bool = False,
    *,
    fin: bool = True,
    mask_key: bytes | None = None,
) -> bytes:
    """Build a single WebSocket frame around *data*.

    The length field always uses the smallest representation. With
    ``mask=True`` a random key is drawn unless *mask_key* is given.
    """
    length = len(data)
    if length > MAX_SHORT_LENGTH:
        extended = struct.pack("!II", length >> 32, length & 0xFFFFFFFF)
        length_field = LENGTH_64BIT
    elif length > MAX_INLINE_LENGTH:
        extended = struct.pack("!H", length)
        length_field = LENGTH_16BIT
    else:
        extended = b""
        length_field = length

    # rsv bits are always zero
    first = (int(fin) << 7) | (Opcode(opcode) & 0x0F)
    second = (int(mask) << 7) | length_field
    header = bytes((first, second)) + extended

    if not mask:
        return header + data

    if mask_key is None:
        mask_key = secrets.token_bytes(MASK_KEY_SIZE)
    return header + mask_key + mask_data(data, mask_key)


def frame_header_length(second_byte: int) -> int:
    """Bytes between the 2-byte header and the payload.

    Covers the extended length and the mask key, from the second header
    byte alone.
    """
    raw_length = second_byte & 0x7F
    size = 0
    if raw_length == LENGTH_16BIT:
        size = 2
    elif raw_length == LENGTH_64BIT:
        size = 8
    if second_byte & 0x80:
        size += MASK_KEY_SIZE
    return size


class FrameDecoder:
    """Lazily decode one raw WebSocket frame.

    The frame is parsed on first access and the result cached, so repeated
    reads return the same payload without reprocessing. Input shorter
    than 3 bytes decodes to an empty payload.

    Args:
        raw: The complete frame bytes as read off the wire.
    """

    def __init__(self, raw: bytes) -> None:
        self._raw = bytes(raw)

    @cached_property
    def frame(self) -> Frame:
        return self._decode()

    @property
    def payload(self) -> bytes:
        return self.frame.payload

    def __bytes__(self) -> bytes:
        return self.payload

    def __str__(self) -> str:
        return self.frame.text

    def __len__(self) -> int:
        """Declared payload length."""
        if len(self._raw) < 2:
            return 0
        length, _ = self._declared_length()
        return length

    def _declared_length(self) -> tuple[int, int]:
        """Return ``(payload_length, offset_after_length_field)``."""
        raw = self._raw
        raw_length = raw[1] & 0x7F
        if raw_length == LENGTH_16BIT:
            if len(raw) < 4:
                raise SIOProtocolError("Truncated 16-bit extended payload length")
            return struct.unpack_from("!H", raw, 2)[0], 4
        if raw_length == LENGTH_64BIT:
            ensure_64bit()
            if len(raw) < 10:
                raise SIOProtocolError("Truncated 64-bit extended payload length")
            left, right = struct.unpack_from("!II", raw, 2)
            return left << 32 | right, 10
        return raw_length, 2

    def _decode(self) -> Frame:
        raw = self._raw
        if len(raw) < 2:
            return _EMPTY_FRAME

        first, second = raw[0], raw[1]
        fin = first >> 7
        rsv = ((first >> 6) & 1, (first >> 5) & 1, (first >> 4) & 1)
        opcode = Opcode(first & 0x0F)
        masked = bool(second >> 7)

        # header only: control frames such as an empty CLOSE or PING
        if len(raw) < MIN_FRAME_SIZE:
            return Frame(
                fin=fin, rsv=rsv, opcode=opcode, masked=masked, mask_key=None, payload=b""
            )

        length, offset = self._declared_length()

        mask_key = None
        if masked:
            mask_key = raw[offset : offset + MASK_KEY_SIZE]
            if len(mask_key) != MASK_KEY_SIZE:
                raise SIOProtocolError("Truncated mask key")
            offset += MASK_KEY_SIZE

        payload = raw[offset : offset + length]
        if len(payload) != length:
            raise SIOProtocolError(
                f"Frame declares {length} payload bytes, only {len(payload)} available"
            )
        if masked:
            payload = mask_data(payload, mask_key)

        return Frame(
            fin=fin,
            rsv=rsv,
            opcode=opcode,
            masked=masked,
            mask_key=mask_key,
            payload=payload,
        )


def decode_frame(raw: bytes) -> Frame:
    """Decode one complete frame."""
    return FrameDecoder(raw).frame
