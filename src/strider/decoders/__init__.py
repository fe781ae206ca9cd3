"""Decoders turning raw sensor payloads into acceleration samples."""

from strider.decoders.accel import AccelDecoder, AccelData, decode_sample_record

__all__ = [
    "AccelDecoder",
    "AccelData",
    "decode_sample_record",
]
