"""Structured-output codecs."""

from agentweave.core.codec.decoder import JsonOutputDecoder, OutputDecoder, decode_key_values

__all__ = ["JsonOutputDecoder", "OutputDecoder", "decode_key_values"]
