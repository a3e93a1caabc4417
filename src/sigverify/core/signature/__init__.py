"""OpenPGP signature verification."""

from sigverify.core.signature.backend import (
    CryptoBackend,
    ParsedKey,
    ParsedMessage,
    ParsedSignature,
    StreamVerifier,
)
from sigverify.core.signature.keyring import KeyMaterial
from sigverify.core.signature.pgpy_backend import (
    PGPyBackend,
    PGPyStreamVerifier,
)
from sigverify.core.signature.pipeline import (
    REASON_BAD_SIGNATURE,
    REASON_NO_MATCHING_KEY,
    SignaturePipeline,
    decode_text,
    describe_signature,
    resolve_signer,
)

__all__ = [
    "REASON_BAD_SIGNATURE",
    "REASON_NO_MATCHING_KEY",
    "CryptoBackend",
    "KeyMaterial",
    "PGPyBackend",
    "PGPyStreamVerifier",
    "ParsedKey",
    "ParsedMessage",
    "ParsedSignature",
    "SignaturePipeline",
    "StreamVerifier",
    "decode_text",
    "describe_signature",
    "resolve_signer",
]
