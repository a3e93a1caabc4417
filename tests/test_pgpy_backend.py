"""Tests for the PGPy cryptography backend and stream verifier."""

import pytest

from sigverify.core.signature import PGPyBackend, PGPyStreamVerifier
from sigverify.exceptions import KeyParseError, SignatureParseError

PAYLOAD = b"\x00\x01binary release image\xff" * 300


@pytest.fixture
def backend():
    return PGPyBackend()


@pytest.fixture(params=["rsa_key", "ecdsa_key", "ed25519_key"])
def signing_key(request):
    """Each supported key algorithm in turn."""
    return request.getfixturevalue(request.param)


def _stream(backend, key, signature, data, chunk_size):
    verifier = backend.open_stream(key, signature)
    for offset in range(0, len(data), chunk_size):
        verifier.update(data[offset : offset + chunk_size])
    return verifier.finalize()


class TestParseKeys:
    def test_armored_key(self, backend, rsa_key):
        keys = backend.parse_keys(str(rsa_key.pubkey).encode(), "alice.asc")
        assert len(keys) == 1
        info = keys[0].info
        assert info.fingerprint == str(rsa_key.fingerprint)
        assert info.key_id == rsa_key.fingerprint.keyid
        assert info.user_ids == ("Alice <alice@example.com>",)

    def test_binary_key(self, backend, ed25519_key):
        keys = backend.parse_keys(bytes(ed25519_key.pubkey), "bob.gpg")
        assert keys[0].info.primary_user_id == "Bob <bob@example.com>"

    def test_secret_key_contributes_public_half(self, backend, rsa_key):
        keys = backend.parse_keys(str(rsa_key).encode(), "secret.asc")
        assert keys[0].native.is_public

    def test_several_blocks_deduplicated(self, backend, rsa_key, ecdsa_key):
        data = "\n".join(
            [str(rsa_key.pubkey), str(ecdsa_key.pubkey), str(rsa_key.pubkey)]
        ).encode()
        keys = backend.parse_keys(data, "ring.asc")
        assert [k.info.fingerprint for k in keys] == [
            str(rsa_key.fingerprint),
            str(ecdsa_key.fingerprint),
        ]

    def test_subkeys_are_listed(self, backend, subkey_pair):
        primary, subkey = subkey_pair
        keys = backend.parse_keys(str(primary.pubkey).encode(), "dave.asc")
        assert subkey.fingerprint.keyid in keys[0].info.subkey_ids

    def test_signature_is_not_a_key(self, backend, rsa_key):
        data = str(rsa_key.sign(b"x")).encode()
        with pytest.raises(KeyParseError):
            backend.parse_keys(data, "bad.asc")

    def test_unterminated_block(self, backend):
        data = b"-----BEGIN PGP PUBLIC KEY BLOCK-----\n\nabc\n"
        with pytest.raises(KeyParseError, match="unterminated"):
            backend.parse_keys(data, "cut.asc")


class TestParseSignature:
    def test_armored_and_binary(self, backend, rsa_key):
        signature = rsa_key.sign(PAYLOAD)
        armored = backend.parse_signature(str(signature).encode(), "a.asc")
        binary = backend.parse_signature(bytes(signature), "a.sig")
        assert armored.info == binary.info
        assert armored.info.issuer_key_id == rsa_key.fingerprint.keyid
        assert armored.info.hash_algorithm == "SHA256"
        assert not armored.info.is_text

    def test_text_signature_flag(self, backend, rsa_key, text_signature):
        data = text_signature(rsa_key, "hello\n").encode()
        assert backend.parse_signature(data, "t.asc").info.is_text

    def test_garbage(self, backend):
        with pytest.raises(SignatureParseError):
            backend.parse_signature(b"not a signature", "x.sig")


class TestParseMessage:
    def test_clearsigned(self, backend, rsa_key, clearsign):
        data = clearsign(rsa_key, "hello world\n").encode()
        message = backend.parse_message(data, "m.asc")
        assert message.cleartext
        assert message.payload.rstrip("\n") == "hello world"
        assert len(message.signatures) == 1

    def test_inline_signed(self, backend, rsa_key, inline_sign):
        data = inline_sign(rsa_key, "inline body\n").encode()
        message = backend.parse_message(data, "m.gpg")
        assert not message.cleartext
        assert message.signatures[0].issuer_key_id == (
            rsa_key.fingerprint.keyid
        )

    def test_garbage(self, backend):
        with pytest.raises(SignatureParseError):
            backend.parse_message(b"-----BEGIN PGP MESSAGE-----\n", "m")


class TestVerify:
    def test_clearsigned_valid(self, backend, signing_key, clearsign):
        data = clearsign(signing_key, "signed text\n").encode()
        key = backend.parse_keys(bytes(signing_key.pubkey), "k")[0]
        message = backend.parse_message(data, "m.asc")
        assert backend.verify_message(key, message)

    def test_wrong_key_is_false(self, backend, rsa_key, other_key, clearsign):
        data = clearsign(rsa_key, "signed text\n").encode()
        key = backend.parse_keys(bytes(other_key.pubkey), "k")[0]
        message = backend.parse_message(data, "m.asc")
        assert not backend.verify_message(key, message)

    def test_detached_valid_and_tampered(self, backend, signing_key):
        signature = backend.parse_signature(
            bytes(signing_key.sign(PAYLOAD)), "s"
        )
        key = backend.parse_keys(bytes(signing_key.pubkey), "k")[0]
        assert backend.verify_detached(key, signature, PAYLOAD)
        assert not backend.verify_detached(key, signature, PAYLOAD + b"!")


class TestStreamVerifier:
    @pytest.mark.parametrize("chunk_size", [1, 13, 4096, 100_000])
    def test_matches_in_memory_result(self, backend, signing_key, chunk_size):
        signature = backend.parse_signature(
            bytes(signing_key.sign(PAYLOAD)), "s"
        )
        key = backend.parse_keys(bytes(signing_key.pubkey), "k")[0]
        assert _stream(backend, key, signature, PAYLOAD, chunk_size)
        assert backend.verify_detached(key, signature, PAYLOAD)

    def test_tampered_payload(self, backend, signing_key):
        signature = backend.parse_signature(
            bytes(signing_key.sign(PAYLOAD)), "s"
        )
        key = backend.parse_keys(bytes(signing_key.pubkey), "k")[0]
        tampered = bytearray(PAYLOAD)
        tampered[500] ^= 0x01
        assert not _stream(backend, key, signature, bytes(tampered), 64)

    def test_empty_payload(self, backend, rsa_key):
        signature = backend.parse_signature(bytes(rsa_key.sign(b"")), "s")
        key = backend.parse_keys(bytes(rsa_key.pubkey), "k")[0]
        assert _stream(backend, key, signature, b"", 10)

    @pytest.mark.parametrize("chunk_size", [1, 2, 5, 6, 1000])
    def test_text_signature_over_crlf_chunks(
        self, backend, rsa_key, text_signature, chunk_size
    ):
        text = "line one\nline two\n\nlast line\n"
        signature = backend.parse_signature(
            text_signature(rsa_key, text).encode(), "t.asc"
        )
        key = backend.parse_keys(bytes(rsa_key.pubkey), "k")[0]
        crlf = text.replace("\n", "\r\n").encode()
        assert _stream(backend, key, signature, crlf, chunk_size)
        assert _stream(backend, key, signature, text.encode(), chunk_size)
        assert backend.verify_detached(key, signature, crlf)

    def test_signing_subkey(self, backend, subkey_pair):
        primary, subkey = subkey_pair
        signature = backend.parse_signature(bytes(subkey.sign(PAYLOAD)), "s")
        key = backend.parse_keys(bytes(primary.pubkey), "k")[0]
        assert signature.info.issuer_key_id == subkey.fingerprint.keyid
        assert _stream(backend, key, signature, PAYLOAD, 100)

    def test_finalize_is_once(self, backend, rsa_key):
        signature = backend.parse_signature(bytes(rsa_key.sign(b"x")), "s")
        key = backend.parse_keys(bytes(rsa_key.pubkey), "k")[0]
        verifier = backend.open_stream(key, signature)
        assert isinstance(verifier, PGPyStreamVerifier)
        verifier.update(b"x")
        assert verifier.finalize()
        with pytest.raises(RuntimeError):
            verifier.finalize()
        with pytest.raises(RuntimeError):
            verifier.update(b"more")
