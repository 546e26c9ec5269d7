"""Tests for column codecs and the encryption helpers."""

import base64
import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from cryptography.exceptions import InvalidTag

from tableless_model import CodecFailure
from tableless_model.records.codec import (
    EncryptedCodec,
    PlainCodec,
    SerializedColumn,
    codec_for,
    dumps,
    loads,
)
from tableless_model.records.encryption import EncryptionKey, MessageEncryptor, derive_column_key
from tableless_model.security.crypto import decrypt_data, encrypt_data, generate_key
from tests.models import SECRET, ModelOptions, ModelSettings


# --- Serialization ---


class TestSerialization:
    def test_dumps_is_canonical(self):
        text = dumps({"b": Decimal("1.50"), "a": date(2011, 1, 2)})
        assert text == '{"a":"2011-01-02","b":"1.50"}'

    def test_datetimes_use_iso_format(self):
        value = datetime(2011, 1, 2, 15, 23, tzinfo=timezone.utc)
        assert json.loads(dumps({"at": value})) == {"at": "2011-01-02T15:23:00+00:00"}

    def test_unserializable_values(self):
        with pytest.raises(CodecFailure):
            dumps({"a": object()})

    @pytest.mark.parametrize("text", ["not json", "[1, 2]", "3"])
    def test_loads_requires_a_mapping(self, text):
        with pytest.raises(CodecFailure):
            loads(text)


class TestSerializedColumn:
    def test_bind_and_result(self):
        column = SerializedColumn()
        stored = column.process_bind_param({"typed_attribute": 5}, None)
        assert stored == '{"typed_attribute":5}'
        assert column.process_result_value(stored, None) == {"typed_attribute": 5}

    def test_none_passes_through(self):
        column = SerializedColumn()
        assert column.process_bind_param(None, None) is None
        assert column.process_result_value(None, None) is None

    def test_corrupt_column_values(self):
        with pytest.raises(CodecFailure):
            SerializedColumn().process_result_value("{broken", None)


# --- Codecs ---


class TestPlainCodec:
    def test_encodes_cast_values(self):
        encoded = PlainCodec().encode(ModelOptions({"typed_attribute": "8"}))
        assert type(encoded) is dict
        assert encoded["typed_attribute"] == 8

    def test_decode(self):
        codec = PlainCodec()
        assert codec.decode(None) == {}
        assert codec.decode({"typed_attribute": 3}) == {"typed_attribute": 3}

    def test_decode_rejects_non_mappings(self):
        with pytest.raises(CodecFailure):
            PlainCodec().decode("plain text")

    def test_codec_for(self):
        assert isinstance(codec_for(), PlainCodec)
        assert isinstance(codec_for(SECRET), EncryptedCodec)


class TestEncryptedCodec:
    @pytest.fixture(scope="class")
    def codec(self):
        return EncryptedCodec(SECRET)

    def test_round_trip(self, codec):
        settings = ModelSettings(some_attribute="non default value")
        stored = codec.encode(settings)
        assert isinstance(stored, str)
        assert "non default value" not in stored
        assert ModelSettings(codec.decode(stored)) == settings

    def test_ciphertext_is_not_the_serialized_form(self, codec):
        settings = ModelSettings()
        assert codec.encode(settings) != dumps(settings.to_dict())

    def test_empty_column_decodes_to_defaults(self, codec):
        assert codec.decode(None) == {}
        assert codec.decode("") == {}

    def test_wrong_key(self, codec):
        stored = codec.encode(ModelSettings())
        with pytest.raises(CodecFailure):
            EncryptedCodec("another secret").decode(stored)

    @pytest.mark.parametrize("stored", ["not base64!", base64.b64encode(b"short").decode()])
    def test_garbage(self, codec, stored):
        with pytest.raises(CodecFailure):
            codec.decode(stored)

    def test_encrypted_non_mapping(self, codec):
        with pytest.raises(CodecFailure):
            codec.decode(codec.encryptor.encrypt("[1, 2, 3]"))


# --- Encryption helpers ---


class TestMessageEncryptor:
    def test_round_trip(self):
        encryptor = MessageEncryptor(SECRET)
        message = encryptor.encrypt("serialised...")
        assert encryptor.decrypt(message) == "serialised..."

    def test_nonce_is_random(self):
        encryptor = MessageEncryptor(SECRET)
        assert encryptor.encrypt("same") != encryptor.encrypt("same")

    def test_tampering_is_detected(self):
        encryptor = MessageEncryptor(SECRET)
        raw = bytearray(base64.b64decode(encryptor.encrypt("payload")))
        raw[-1] ^= 0x01
        with pytest.raises(CodecFailure):
            encryptor.decrypt(base64.b64encode(bytes(raw)).decode())

    @pytest.mark.parametrize("secret", ["", b""])
    def test_empty_secrets_are_rejected(self, secret):
        with pytest.raises(ValueError):
            MessageEncryptor(secret)


class TestKeyDerivation:
    def test_is_deterministic(self):
        assert derive_column_key(SECRET) == derive_column_key(SECRET.encode())
        assert len(derive_column_key(SECRET)) == 32

    def test_secrets_differ(self):
        assert derive_column_key("one") != derive_column_key("two")

    def test_key_repr_is_redacted(self):
        assert "redacted" in repr(EncryptionKey.from_secret(SECRET))


class TestCrypto:
    def test_round_trip(self):
        key = generate_key()
        ciphertext, nonce = encrypt_data(b"payload", key)
        assert len(nonce) == 12
        assert decrypt_data(ciphertext, nonce, key) == b"payload"

    def test_wrong_key(self):
        ciphertext, nonce = encrypt_data(b"payload", generate_key())
        with pytest.raises(InvalidTag):
            decrypt_data(ciphertext, nonce, generate_key())
