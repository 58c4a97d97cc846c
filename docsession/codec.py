"""Sealing and opening of tokens and session payloads.

A codec signs a payload with ``itsdangerous`` (the session name is the salt,
so a token sealed for one name never opens under another) and, when a block
key is configured, encrypts it with Fernet before signing. Payloads are
MongoDB extended JSON so datetimes and ObjectIds survive the round trip.

Codecs are used as an ordered list: the first one seals, every one is tried
in turn when opening. Prepend a new key pair to rotate keys; keep the old one
until tokens sealed with it have expired.
"""

from __future__ import annotations

import logging
from datetime import timezone
from typing import Any, Iterable, Sequence, Union

from bson import json_util
from cryptography.fernet import Fernet, InvalidToken
from itsdangerous import BadPayload, BadSignature, URLSafeTimedSerializer

from .errors import AuthenticationError, DecodingError, EncodingError

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = 30 * 24 * 3600  # 30 days

Key = Union[str, bytes]
KeyPair = Union[Key, tuple[Key, Union[Key, None]]]


class ExtendedJSON:
    """Serializer for itsdangerous backed by ``bson.json_util``."""

    options = json_util.RELAXED_JSON_OPTIONS.with_options(
        tz_aware=True, tzinfo=timezone.utc
    )

    @classmethod
    def dumps(cls, obj: Any, **kwargs: Any) -> str:
        return json_util.dumps(
            obj, json_options=cls.options, separators=(",", ":"), **kwargs
        )

    @classmethod
    def loads(cls, s: str | bytes, **kwargs: Any) -> Any:
        return json_util.loads(s, json_options=cls.options, **kwargs)


class _SealingSerializer(URLSafeTimedSerializer):
    """URL-safe timed serializer that encrypts the payload before signing."""

    def __init__(self, secret_key: Key, salt: str, fernet: Fernet | None = None) -> None:
        super().__init__(secret_key, salt=salt, serializer=ExtendedJSON)
        self._fernet = fernet

    def dump_payload(self, obj: Any) -> bytes:
        payload = super().dump_payload(obj)
        if self._fernet is not None:
            payload = self._fernet.encrypt(payload)
        return payload

    def load_payload(self, payload: bytes, *args: Any, **kwargs: Any) -> Any:
        if self._fernet is not None:
            try:
                payload = self._fernet.decrypt(payload)
            except InvalidToken as e:
                raise BadSignature("Payload could not be decrypted") from e
        return super().load_payload(payload, *args, **kwargs)


class SecureCodec:
    """One hash key (signing) plus an optional block key (Fernet encryption)."""

    def __init__(
        self,
        hash_key: Key,
        block_key: Key | None = None,
        *,
        max_age: int = DEFAULT_MAX_AGE,
    ) -> None:
        if not hash_key:
            raise ValueError("hash_key must not be empty")
        self._hash_key = hash_key
        self._fernet = Fernet(block_key) if block_key else None
        self.max_age = max_age

    def _serializer(self, name: str) -> _SealingSerializer:
        return _SealingSerializer(self._hash_key, salt=name, fernet=self._fernet)

    def encode(self, name: str, value: Any) -> str:
        try:
            return self._serializer(name).dumps(value)
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Cannot encode value for {name!r}: {e}") from e

    def decode(self, name: str, token: str, expected_type: type | None = None) -> Any:
        try:
            value = self._serializer(name).loads(token, max_age=self.max_age or None)
        except BadPayload as e:
            raise DecodingError(f"Cannot decode value for {name!r}: {e}") from e
        except BadSignature as e:
            raise AuthenticationError(f"Verification failed for {name!r}: {e}") from e

        if expected_type is not None and not isinstance(value, expected_type):
            raise DecodingError(
                f"Decoded value for {name!r} is {type(value).__name__}, "
                f"expected {expected_type.__name__}"
            )
        return value


def codecs_from_pairs(
    key_pairs: Iterable[KeyPair], *, max_age: int = DEFAULT_MAX_AGE
) -> list[SecureCodec]:
    """Build codecs, primary first.

    Each entry is either a hash key or a ``(hash_key, block_key)`` tuple.
    """
    codecs = []
    for pair in key_pairs:
        if isinstance(pair, tuple):
            hash_key, block_key = pair
        else:
            hash_key, block_key = pair, None
        codecs.append(SecureCodec(hash_key, block_key, max_age=max_age))
    return codecs


def encode_multi(name: str, value: Any, codecs: Sequence[SecureCodec]) -> str:
    """Seal ``value`` with the primary codec."""
    if not codecs:
        raise ValueError("No codecs configured")
    return codecs[0].encode(name, value)


def decode_multi(
    name: str,
    token: str,
    codecs: Sequence[SecureCodec],
    expected_type: type | None = None,
) -> Any:
    """Open ``token`` with the first codec that verifies it."""
    last_error: AuthenticationError | None = None
    for codec in codecs:
        try:
            return codec.decode(name, token, expected_type)
        except AuthenticationError as e:
            last_error = e

    logger.debug("No codec verified %r (%d tried)", name, len(codecs))
    if last_error is None:
        raise AuthenticationError(f"No codecs configured to open {name!r}")
    raise last_error
