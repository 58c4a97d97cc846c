from .backend import InMemoryBackend, SessionBackend, SessionDocument
from .codec import SecureCodec, codecs_from_pairs, decode_multi, encode_multi
from .dynamodb import DynamoDBSessionBackend
from .errors import (
    AuthenticationError,
    DecodingError,
    EncodingError,
    InvalidIdentifier,
    InvalidLastAccessedTime,
    NotFound,
    SessionError,
    SessionNotFound,
    TokenNotFound,
)
from .middleware import SessionMiddleware
from .mongodb import MongoDBSessionBackend
from .sessions import LAST_ACCESSED_KEY, Options, Session, save_all
from .store import SessionStore
from .transport import CookieToken, TokenProvider

__all__ = [
    "AuthenticationError",
    "CookieToken",
    "DecodingError",
    "DynamoDBSessionBackend",
    "EncodingError",
    "InMemoryBackend",
    "InvalidIdentifier",
    "InvalidLastAccessedTime",
    "LAST_ACCESSED_KEY",
    "MongoDBSessionBackend",
    "NotFound",
    "Options",
    "SecureCodec",
    "Session",
    "SessionBackend",
    "SessionDocument",
    "SessionError",
    "SessionMiddleware",
    "SessionNotFound",
    "SessionStore",
    "TokenNotFound",
    "TokenProvider",
    "codecs_from_pairs",
    "decode_multi",
    "encode_multi",
    "save_all",
]
