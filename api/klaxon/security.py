"""HMAC signing and verification for GitHub webhook deliveries."""

import hashlib
import hmac
import logging
from typing import Iterable, Optional

from klaxon.errors import UnsupportedAlgorithm

logger = logging.getLogger(__name__)

# The algorithm arrives in an untrusted header, so only these are ever honoured.
DEFAULT_ALGORITHMS = ("sha1", "sha256")


def _check_algorithm(algorithm: str, allowed: Optional[Iterable[str]]) -> None:
    allowed = DEFAULT_ALGORITHMS if allowed is None else tuple(allowed)
    if algorithm not in allowed or algorithm not in hashlib.algorithms_available:
        raise UnsupportedAlgorithm(algorithm)


def sign_string(
    key: str,
    message: str,
    algorithm: str,
    allowed: Optional[Iterable[str]] = None,
) -> str:
    """
    Sign *message* with *key* and return ``"<algorithm>=<hexdigest>"``.

    Raises:
        UnsupportedAlgorithm: *algorithm* is not in *allowed* or not
            provided by the local hashlib build.
    """
    _check_algorithm(algorithm, allowed)
    digest = hmac.new(
        key.encode("utf-8"), message.encode("utf-8"), algorithm
    ).hexdigest()
    return f"{algorithm}={digest}"


def verify_signature(
    key: str,
    message: str,
    signature: str,
    allowed: Optional[Iterable[str]] = None,
) -> bool:
    """Check a ``"<algorithm>=<hexdigest>"`` signature against *message*."""
    algorithm = signature.split("=", 1)[0]
    expected = sign_string(key, message, algorithm, allowed)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
