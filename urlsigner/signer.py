import hmac
import logging
from datetime import datetime, timedelta, timezone

from urlsigner.clock import Clock, system_clock
from urlsigner.exceptions import InvalidExpiration, InvalidSignatureKey
from urlsigner.signing import HmacSignature, SignatureAlgorithm
from urlsigner.urls import query_pairs, with_params, without_params

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
MAX_TIMESTAMP_DIGITS = 20


class UrlSigner:
    """Signs URLs with an expiration timestamp and validates them later.

    The signature covers the URL as the caller passed it (without the two
    signer parameters) plus the expiration, so changing any other query
    parameter, the path, the host, or the expiration invalidates the URL.
    """

    def __init__(
        self,
        signature_key: str | bytes,
        expires_parameter: str = "expires",
        signature_parameter: str = "signature",
        *,
        algorithm: SignatureAlgorithm | None = None,
        clock: Clock = system_clock,
    ):
        if not isinstance(signature_key, (str, bytes)) or not signature_key:
            raise InvalidSignatureKey("The signature key is empty")
        if isinstance(signature_key, str):
            signature_key = signature_key.encode("utf-8")

        self._signature_key = signature_key
        self.expires_parameter = expires_parameter
        self.signature_parameter = signature_parameter
        self.algorithm = algorithm or HmacSignature()
        self.clock = clock

    def __repr__(self) -> str:
        return (
            f"UrlSigner(expires_parameter={self.expires_parameter!r}, "
            f"signature_parameter={self.signature_parameter!r}, algorithm={self.algorithm!r})"
        )

    @property
    def reserved_parameters(self) -> tuple[str, str]:
        return (self.expires_parameter, self.signature_parameter)

    def create_signature(self, url: str, expiration: str) -> str:
        return self.algorithm(url, expiration, self._signature_key)

    def sign(self, url: str, expiration: datetime | timedelta | int) -> str:
        """Return ``url`` with the expiration and signature query parameters added.

        ``expiration`` is either an absolute ``datetime`` (naive values are
        taken as UTC), a ``timedelta`` from now, or an integer number of days
        from now. Raises ``InvalidExpiration`` unless it resolves to a moment
        strictly in the future.
        """
        canonical = self.get_intended_url(url)
        expires = self.get_expiration_timestamp(expiration)
        signature = self.create_signature(canonical, expires)

        return with_params(
            canonical,
            [(self.expires_parameter, expires), (self.signature_parameter, signature)],
        )

    def validate(self, url: str) -> bool:
        try:
            pairs = query_pairs(url)
        except (TypeError, ValueError, AttributeError):
            logger.debug("Rejected signed URL: could not be parsed")
            return False

        values = {name: [v for k, v in pairs if k == name] for name in self.reserved_parameters}
        if any(len(found) != 1 for found in values.values()):
            logger.debug("Rejected signed URL: missing or repeated signer parameters")
            return False

        expiration = values[self.expires_parameter][0]
        provided_signature = values[self.signature_parameter][0]

        if not self.is_future(expiration):
            logger.debug("Rejected signed URL: expired or malformed expiration")
            return False

        try:
            valid = self.has_valid_signature(url, expiration, provided_signature)
        except (UnicodeError, ValueError):
            logger.debug("Rejected signed URL: could not be canonicalized")
            return False
        if not valid:
            logger.debug("Rejected signed URL: signature mismatch")
            return False

        return True

    def has_valid_signature(self, url: str, expiration: str, provided_signature: str) -> bool:
        intended_url = self.get_intended_url(url)
        expected = self.create_signature(intended_url, expiration)
        return hmac.compare_digest(expected.encode("utf-8"), provided_signature.encode("utf-8"))

    def get_intended_url(self, url: str) -> str:
        return without_params(url, self.reserved_parameters)

    def is_future(self, timestamp: str | int) -> bool:
        if isinstance(timestamp, str):
            if len(timestamp) > MAX_TIMESTAMP_DIGITS or not (timestamp.isascii() and timestamp.isdigit()):
                return False
            timestamp = int(timestamp)
        return timestamp > self.clock()

    def get_expiration_timestamp(self, expiration: datetime | timedelta | int) -> str:
        now = self.clock()

        if isinstance(expiration, bool):
            raise InvalidExpiration("Expiration date must be a datetime, a timedelta or an integer")
        if isinstance(expiration, int):
            timestamp = now + expiration * SECONDS_PER_DAY
        elif isinstance(expiration, timedelta):
            timestamp = now + int(expiration.total_seconds())
        elif isinstance(expiration, datetime):
            if expiration.tzinfo is None:
                expiration = expiration.replace(tzinfo=timezone.utc)
            timestamp = int(expiration.timestamp())
        else:
            raise InvalidExpiration("Expiration date must be a datetime, a timedelta or an integer")

        if not self.is_future(timestamp):
            raise InvalidExpiration("Expiration date must be in the future")

        return str(timestamp)
