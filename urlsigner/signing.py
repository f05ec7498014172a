import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)


class SignatureAlgorithm:
    """Computes the signature for a canonical URL and its expiration.

    Subclasses implement ``__call__(url, expiration, key) -> str``. The result
    must be deterministic for identical inputs and key.
    """

    name = "abstract"

    def _message(self, *, url: str, expiration: str, key: bytes) -> bytes:
        return url.encode("utf-8") + b"::" + expiration.encode("utf-8") + b"::" + key

    def __call__(self, url: str, expiration: str, key: bytes) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class HmacSignature(SignatureAlgorithm):
    def __init__(self, digestmod=hashlib.sha256):
        self.digestmod = digestmod
        self.name = f"hmac-{digestmod().name}"

    def __call__(self, url: str, expiration: str, key: bytes) -> str:
        msg = self._message(url=url, expiration=expiration, key=key)
        return hmac.new(key, msg, self.digestmod).hexdigest()


class LengthPrefixedHmacSignature(HmacSignature):
    """HMAC over length-prefixed fields instead of ``::``-joined ones.

    Every field is written as a 4-byte big-endian length followed by its
    UTF-8 bytes, so a URL containing ``::`` cannot shift the field boundaries.
    """

    def __init__(self, digestmod=hashlib.sha256):
        super().__init__(digestmod)
        self.name = f"{self.name}-lp"

    def _message(self, *, url: str, expiration: str, key: bytes) -> bytes:
        msg = b""
        for field in (url.encode("utf-8"), expiration.encode("utf-8")):
            msg += len(field).to_bytes(4, "big") + field
        return msg


class Md5Signature(SignatureAlgorithm):
    """Unkeyed md5 over ``url::expiration::key``.

    Only for URLs issued by older deployments. Anyone who learns or guesses
    the key can forge signatures offline, and md5 itself is broken.
    """

    name = "md5"

    def __init__(self):
        logger.warning("md5 URL signatures are insecure; use an HMAC algorithm instead")

    def __call__(self, url: str, expiration: str, key: bytes) -> str:
        return hashlib.md5(self._message(url=url, expiration=expiration, key=key)).hexdigest()


ALGORITHMS = {
    "hmac-sha256": lambda: HmacSignature(hashlib.sha256),
    "hmac-sha512": lambda: HmacSignature(hashlib.sha512),
    "hmac-sha256-lp": lambda: LengthPrefixedHmacSignature(hashlib.sha256),
    "md5": Md5Signature,
}


def get_algorithm(name: str) -> SignatureAlgorithm:
    try:
        factory = ALGORITHMS[name]
    except KeyError:
        raise ValueError(f"unknown signature algorithm: {name}") from None
    return factory()
