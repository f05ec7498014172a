class UrlSignerError(Exception):
    """Base class for errors raised while configuring a signer or signing a URL."""


class InvalidSignatureKey(UrlSignerError, ValueError):
    """The signing key is empty or not a str/bytes value."""


class InvalidExpiration(UrlSignerError, ValueError):
    """The expiration is of an unknown type or does not lie in the future."""
