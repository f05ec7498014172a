import hashlib
import hmac
import logging

import pytest

from urlsigner.signing import HmacSignature, LengthPrefixedHmacSignature, Md5Signature, get_algorithm

URL = "https://example.com/file"
EXPIRES = "1700086400"
KEY = b"secret"


def test_hmac_signature_is_keyed_digest_of_joined_fields():
    expected = hmac.new(KEY, f"{URL}::{EXPIRES}::secret".encode(), hashlib.sha256).hexdigest()

    assert HmacSignature()(URL, EXPIRES, KEY) == expected


def test_hmac_signature_is_deterministic():
    algorithm = HmacSignature()

    assert algorithm(URL, EXPIRES, KEY) == algorithm(URL, EXPIRES, KEY)


def test_hmac_signature_depends_on_every_input():
    algorithm = HmacSignature()
    base = algorithm(URL, EXPIRES, KEY)

    assert algorithm(URL + "x", EXPIRES, KEY) != base
    assert algorithm(URL, "1700086401", KEY) != base
    assert algorithm(URL, EXPIRES, b"other") != base


def test_hmac_sha512_digest_length():
    assert len(HmacSignature(hashlib.sha512)(URL, EXPIRES, KEY)) == 128


def test_separator_framing_is_ambiguous_but_length_prefixed_is_not():
    joined = HmacSignature()
    framed = LengthPrefixedHmacSignature()

    assert joined("a::1", "2", KEY) == joined("a", "1::2", KEY)
    assert framed("a::1", "2", KEY) != framed("a", "1::2", KEY)


def test_md5_signature_matches_legacy_scheme():
    expected = hashlib.md5(f"{URL}::{EXPIRES}::secret".encode()).hexdigest()

    assert Md5Signature()(URL, EXPIRES, KEY) == expected


def test_md5_signature_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="urlsigner.signing"):
        Md5Signature()

    assert "insecure" in caplog.text


@pytest.mark.parametrize(
    ("name", "cls"),
    [
        ("hmac-sha256", HmacSignature),
        ("hmac-sha512", HmacSignature),
        ("hmac-sha256-lp", LengthPrefixedHmacSignature),
        ("md5", Md5Signature),
    ],
)
def test_get_algorithm(name, cls):
    algorithm = get_algorithm(name)

    assert isinstance(algorithm, cls)
    assert algorithm.name == name


def test_get_algorithm_rejects_unknown_name():
    with pytest.raises(ValueError, match="unknown signature algorithm"):
        get_algorithm("crc32")
