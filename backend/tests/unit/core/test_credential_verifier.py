"""CredentialVerifier hashing and constant-time checks."""

from __future__ import annotations

import pytest

from vidtube.core.security import CredentialVerifier
from vidtube.services._shared.ports import InMemoryPrincipalDirectory


@pytest.fixture()
def verifier() -> CredentialVerifier:
    return CredentialVerifier("pbkdf2:sha256:1000")


def test_hash_is_salted(verifier):
    first, second = verifier.hash("secret"), verifier.hash("secret")
    assert first != second
    assert "secret" not in first


def test_verify_against_principal(verifier):
    directory = InMemoryPrincipalDirectory()
    principal = directory.add(username="u", email="u@example.com", password_hash=verifier.hash("pw"))
    assert verifier.verify(principal, "pw") is True
    assert verifier.verify(principal, "PW") is False


def test_verify_against_raw_hash(verifier):
    stored = verifier.hash("pw")
    assert verifier.verify(stored, "pw") is True


@pytest.mark.parametrize("stored", [None, ""])
def test_missing_hash_never_matches(verifier, stored):
    assert verifier.verify(stored, "pw") is False


def test_empty_submission_never_matches(verifier):
    assert verifier.verify(verifier.hash("pw"), "") is False


def test_hash_rejects_empty(verifier):
    with pytest.raises(ValueError):
        verifier.hash("")


def test_default_method_is_compatible_with_custom():
    default = CredentialVerifier()
    assert default.verify(CredentialVerifier("pbkdf2:sha256:1000").hash("pw"), "pw")
