"""Unit tests for planner.core.tokens: issue/verify for access and refresh tokens."""

import unittest
from datetime import timedelta

import jwt

from planner.core.config import Settings
from planner.core.tokens import InvalidTokenError, TokenClaims, TokenCodec
from planner.models.user import UserRole

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"


def _codec(**kwargs: object) -> TokenCodec:
    params = {"access_secret": ACCESS_SECRET, "refresh_secret": REFRESH_SECRET}
    params.update(kwargs)
    return TokenCodec(**params)


def _claims(role: UserRole = UserRole.MANAGER) -> TokenClaims:
    return TokenClaims(
        subject="9b2f6a3e-5c1d-4e7a-8f00-000000000001",
        username="alice",
        email="alice@x.com",
        role=role,
    )


class TestRoundTrip(unittest.TestCase):
    """Issued tokens verify back to the same identity."""

    def test_access_round_trip(self) -> None:
        codec = _codec()
        claims = codec.verify_access(codec.issue_access(_claims()))
        self.assertEqual(claims.subject, _claims().subject)
        self.assertEqual(claims.username, "alice")
        self.assertEqual(claims.email, "alice@x.com")
        self.assertEqual(claims.role, UserRole.MANAGER)
        self.assertIsNotNone(claims.issued_at)
        self.assertLess(claims.issued_at, claims.expires_at)

    def test_refresh_round_trip(self) -> None:
        codec = _codec()
        claims = codec.verify_refresh(codec.issue_refresh(_claims(UserRole.VIEWER)))
        self.assertEqual(claims.subject, _claims().subject)
        self.assertEqual(claims.role, UserRole.VIEWER)

    def test_default_lifetimes(self) -> None:
        codec = _codec()
        access = codec.verify_access(codec.issue_access(_claims()))
        refresh = codec.verify_refresh(codec.issue_refresh(_claims()))
        self.assertEqual(access.expires_at - access.issued_at, timedelta(minutes=15))
        self.assertEqual(refresh.expires_at - refresh.issued_at, timedelta(days=7))

    def test_explicit_ttl_overrides_default(self) -> None:
        codec = _codec()
        claims = codec.verify_access(codec.issue_access(_claims(), ttl=timedelta(minutes=2)))
        self.assertEqual(claims.expires_at - claims.issued_at, timedelta(minutes=2))

    def test_tokens_for_same_claims_are_unique(self) -> None:
        codec = _codec()
        first = codec.issue_refresh(_claims())
        second = codec.issue_refresh(_claims())
        self.assertNotEqual(first, second)
        self.assertNotEqual(
            codec.verify_refresh(first).token_id, codec.verify_refresh(second).token_id
        )


class TestRejection(unittest.TestCase):
    """Every failure surfaces as InvalidTokenError."""

    def test_wrong_secret_rejected(self) -> None:
        other = _codec(access_secret="another-access-secret-0123456789abcdef")
        token = other.issue_access(_claims())
        with self.assertRaises(InvalidTokenError):
            _codec().verify_access(token)

    def test_access_token_is_not_a_refresh_token(self) -> None:
        codec = _codec()
        with self.assertRaises(InvalidTokenError):
            codec.verify_refresh(codec.issue_access(_claims()))
        with self.assertRaises(InvalidTokenError):
            codec.verify_access(codec.issue_refresh(_claims()))

    def test_type_claim_checked_even_with_matching_secret(self) -> None:
        # Signed with the refresh secret, but as an access token.
        forged = _codec(
            access_secret=REFRESH_SECRET,
            refresh_secret="unrelated-secret-0123456789abcdef0123",
        ).issue_access(_claims())
        with self.assertRaises(InvalidTokenError):
            _codec().verify_refresh(forged)

    def test_expired_token_rejected(self) -> None:
        codec = _codec()
        token = codec.issue_access(_claims(), ttl=timedelta(seconds=-5))
        with self.assertRaises(InvalidTokenError):
            codec.verify_access(token)

    def test_tampered_token_rejected(self) -> None:
        codec = _codec()
        header, payload, signature = codec.issue_access(_claims()).split(".")
        tampered = ".".join([header, payload, signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")])
        with self.assertRaises(InvalidTokenError):
            codec.verify_access(tampered)

    def test_malformed_tokens_rejected(self) -> None:
        codec = _codec()
        for token in ("", "garbage", "a.b.c", None):
            with self.subTest(token=token):
                with self.assertRaises(InvalidTokenError):
                    codec.verify_access(token)  # type: ignore[arg-type]

    def test_missing_claims_rejected(self) -> None:
        token = jwt.encode({"sub": "1", "type": "access"}, ACCESS_SECRET, algorithm="HS256")
        with self.assertRaises(InvalidTokenError):
            _codec().verify_access(token)

    def test_unknown_role_rejected(self) -> None:
        codec = _codec()
        payload = jwt.decode(
            codec.issue_access(_claims()), ACCESS_SECRET, algorithms=["HS256"]
        )
        payload["role"] = "superuser"
        token = jwt.encode(payload, ACCESS_SECRET, algorithm="HS256")
        with self.assertRaises(InvalidTokenError):
            codec.verify_access(token)

    def test_error_message_is_uniform(self) -> None:
        codec = _codec()
        messages = set()
        for token in ("garbage", codec.issue_access(_claims(), ttl=timedelta(seconds=-5))):
            try:
                codec.verify_access(token)
            except InvalidTokenError as e:
                messages.add(e.message)
        self.assertEqual(messages, {"Invalid token"})


class TestConstruction(unittest.TestCase):
    """Codec configuration rules."""

    def test_equal_secrets_rejected(self) -> None:
        with self.assertRaises(ValueError):
            TokenCodec(access_secret="same-secret", refresh_secret="same-secret")

    def test_empty_secret_rejected(self) -> None:
        with self.assertRaises(ValueError):
            TokenCodec(access_secret="", refresh_secret=REFRESH_SECRET)

    def test_from_settings_uses_configured_lifetimes(self) -> None:
        settings = Settings(
            _env_file=None,
            JWT_SECRET=ACCESS_SECRET,
            JWT_REFRESH_SECRET=REFRESH_SECRET,
            JWT_EXPIRE_MINUTES=5,
            JWT_REFRESH_EXPIRE_DAYS=2,
        )
        codec = TokenCodec.from_settings(settings)
        access = codec.verify_access(codec.issue_access(_claims()))
        refresh = codec.verify_refresh(codec.issue_refresh(_claims()))
        self.assertEqual(access.expires_at - access.issued_at, timedelta(minutes=5))
        self.assertEqual(refresh.expires_at - refresh.issued_at, timedelta(days=2))


if __name__ == "__main__":
    unittest.main()
