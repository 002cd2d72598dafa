"""Tests for HTTP log redaction."""

from betterblue.const import LOCATION_REDACTED, REDACTED
from betterblue.redaction import redact_sensitive_data, redact_sensitive_headers


class TestRedactSensitiveData:
    """Tests for body redaction."""

    def test_redacts_password(self) -> None:
        """Test that passwords are masked."""
        text = '{"username":"driver","password":"secret123"}'
        redacted = redact_sensitive_data(text)
        assert "secret123" not in redacted
        assert f'"password":"{REDACTED}"' in redacted
        assert '"username":"driver"' in redacted

    def test_redacts_pin(self) -> None:
        """Test that PIN fields are masked in either case."""
        redacted = redact_sensitive_data('{"pin":"1234","PIN":"5678"}')
        assert "1234" not in redacted
        assert "5678" not in redacted

    def test_redacts_bearer_token(self) -> None:
        """Test that bearer tokens are masked."""
        redacted = redact_sensitive_data("Authorization: Bearer abc.def")
        assert redacted == f"Authorization: Bearer {REDACTED}"

    def test_redacts_token_fields(self) -> None:
        """Test that access and refresh token fields are masked."""
        redacted = redact_sensitive_data(
            '{"access_token":"aaa","refreshToken":"bbb","expires_in":"3600"}'
        )
        assert "aaa" not in redacted
        assert "bbb" not in redacted
        assert '"expires_in":"3600"' in redacted

    def test_redacts_form_encoded_secrets(self) -> None:
        """Test that form parameters holding credentials are masked."""
        redacted = redact_sensitive_data(
            "grant_type=refresh_token&refresh_token=rt-123&client_id=app"
            "&client_secret=cs-456&pin=1234"
        )
        assert redacted == (
            f"grant_type=refresh_token&refresh_token={REDACTED}&client_id=app"
            f"&client_secret={REDACTED}&pin={REDACTED}"
        )

    def test_form_redaction_leaves_similar_names(self) -> None:
        """Test that only whole parameter names are matched."""
        text = "spin=1&mypassword=x"
        assert redact_sensitive_data(text) == text

    def test_redacts_coordinate_fields(self) -> None:
        """Test that coordinate fields are masked."""
        redacted = redact_sensitive_data('{"lat":52.5200,"lon":13.4050}')
        assert "52.52" not in redacted
        assert "13.405" not in redacted

    def test_redacts_coordinate_pairs(self) -> None:
        """Test that bare coordinate pairs are masked."""
        redacted = redact_sensitive_data("at 52.5200, 13.4050 now")
        assert redacted == f"at {LOCATION_REDACTED} now"

    def test_none_passes_through(self) -> None:
        """Test that a missing body stays missing."""
        assert redact_sensitive_data(None) is None


class TestRedactSensitiveHeaders:
    """Tests for header redaction."""

    def test_redacts_auth_and_token_headers(self) -> None:
        """Test that headers naming auth or tokens are masked."""
        headers = {
            "Authorization": "Bearer abc",
            "accessToken": "xyz",
            "Content-Type": "application/json",
        }
        redacted = redact_sensitive_headers(headers)
        assert redacted["Authorization"] == REDACTED
        assert redacted["accessToken"] == REDACTED
        assert redacted["Content-Type"] == "application/json"
