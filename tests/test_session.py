"""Tests for per-account token reuse and re-authentication."""

import asyncio
from datetime import timedelta

import pytest

from betterblue.config import ClientConfiguration
from betterblue.errors import ErrorType, VehicleApiError
from betterblue.fake import FakeAPIClient, InMemoryFakeVehicleProvider
from betterblue.models import (
    AuthToken,
    LockStatus,
    Vehicle,
    VehicleCommand,
    VehicleStatus,
    utcnow,
)
from betterblue.session import AccountSession
from tests.factories import make_vehicle


class StubClient:
    """Client whose logins and vehicle fetches are scripted."""

    api_name = "StubAPI"

    def __init__(
        self, auth_failures: int = 0, login_failures_after_first: int = 0
    ) -> None:
        self.auth_failures = auth_failures
        self.login_failures_after_first = login_failures_after_first
        self.logins = 0
        self.fetches = 0
        self.tokens_seen: list[str] = []
        self.release: asyncio.Event | None = None

    async def login(self) -> AuthToken:
        self.logins += 1
        if self.logins > 1 and self.login_failures_after_first:
            self.login_failures_after_first -= 1
            raise VehicleApiError.invalid_credentials(api_name=self.api_name)
        return AuthToken(
            access_token=f"token-{self.logins}",
            refresh_token="refresh",
            expires_at=utcnow() + timedelta(hours=1),
            pin="1234",
        )

    async def fetch_vehicles(self, auth_token: AuthToken) -> list[Vehicle]:
        self.fetches += 1
        self.tokens_seen.append(auth_token.access_token)
        if self.release is not None:
            await self.release.wait()
        if self.auth_failures:
            self.auth_failures -= 1
            raise VehicleApiError(
                "Authentication expired (401)",
                code=401,
                api_name=self.api_name,
                error_type=ErrorType.INVALID_CREDENTIALS,
            )
        return [make_vehicle()]


class TestAccountSession:
    """Tests for AccountSession."""

    @pytest.mark.asyncio
    async def test_token_is_reused(self) -> None:
        """Test that one login serves several operations."""
        client = StubClient()
        session = AccountSession(client)

        await session.fetch_vehicles()
        await session.fetch_vehicles()

        assert client.logins == 1
        assert client.tokens_seen == ["token-1", "token-1"]

    @pytest.mark.asyncio
    async def test_expired_token_triggers_login(self) -> None:
        """Test that a token inside the safety margin is replaced."""
        client = StubClient()
        expired = AuthToken(
            access_token="old",
            refresh_token="refresh",
            expires_at=utcnow() + timedelta(seconds=60),
            pin="1234",
        )
        session = AccountSession(client, auth_token=expired)

        await session.fetch_vehicles()

        assert client.logins == 1
        assert client.tokens_seen == ["token-1"]

    @pytest.mark.asyncio
    async def test_auth_error_reauthenticates_once(self) -> None:
        """Test that an auth error leads to one re-login and one retry."""
        client = StubClient(auth_failures=1)
        session = AccountSession(client)

        vehicles = await session.fetch_vehicles()

        assert len(vehicles) == 1
        assert client.logins == 2
        assert client.tokens_seen == ["token-1", "token-2"]
        assert session.auth_token.access_token == "token-2"

    @pytest.mark.asyncio
    async def test_second_auth_error_is_not_retried(self) -> None:
        """Test that the retried operation's failure propagates."""
        client = StubClient(auth_failures=2)
        session = AccountSession(client)

        with pytest.raises(VehicleApiError) as exc_info:
            await session.fetch_vehicles()

        assert exc_info.value.is_auth_error
        assert client.fetches == 2
        assert client.logins == 2

    @pytest.mark.asyncio
    async def test_failed_relogin(self) -> None:
        """Test that a failed re-login raises failed_retry_login."""
        client = StubClient(auth_failures=1, login_failures_after_first=1)
        session = AccountSession(client)

        with pytest.raises(VehicleApiError) as exc_info:
            await session.fetch_vehicles()

        assert exc_info.value.error_type == ErrorType.FAILED_RETRY_LOGIN
        assert exc_info.value.message.startswith("Failed to reauthenticate")
        assert session.auth_token is None

    @pytest.mark.asyncio
    async def test_other_errors_propagate(
        self, hyundai_us_config: ClientConfiguration
    ) -> None:
        """Test that non-auth errors are not retried."""
        provider = InMemoryFakeVehicleProvider()
        provider.fail_vehicle_fetch.add(hyundai_us_config.account_id)
        session = AccountSession(FakeAPIClient(hyundai_us_config, provider))

        with pytest.raises(VehicleApiError, match="Simulated vehicle fetch failure"):
            await session.fetch_vehicles()

    @pytest.mark.asyncio
    async def test_concurrent_request_is_rejected(self) -> None:
        """Test that a call during another in-flight call fails fast."""
        client = StubClient()
        client.release = asyncio.Event()
        session = AccountSession(client, reject_concurrent=True)

        first = asyncio.create_task(session.fetch_vehicles())
        await asyncio.sleep(0)
        with pytest.raises(VehicleApiError) as exc_info:
            await session.fetch_vehicles()
        client.release.set()
        await first

        assert exc_info.value.error_type == ErrorType.CONCURRENT_REQUEST

    @pytest.mark.asyncio
    async def test_concurrent_calls_are_serialized_by_default(self) -> None:
        """Test that concurrent calls wait for each other and share a login."""
        client = StubClient()
        client.release = asyncio.Event()
        session = AccountSession(client)

        tasks = [asyncio.create_task(session.fetch_vehicles()) for _ in range(3)]
        await asyncio.sleep(0)
        client.release.set()
        await asyncio.gather(*tasks)

        assert client.logins == 1
        assert client.fetches == 3

    @pytest.mark.asyncio
    async def test_status_and_commands_through_fake_client(
        self, hyundai_us_config: ClientConfiguration
    ) -> None:
        """Test status and command operations through the session."""
        provider = InMemoryFakeVehicleProvider()
        vehicle = make_vehicle()
        provider.add_vehicle(vehicle)
        session = AccountSession(FakeAPIClient(hyundai_us_config, provider))

        await session.send_command(vehicle, VehicleCommand.lock())
        status = await session.fetch_vehicle_status(vehicle)

        assert isinstance(status, VehicleStatus)
        assert status.lock_status == LockStatus.LOCKED

    @pytest.mark.asyncio
    async def test_charge_limit_unsupported(
        self, hyundai_us_config: ClientConfiguration
    ) -> None:
        """Test that clients without charge limit support raise."""
        session = AccountSession(
            FakeAPIClient(hyundai_us_config, InMemoryFakeVehicleProvider())
        )
        with pytest.raises(VehicleApiError, match="Charge limit is not supported"):
            await session.set_charge_limit(make_vehicle(), 80)
