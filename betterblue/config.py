"""Client configuration loaded from dictionaries or the environment."""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import voluptuous as vol
from dotenv import load_dotenv

from .const import (
    CONF_ACCOUNT_ID,
    CONF_BRAND,
    CONF_DEBUG,
    CONF_PASSWORD,
    CONF_PIN,
    CONF_REGION,
    CONF_USERNAME,
    ENV_PREFIX,
)
from .errors import ConfigurationError
from .models import Brand, HTTPLogSink, Region

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_REGION): vol.All(str, vol.Upper, vol.Coerce(Region)),
        vol.Required(CONF_BRAND): vol.All(str, vol.Lower, vol.Coerce(Brand)),
        vol.Required(CONF_USERNAME): vol.All(str, vol.Length(min=1)),
        vol.Required(CONF_PASSWORD): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_PIN, default=""): vol.Any(
            "", vol.Match(r"^\d{4}$", msg="PIN must be 4 digits")
        ),
        vol.Optional(CONF_ACCOUNT_ID, default=uuid.uuid4): vol.Any(
            UUID, vol.Coerce(UUID)
        ),
        vol.Optional(CONF_DEBUG, default=False): vol.Boolean(),
    }
)


@dataclass(frozen=True)
class ClientConfiguration:
    """Account settings shared by every client.

    Attributes:
        region: Vendor backend region.
        brand: Vehicle brand; selects the endpoint provider.
        username: Account username or email.
        password: Account password. For Hyundai Europe this is the
            long-lived refresh token.
        pin: Four digit BlueLink PIN, empty when not needed.
        account_id: Local account identifier stamped on logs and vehicles.
        log_sink: Receives one redacted `HTTPLog` per HTTP exchange.
        debug: Capture call stacks in HTTP log records.

    """

    region: Region
    brand: Brand
    username: str
    password: str
    pin: str = ""
    account_id: UUID = field(default_factory=uuid.uuid4)
    log_sink: HTTPLogSink | None = field(default=None, compare=False)
    debug: bool = False

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], log_sink: HTTPLogSink | None = None
    ) -> ClientConfiguration:
        """Validate raw settings and build a configuration.

        Raises:
            ConfigurationError: If a setting is missing or invalid.

        """
        try:
            validated = CONFIG_SCHEMA(data)
        except vol.Invalid as err:
            raise ConfigurationError(f"Invalid configuration: {err}") from err

        return cls(
            region=validated[CONF_REGION],
            brand=validated[CONF_BRAND],
            username=validated[CONF_USERNAME],
            password=validated[CONF_PASSWORD],
            pin=validated[CONF_PIN],
            account_id=validated[CONF_ACCOUNT_ID],
            log_sink=log_sink,
            debug=validated[CONF_DEBUG],
        )

    @classmethod
    def from_env(
        cls, env_file: str | None = None, log_sink: HTTPLogSink | None = None
    ) -> ClientConfiguration:
        """Build a configuration from ``BLUELINK_*`` environment variables.

        Variables from ``env_file`` (or a ``.env`` file found from the working
        directory) are loaded first without overriding the environment.
        """
        load_dotenv(env_file)
        data = {}
        for key in (
            CONF_REGION,
            CONF_BRAND,
            CONF_USERNAME,
            CONF_PASSWORD,
            CONF_PIN,
            CONF_ACCOUNT_ID,
            CONF_DEBUG,
        ):
            value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if value is not None:
                data[key] = value
        _LOGGER.debug("Loaded configuration keys from environment: %s", sorted(data))
        return cls.from_dict(data, log_sink=log_sink)
