"""Application configuration for the Helix task bot.

Central configuration module powered by Pydantic v2.  Settings are loaded from
environment variables (with ``.env`` file support) and an optional
``config.json`` file (camelCase keys such as ``delayBetweenTasks`` are accepted).

Key exports:
    BotSettings: Root settings model (immutable; build once at startup).
    TaskConfig: Per-operation enable flags.
    AmountConfig: Stake / unstake amounts in human and base units.
    RetryConfig: Exponential back-off parameters shared by all operations.
    SchedulerConfig: Recurring-run settings.
    BASE_DIR / LOGS_DIR: Canonical project paths.
"""

# pylint: disable=no-member

import json
import logging
from decimal import Decimal, ROUND_DOWN
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Base Paths
# ---------------------------------------------------------------------------
BASE_DIR: Path = Path(__file__).parent.parent
"""Project root directory (parent of ``core/``)."""

LOGS_DIR: Path = BASE_DIR / "logs"
"""Directory for log output files."""

DEFAULT_CONFIG_FILE: Path = Path("config.json")

# 10^8 for 8 decimal places
TOKEN_MULTIPLIER: int = 100_000_000

OPERATION_ORDER: List[str] = ["fund", "claim", "stake", "compound", "unstake"]
"""Fixed execution order of the per-account operations."""

logger: logging.Logger = logging.getLogger(__name__)

# Legacy camelCase top-level keys of config.json -> field names
LEGACY_CONFIG_KEYS: Dict[str, str] = {
    "delayBetweenTasks": "delay_between_tasks",
    "delayBetweenAccounts": "delay_between_accounts",
    "logLevel": "log_level",
    "pkPath": "private_keys_file",
    "proxyPath": "proxies_file",
    "nodeUrl": "node_url",
    "faucetUrl": "faucet_url",
}


def to_base_units(amount: Decimal) -> int:
    """Scale a human-readable amount to on-chain base units (truncating)."""
    scaled = (Decimal(amount) * TOKEN_MULTIPLIER).quantize(
        Decimal(1), rounding=ROUND_DOWN,
    )
    return int(scaled)


class TaskConfig(BaseModel):
    """Enable flags for each operation of the account pipeline.

    Accepts both the snake_case operation names and the camelCase keys of
    the legacy ``config.json`` (``claimNativeFaucet``, ``claimHstMOVE`` ...).
    """

    model_config = ConfigDict(frozen=True)

    fund: bool = Field(
        default=True, validation_alias=AliasChoices("fund", "claimNativeFaucet"),
    )
    claim: bool = Field(
        default=True, validation_alias=AliasChoices("claim", "claimHstMOVE"),
    )
    stake: bool = Field(
        default=True, validation_alias=AliasChoices("stake", "stakeHstMOVE"),
    )
    compound: bool = Field(
        default=True,
        validation_alias=AliasChoices("compound", "compoundStakeRewards"),
    )
    unstake: bool = Field(
        default=True, validation_alias=AliasChoices("unstake", "unstakeHstMOVE"),
    )

    def is_enabled(self, operation: str) -> bool:
        """Return whether *operation* is switched on (unknown names are off)."""
        return bool(getattr(self, operation, False))

    def enabled_operations(self) -> List[str]:
        """Enabled operation names, in execution order."""
        return [name for name in OPERATION_ORDER if self.is_enabled(name)]


class AmountConfig(BaseModel):
    """Stake and unstake quantities.

    The human-readable values come from configuration; the base-unit values
    are derived once (``human * 10^8``) and cached on the instance.
    """

    model_config = ConfigDict(frozen=True)

    stake_amount: Decimal = Field(
        default=Decimal("1"),
        ge=0,
        validation_alias=AliasChoices("stake_amount", "stakeAmount"),
    )
    unstake_amount: Decimal = Field(
        default=Decimal("0.5"),
        ge=0,
        validation_alias=AliasChoices("unstake_amount", "unstakeAmount"),
    )

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def stake_base_units(self) -> int:
        return to_base_units(self.stake_amount)

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def unstake_base_units(self) -> int:
        return to_base_units(self.unstake_amount)


class RetryConfig(BaseModel):
    """Exponential back-off parameters.

    Attributes:
        max_retries: Total number of attempts per operation (>= 1).
        initial_delay: First back-off delay in milliseconds.
        max_delay: Upper bound for the back-off delay in milliseconds
            (jitter may add up to 20 % on top).
        backoff_factor: Multiplier applied between consecutive delays.
    """

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(
        default=2, ge=1, validation_alias=AliasChoices("max_retries", "maxRetries"),
    )
    initial_delay: float = Field(
        default=1000,
        ge=0,
        validation_alias=AliasChoices("initial_delay", "initialDelay"),
    )
    max_delay: float = Field(
        default=30000, validation_alias=AliasChoices("max_delay", "maxDelay"),
    )
    backoff_factor: float = Field(
        default=2,
        gt=1,
        validation_alias=AliasChoices("backoff_factor", "backoffFactor", "factor"),
    )

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "RetryConfig":
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        return self


class SchedulerConfig(BaseModel):
    """Recurring-run settings (run every ``interval_hours`` when enabled)."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    interval_hours: float = Field(
        default=25,
        gt=0,
        validation_alias=AliasChoices("interval_hours", "intervalHours"),
    )

    @property
    def interval_seconds(self) -> float:
        return self.interval_hours * 3600


class BotSettings(BaseSettings):
    """Root configuration model for the Helix task bot.

    All fields can be set via environment variables or a ``.env`` file
    (nested sections use ``__``, e.g. ``RETRY__MAX_RETRIES=5``).  Values
    from ``config.json`` are merged by :meth:`from_config_file` and take
    precedence over the environment.

    Section overview:
        * **Core** -- log level, key / proxy file paths.
        * **Network** -- node, faucet and indexer endpoints, contract
          addresses, gas parameters.
        * **Timing** -- inter-task / inter-account delays, settle and
          confirmation waits, HTTP timeout.
        * **Tasks / Amounts / Retry / Scheduler** -- nested models.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    # Core
    log_level: str = "INFO"
    private_keys_file: str = "pk.txt"
    proxies_file: str = "proxy.txt"

    # Network
    node_url: str = "https://testnet.bardock.movementnetwork.xyz/v1"
    faucet_url: str = "https://faucet.testnet.bardock.movementnetwork.xyz"
    indexer_url: str = "https://indexer.testnet.bardock.movementnetwork.xyz"
    # Both the token minter and the hstMOVE vault live under this address
    module_address: str = (
        "0xf7429cda18fc0dd78d0dc48b102158024f1dc3a511a2a65ea553b5970d65b028"
    )
    hst_move_metadata: str = (
        "0x9c9b084429eecf70c7c4f9b18980eb3cbb9c9a70fee7abfb59ca637005c5b430"
    )
    max_gas_amount: int = 2_000_000
    gas_unit_price: int = 100
    txn_expiration_seconds: int = 600
    # 1000000000 octas requested from the faucet per account
    faucet_amount: int = 1_000_000_000
    # hstMOVE base units minted per claim
    claim_amount: int = 10_000_000_000

    # Timing (milliseconds for user-facing delays, seconds for waits)
    delay_between_tasks: float = Field(default=5000, ge=0)
    delay_between_accounts: float = Field(default=10000, ge=0)
    faucet_settle_seconds: float = 5.0
    confirmation_delay_seconds: float = 8.0
    request_timeout_seconds: float = 30.0

    tasks: TaskConfig = Field(default_factory=TaskConfig)
    amounts: AmountConfig = Field(default_factory=AmountConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)

    @classmethod
    def from_config_file(
        cls,
        path: Optional[Path] = None,
        **overrides: Any,
    ) -> "BotSettings":
        """Build settings from env / ``.env`` merged with a JSON config file.

        Args:
            path: Config file to read.  When ``None`` the default
                ``config.json`` is used if it exists; a missing default
                file only logs a warning.
            **overrides: Field values that win over both sources
                (used for CLI flags).

        Raises:
            FileNotFoundError: An explicit *path* does not exist.
            ValueError: The file is not valid JSON or not an object.
        """
        explicit = path is not None
        config_path = Path(path) if explicit else DEFAULT_CONFIG_FILE

        data: Dict[str, Any] = {}
        if config_path.exists():
            try:
                data = json.loads(config_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                raise ValueError(
                    f"Invalid JSON in {config_path}: {exc}"
                ) from exc
            if not isinstance(data, dict):
                raise ValueError(f"{config_path} must contain a JSON object")
            logger.info("Configuration loaded from %s", config_path)
        elif explicit:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        else:
            logger.warning(
                "%s not found; using defaults and environment", config_path,
            )

        kwargs = cls._normalise_config(data)
        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)

    @classmethod
    def _normalise_config(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Translate a legacy ``config.json`` mapping into init kwargs."""
        kwargs: Dict[str, Any] = {}
        retry: Dict[str, Any] = {}

        for key, value in data.items():
            if key == "maxRetries":
                retry["max_retries"] = value
            elif key == "retryConfig" or key == "retry":
                if isinstance(value, dict):
                    retry.update(value)
            elif key in LEGACY_CONFIG_KEYS:
                kwargs[LEGACY_CONFIG_KEYS[key]] = value
            elif key in cls.model_fields:
                kwargs[key] = value
            else:
                logger.debug("Ignoring unknown config key: %s", key)

        if retry:
            kwargs["retry"] = retry
        return kwargs
