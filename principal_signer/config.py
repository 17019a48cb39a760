"""Configuration management.

Loads settings from environment variables (prefix ``PRINCIPAL_SIGNER_``)
with pydantic-settings, and wires a ready-to-use SignerService from them.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

from principal_signer.identity import Identity
from principal_signer.provider.client import ED25519, KeyId, SignerProvider
from principal_signer.provider.jsonrpc_client import JsonRpcSignerProvider
from principal_signer.provider.transport import HttpxTransport
from principal_signer.service import DEFAULT_KEY_NAME, SignerService
from principal_signer.signing import DEFAULT_SIGN_BUDGET
from principal_signer.store import SqliteStateStore


class SignerSettings(BaseSettings):
    """Top-level service settings."""

    provider_url: str = "http://127.0.0.1:4943/api/signer"
    provider_timeout: float = Field(default=30.0, gt=0)
    key_name: str = DEFAULT_KEY_NAME
    sign_budget: int = Field(default=DEFAULT_SIGN_BUDGET, gt=0)
    state_path: str = "principal_signer.db"
    log_level: str = "INFO"

    model_config = {"env_prefix": "PRINCIPAL_SIGNER_"}

    @property
    def key_id(self) -> KeyId:
        return KeyId(name=self.key_name, algorithm=ED25519)


def load_settings(overrides: dict[str, Any] | None = None) -> SignerSettings:
    """Load settings from env vars, with explicit overrides on top."""
    return SignerSettings(**(overrides or {}))


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service process.

    The root level is set even when handlers are already installed.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=log_level,
    )
    logging.getLogger().setLevel(log_level)


def build_service(
    settings: SignerSettings,
    deployer: Identity,
    provider: SignerProvider | None = None,
) -> SignerService:
    """Apply the log level, construct the store, provider and service, and
    record the owner.

    Args:
        settings: Loaded settings.
        deployer: Identity performing the deployment; becomes owner on
            first start.
        provider: Override the JSON-RPC provider (e.g. LocalSignerProvider).
    """
    configure_logging(settings.log_level)

    state_path = settings.state_path
    if state_path != ":memory:":
        Path(state_path).parent.mkdir(parents=True, exist_ok=True)

    store = SqliteStateStore(state_path)
    if provider is None:
        provider = JsonRpcSignerProvider(
            settings.provider_url,
            transport=HttpxTransport(timeout=settings.provider_timeout),
        )

    service = SignerService(
        store,
        provider,
        key_id=settings.key_id,
        sign_budget=settings.sign_budget,
    )
    service.bootstrap(deployer)
    return service
