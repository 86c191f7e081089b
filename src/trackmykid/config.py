"""Client configuration for trackmykid."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from trackmykid._constants import (
    BASE_URL,
    DEFAULT_INSTALLED_BY_ID,
    DEFAULT_PER_PAGE,
    DEFAULT_REQUEST_TIMEOUT,
)


def _default_state_file() -> Path:
    return Path.home() / ".trackmykid" / "state.json"


@dataclasses.dataclass(frozen=True)
class CrmConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        CRM API base URL. Defaults to the production host.
    request_timeout : float
        Upper bound in seconds for a single HTTP request.  A request that
        exceeds it fails with :class:`~trackmykid.exceptions.CrmTransportError`
        instead of leaving a page stuck in its loading state.
    get_retries : int
        Extra attempts for GET requests that fail at the transport level.
        HTTP error responses are never retried.
    per_page : int
        Default page size for list pages.
    state_file : Path
        JSON file backing durable storage (remembered token, theme).
    default_installed_by_id : int
        ``installedById`` sent with device payloads.
    """

    base_url: str = BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    get_retries: int = 1
    per_page: int = DEFAULT_PER_PAGE
    state_file: Path = dataclasses.field(default_factory=_default_state_file)
    default_installed_by_id: int = DEFAULT_INSTALLED_BY_ID

    def __post_init__(self) -> None:
        # Paths are joined as f"{base_url}{endpoint}".
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> CrmConfig:
        """Create configuration from environment variables.

        Reads optional ``TRACKMYKID_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        CrmConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("TRACKMYKID_BASE_URL")
        if base_url:
            config_kwargs["base_url"] = base_url

        timeout_env = env.get("TRACKMYKID_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        retries_env = env.get("TRACKMYKID_GET_RETRIES")
        if retries_env is not None and "get_retries" not in overrides:
            config_kwargs["get_retries"] = int(retries_env)

        per_page_env = env.get("TRACKMYKID_PER_PAGE")
        if per_page_env is not None and "per_page" not in overrides:
            config_kwargs["per_page"] = int(per_page_env)

        state_env = env.get("TRACKMYKID_STATE_FILE")
        if state_env:
            config_kwargs["state_file"] = Path(state_env).expanduser()

        installer_env = env.get("TRACKMYKID_DEFAULT_INSTALLED_BY_ID")
        if installer_env is not None and "default_installed_by_id" not in overrides:
            config_kwargs["default_installed_by_id"] = int(installer_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
