"""Client configuration - js/config.json plus .env overrides."""
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from matchsession.bridge.socketio_transport import CANCEL_MATCH_EVENT, FIND_MATCH_EVENT
from matchsession.session.controller import POPULATION_START_DELAY, READINESS_START_DELAY
from matchsession.session.scheduling import RetryPolicy

DEFAULT_CONFIG_PATH = Path("js") / "config.json"
DEFAULT_ENV_PATH = Path(".env")


@dataclass
class ClientConfig:
    """Everything the entry point needs to build a session client."""
    server_url: str = "http://localhost:3001"
    socketio_path: str = "socket.io"
    selected_variant: Any = 0
    find_match_event: str = FIND_MATCH_EVENT
    cancel_match_event: str = CANCEL_MATCH_EVENT
    population_start_delay: float = POPULATION_START_DELAY
    readiness_start_delay: float = READINESS_START_DELAY
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    log_level: str = "WARNING"


def load_env(path: Union[str, Path] = DEFAULT_ENV_PATH) -> int:
    """Load KEY=VALUE lines into os.environ without overriding existing values.

    Returns:
        Number of lines read as assignments.
    """
    env_path = Path(path)
    if not env_path.exists():
        return 0
    count = 0
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip())
                count += 1
    return count


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> ClientConfig:
    """Build ClientConfig from config.json, then apply environment overrides.

    A missing file yields the defaults.
    """
    config_path = Path(path)
    data: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            data = json.load(f)

    server = data.get("server", {})
    match = data.get("match", {})
    retry = data.get("retry", {})

    defaults = ClientConfig()
    policy = RetryPolicy(
        max_attempts=int(retry.get("max_attempts", defaults.retry.max_attempts)),
        base_delay=float(retry.get("base_delay", defaults.retry.base_delay)),
        max_delay=float(retry.get("max_delay", defaults.retry.max_delay)),
    )
    config = ClientConfig(
        server_url=server.get("url", defaults.server_url),
        socketio_path=server.get("socketio_path", defaults.socketio_path),
        selected_variant=match.get("selected_variant", defaults.selected_variant),
        find_match_event=server.get("find_match_event", defaults.find_match_event),
        cancel_match_event=server.get("cancel_match_event", defaults.cancel_match_event),
        population_start_delay=float(
            match.get("population_start_delay", defaults.population_start_delay)
        ),
        readiness_start_delay=float(
            match.get("readiness_start_delay", defaults.readiness_start_delay)
        ),
        retry=policy,
        log_level=data.get("log_level", defaults.log_level),
    )

    if os.environ.get("MATCH_SERVER_URL"):
        config.server_url = os.environ["MATCH_SERVER_URL"]
    if os.environ.get("MATCH_SELECTED_VARIANT"):
        config.selected_variant = os.environ["MATCH_SELECTED_VARIANT"]
    if os.environ.get("LOG_LEVEL"):
        config.log_level = os.environ["LOG_LEVEL"]
    attempts = _env_int("MATCH_MAX_RECONNECT_ATTEMPTS")
    if attempts is not None:
        config.retry = RetryPolicy(
            max_attempts=attempts,
            base_delay=config.retry.base_delay,
            max_delay=config.retry.max_delay,
        )
    return config
