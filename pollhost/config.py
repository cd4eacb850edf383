"""Configuration loading: TOML file + environment variable overlay."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


DEFAULT_CONFIG_DIR = Path.home() / ".config" / "pollhost"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"

DEFAULT_PERSONA_TEMPLATE = (
    "You're Amitabh Bachchan, hosting Kaun Banega Crorepati. Current status:\n"
    "{context}\n"
    "User said: {input}\n"
    "Respond in Amitabh's style, max {max_words} words. Be witty and professional. "
    "Do not say anything that can be taken as abusive."
)

DEFAULT_CONFIG_TOML = """\
[mongodb]
uri = "mongodb://localhost:27017/?directConnection=true&replicaSet=rs0"
database = "pollhost"

[collections]
messages = "gccdpune-user"
replies = "gccdpune-go-pings"
polls = "gccdpune-poll"

[poll]
key = "q1"

[providers.anthropic]
api_key_env = "ANTHROPIC_API_KEY"
default_model = "claude-sonnet-4-20250514"

[providers.openrouter]
api_key_env = "OPENROUTER_API_KEY"
default_model = "anthropic/claude-sonnet-4"

[providers.llamacpp]
base_url = "http://localhost:8080"

[host]
provider = "anthropic"
model = ""
temperature = 1.0
max_tokens = 256
sentinel_id = "host-prompt"
listen_timeout = 0

[monitor]
tick_interval = 10
idle_after = 30
idle_cooldown = 10
poll_update_after = 15

[persona]
max_words = 30
idle_input = "prompt"
poll_update_input = "poll-update"

[supervisor]
on_failure = "cascade"
"""


@dataclass
class MongoConfig:
    uri: str = "mongodb://localhost:27017/?directConnection=true&replicaSet=rs0"
    database: str = "pollhost"


@dataclass
class CollectionsConfig:
    messages: str = "gccdpune-user"
    replies: str = "gccdpune-go-pings"
    polls: str = "gccdpune-poll"


@dataclass
class PollConfig:
    key: str = "q1"


@dataclass
class ProviderConfig:
    api_key_env: str = ""
    api_key: str = ""
    default_model: str = ""
    base_url: str = ""


@dataclass
class HostConfig:
    provider: str = "anthropic"
    model: str = ""
    temperature: float = 1.0
    max_tokens: int = 256
    sentinel_id: str = "host-prompt"
    listen_timeout: float = 0  # seconds; 0 listens forever


@dataclass
class MonitorConfig:
    tick_interval: float = 10
    idle_after: float = 30
    idle_cooldown: float = 10
    poll_update_after: float = 15


@dataclass
class PersonaConfig:
    template: str = DEFAULT_PERSONA_TEMPLATE
    max_words: int = 30
    idle_input: str = "prompt"
    poll_update_input: str = "poll-update"


@dataclass
class SupervisorConfig:
    on_failure: str = "cascade"  # cascade, isolate


@dataclass
class AppConfig:
    mongodb: MongoConfig = field(default_factory=MongoConfig)
    collections: CollectionsConfig = field(default_factory=CollectionsConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    host: HostConfig = field(default_factory=HostConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    persona: PersonaConfig = field(default_factory=PersonaConfig)
    supervisor: SupervisorConfig = field(default_factory=SupervisorConfig)
    config_path: Path = DEFAULT_CONFIG_PATH


def _env_overlay(config: AppConfig) -> None:
    """Override config values with environment variables where applicable."""
    if uri := os.environ.get("MONGODB_URI"):
        config.mongodb.uri = uri
    if db := os.environ.get("POLLHOST_DB"):
        config.mongodb.database = db

    for name, prov in config.providers.items():
        if prov.api_key_env:
            prov.api_key = os.environ.get(prov.api_key_env, "")


def _parse_provider(data: dict) -> ProviderConfig:
    return ProviderConfig(
        api_key_env=data.get("api_key_env", ""),
        default_model=data.get("default_model", ""),
        base_url=data.get("base_url", ""),
    )


def resolve_config_path(config_path: Path | None = None) -> Path:
    """Pick the config file: explicit path, then POLLHOST_CONFIG, then default."""
    if config_path is not None:
        return config_path
    if env_path := os.environ.get("POLLHOST_CONFIG"):
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file with env var overlay."""
    path = resolve_config_path(config_path)

    if path.exists():
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    else:
        raw = tomllib.loads(DEFAULT_CONFIG_TOML)

    mongo_raw = raw.get("mongodb", {})
    collections_raw = raw.get("collections", {})
    poll_raw = raw.get("poll", {})
    providers_raw = raw.get("providers", {})
    host_raw = raw.get("host", {})
    monitor_raw = raw.get("monitor", {})
    persona_raw = raw.get("persona", {})
    supervisor_raw = raw.get("supervisor", {})

    on_failure = supervisor_raw.get("on_failure", "cascade")
    if on_failure not in ("cascade", "isolate"):
        raise ValueError(f"supervisor.on_failure must be 'cascade' or 'isolate', got {on_failure!r}")

    config = AppConfig(
        mongodb=MongoConfig(
            uri=mongo_raw.get("uri", "mongodb://localhost:27017/?directConnection=true&replicaSet=rs0"),
            database=mongo_raw.get("database", "pollhost"),
        ),
        collections=CollectionsConfig(
            messages=collections_raw.get("messages", "gccdpune-user"),
            replies=collections_raw.get("replies", "gccdpune-go-pings"),
            polls=collections_raw.get("polls", "gccdpune-poll"),
        ),
        poll=PollConfig(key=poll_raw.get("key", "q1")),
        providers={name: _parse_provider(data) for name, data in providers_raw.items()},
        host=HostConfig(
            provider=host_raw.get("provider", "anthropic"),
            model=host_raw.get("model", ""),
            temperature=float(host_raw.get("temperature", 1.0)),
            max_tokens=host_raw.get("max_tokens", 256),
            sentinel_id=host_raw.get("sentinel_id", "host-prompt"),
            listen_timeout=float(host_raw.get("listen_timeout", 0)),
        ),
        monitor=MonitorConfig(
            tick_interval=float(monitor_raw.get("tick_interval", 10)),
            idle_after=float(monitor_raw.get("idle_after", 30)),
            idle_cooldown=float(monitor_raw.get("idle_cooldown", 10)),
            poll_update_after=float(monitor_raw.get("poll_update_after", 15)),
        ),
        persona=PersonaConfig(
            template=persona_raw.get("template", DEFAULT_PERSONA_TEMPLATE),
            max_words=persona_raw.get("max_words", 30),
            idle_input=persona_raw.get("idle_input", "prompt"),
            poll_update_input=persona_raw.get("poll_update_input", "poll-update"),
        ),
        supervisor=SupervisorConfig(on_failure=on_failure),
        config_path=path,
    )

    _env_overlay(config)
    return config


def init_config(config_path: Path | None = None) -> Path:
    """Create default config file."""
    path = resolve_config_path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TOML)
    return path
