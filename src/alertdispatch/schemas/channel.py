from __future__ import annotations

from typing import Any, ClassVar
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

ALLOWED_WEBHOOK_METHODS = frozenset({"POST", "PUT", "PATCH"})
DEFAULT_SLACK_FOOTER_ICON = (
    "https://cdn.icon-icons.com/icons2/2407/PNG/512/docker_icon_146192.png"
)


def _require_http_url(v: str) -> str:
    parsed = urlparse(v)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be an absolute http(s) URL")
    return v


class ChannelSettings(BaseModel):
    """Base for per-transport settings; immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Fields left out of AlertChannelConfig snapshots.
    secret_fields: ClassVar[frozenset[str]] = frozenset()

    def public_settings(self) -> dict[str, Any]:
        """JSON-friendly settings with secrets removed."""
        return self.model_dump(mode="json", exclude=set(self.secret_fields))


class EmailChannelConfig(ChannelSettings):
    """SMTP delivery settings."""

    secret_fields: ClassVar[frozenset[str]] = frozenset({"password"})

    smtp_host: str = Field(..., min_length=1)
    smtp_port: int = Field(default=587, ge=1, le=65535)
    from_address: str = Field(..., min_length=3)
    to: list[str] = Field(..., min_length=1)
    cc: list[str] = Field(default_factory=list)
    bcc: list[str] = Field(default_factory=list)
    username: str = ""
    password: SecretStr | None = None
    tls: bool = False
    implicit_tls: bool = False
    insecure_skip_verify: bool = False
    subject: str = ""
    template: str = ""

    @field_validator("from_address")
    @classmethod
    def validate_from(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError(f"invalid email address: {v!r}")
        return v

    @field_validator("to", "cc", "bcc")
    @classmethod
    def validate_recipients(cls, v: list[str]) -> list[str]:
        """Strip blanks and reject anything that is not an address."""
        cleaned = [addr.strip() for addr in v if addr.strip()]
        for addr in cleaned:
            if "@" not in addr:
                raise ValueError(f"invalid email address: {addr!r}")
        return cleaned

    @model_validator(mode="after")
    def check_security(self) -> "EmailChannelConfig":
        if not self.to:
            raise ValueError("at least one 'to' recipient is required")
        if self.tls and self.implicit_tls:
            raise ValueError("'tls' (STARTTLS) and 'implicit_tls' are mutually exclusive")
        if self.password is not None and not self.username:
            raise ValueError("'password' requires 'username'")
        return self


class SlackChannelConfig(ChannelSettings):
    """Slack incoming webhook settings."""

    webhook_url: str
    channel: str = ""
    username: str = ""
    icon_emoji: str = ""
    icon_url: str = ""
    footer: str = "Alert Dispatch"
    footer_icon: str = DEFAULT_SLACK_FOOTER_ICON

    check_url = field_validator("webhook_url")(_require_http_url)


class WebhookChannelConfig(ChannelSettings):
    """Generic HTTP webhook settings, with optional HMAC signing."""

    secret_fields: ClassVar[frozenset[str]] = frozenset({"secret"})

    url: str
    method: str = "POST"
    content_type: str = "application/json"
    headers: dict[str, str] = Field(default_factory=dict)
    secret: SecretStr | None = None
    sign_header: str = ""

    check_url = field_validator("url")(_require_http_url)

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> str:
        if v is None:
            v = "POST"
        if not isinstance(v, str):
            raise ValueError(f"method must be a string, got {type(v).__name__}")
        method = (v.strip() or "POST").upper()
        if method not in ALLOWED_WEBHOOK_METHODS:
            raise ValueError(
                f"unsupported method {method!r}, expected one of "
                f"{sorted(ALLOWED_WEBHOOK_METHODS)}"
            )
        return method

    @field_validator("content_type", mode="before")
    @classmethod
    def default_content_type(cls, v: str | None) -> str:
        return (v or "").strip() or "application/json"

    @property
    def signing_enabled(self) -> bool:
        return bool(self.secret and self.secret.get_secret_value() and self.sign_header)


class DiscordChannelConfig(ChannelSettings):
    """Discord webhook settings."""

    webhook_url: str
    username: str = ""
    avatar_url: str = ""
    embeds: bool = False

    check_url = field_validator("webhook_url")(_require_http_url)


class AlertChannelConfig(BaseModel):
    """Introspection snapshot of a channel, also accepted by the factory."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    type: str = Field(..., min_length=1)
    enabled: bool = True
    timeout_seconds: float | None = Field(default=None, gt=0)
    settings: dict[str, Any] = Field(default_factory=dict)
