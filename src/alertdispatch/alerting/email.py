from __future__ import annotations

import asyncio
import re
import smtplib
import ssl
from email.message import EmailMessage

import structlog

from alertdispatch.alerting.base import AlertChannel
from alertdispatch.schemas.alert import Alert, format_measure
from alertdispatch.schemas.channel import EmailChannelConfig
from alertdispatch.utils.exceptions import PayloadSerializationError, TransportError

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATE = """\
Alert: {{.Name}}
Severity: {{.Severity}}
Status: {{.Status}}
Description: {{.Description}}
Timestamp: {{.Timestamp}}
Value: {{.Value}}
Threshold: {{.Threshold}}
{{.Labels}}
{{.Annotations}}
"""

_PLACEHOLDER = re.compile(r"\{\{\s*\.(\w+)\s*\}\}")


def _mapping_block(header: str, mapping: dict[str, str]) -> str | None:
    if not mapping:
        return None
    lines = [f"{header}:"]
    lines.extend(f"  {key}: {mapping[key]}" for key in sorted(mapping))
    return "\n".join(lines)


def template_values(alert: Alert) -> dict[str, str | None]:
    """
    Values for each supported placeholder.

    ``None`` marks a field the alert does not carry. It renders as an empty
    string, and a line whose placeholders are all absent is dropped.
    """
    return {
        "ID": alert.id or None,
        "Name": alert.name,
        "Severity": alert.severity.label,
        "Status": alert.status.label,
        "Description": alert.description,
        "Source": alert.source or None,
        "Component": alert.component or None,
        "Timestamp": alert.rfc3339_timestamp,
        "Count": str(alert.count),
        "Value": format_measure(alert.value),
        "Threshold": format_measure(alert.threshold),
        "Labels": _mapping_block("Labels", alert.labels),
        "Annotations": _mapping_block("Details", alert.annotations),
    }


def render_template(template: str, alert: Alert) -> str:
    """
    Substitute ``{{.Field}}`` placeholders in a single pass.

    Substituted text is never rescanned, so alert fields that contain
    placeholder syntax come through literally. Unknown placeholders are
    left untouched. Absent values render empty; a line is dropped only
    when every known placeholder on it is absent.
    """
    values = template_values(alert)
    rendered: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        return values[name] or ""

    for line in template.splitlines():
        known = [m.group(1) for m in _PLACEHOLDER.finditer(line) if m.group(1) in values]
        if known and all(values[name] is None for name in known):
            continue

        rendered.append(_PLACEHOLDER.sub(_replace, line))

    body = "\n".join(rendered)
    if template.endswith("\n"):
        body += "\n"
    return body


class EmailChannel(AlertChannel):
    """Send alerts as plain-text email over SMTP."""

    channel_type = "email"
    config_class = EmailChannelConfig

    _config: EmailChannelConfig

    def format_subject(self, alert: Alert) -> str:
        return self._config.subject or alert.title

    def format_body(self, alert: Alert) -> str:
        return render_template(self._config.template or DEFAULT_TEMPLATE, alert)

    @property
    def recipients(self) -> list[str]:
        """Envelope recipients: to, cc and bcc, first occurrence wins."""
        merged = [*self._config.to, *self._config.cc, *self._config.bcc]
        return list(dict.fromkeys(merged))

    def compose_message(self, alert: Alert) -> EmailMessage:
        """
        Build a text/plain UTF-8 message; bcc recipients never appear in headers.

        The body is quoted-printable, so ASCII text stays readable on the wire.
        """
        try:
            msg = EmailMessage()
            msg["From"] = self._config.from_address
            msg["To"] = ", ".join(self._config.to)
            if self._config.cc:
                msg["Cc"] = ", ".join(self._config.cc)
            msg["Subject"] = self.format_subject(alert)
            msg.set_content(self.format_body(alert), cte="quoted-printable")
        except (ValueError, UnicodeError) as exc:
            raise PayloadSerializationError(
                channel=self.type, reason=str(exc), alert_id=alert.id
            ) from exc
        return msg

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if self._config.insecure_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _connect(self) -> smtplib.SMTP:
        """Open the SMTP connection; implicit TLS wraps the socket up front."""
        if self._config.implicit_tls:
            return smtplib.SMTP_SSL(
                self._config.smtp_host,
                self._config.smtp_port,
                timeout=self.timeout,
                context=self._ssl_context(),
            )
        return smtplib.SMTP(
            self._config.smtp_host, self._config.smtp_port, timeout=self.timeout
        )

    async def send(self, alert: Alert) -> bool:
        """
        Send alert email.

        SMTP runs on the default executor so the event loop is not
        blocked. Delivery is all or nothing: if the server refuses any
        recipient the whole call fails.

        Args:
            alert: Alert data to send

        Returns:
            True if every recipient was accepted
        """
        msg = self.compose_message(alert)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._send_sync, msg, alert)
        return True

    def _send_sync(self, msg: EmailMessage, alert: Alert) -> None:
        """Synchronous SMTP exchange (called from executor)."""
        recipients = self.recipients
        try:
            with self._connect() as server:
                if self._config.tls:
                    # Raises SMTPNotSupportedError when STARTTLS is not offered.
                    server.starttls(context=self._ssl_context())
                if self._config.username:
                    password = (
                        self._config.password.get_secret_value()
                        if self._config.password
                        else ""
                    )
                    server.login(self._config.username, password)
                refused = server.sendmail(
                    self._config.from_address, recipients, msg.as_string()
                )

        except smtplib.SMTPAuthenticationError as exc:
            logger.error(
                "email_authentication_failed",
                smtp_host=self._config.smtp_host,
                smtp_user=self._config.username,
            )
            raise TransportError(
                channel=self.type,
                reason=f"authentication failed: {exc.smtp_code}",
                alert_id=alert.id,
            ) from exc

        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "email_alert_failed",
                smtp_host=self._config.smtp_host,
                alert_id=alert.id,
                error=str(exc),
            )
            raise TransportError(
                channel=self.type, reason=str(exc) or type(exc).__name__, alert_id=alert.id
            ) from exc

        if refused:
            logger.error(
                "email_recipients_refused",
                alert_id=alert.id,
                refused=sorted(refused),
            )
            raise TransportError(
                channel=self.type,
                reason=f"recipients refused: {', '.join(sorted(refused))}",
                alert_id=alert.id,
            )

        logger.info(
            "email_alert_sent",
            channel=self.name,
            alert_id=alert.id,
            recipient_count=len(recipients),
            severity=alert.severity.value,
        )
