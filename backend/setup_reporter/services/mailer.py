# backend/setup_reporter/services/mailer.py
"""
Report mailer - sends the long-setup report over SMTP.

Uses the ``emails`` package, which opens an SMTP session for each send.
``reconnect()`` therefore rebuilds the transport options from the latest
settings rather than holding a socket open between daily reports.
"""

import asyncio
import smtplib
from typing import Any, Dict, Optional, Sequence

import emails

from ..config import SmtpSettings
from ..constants import SMTP_SUCCESS_STATUS
from ..enums import LogEmoji, LoggerName
from ..exceptions import ReporterConnectionError, TransportError
from ..models.setup_event_model import SetupEvaluation
from ..services.logger import get_service_logger
from .report_renderer import render_report

logger = get_service_logger(LoggerName.MAILER, default_emoji=LogEmoji.MAIL)


class ReportMailer:
    """Mail collaborator: reconnect() then send_report()."""

    def __init__(self, settings: SmtpSettings):
        self.settings = settings
        self._smtp_options: Optional[Dict[str, Any]] = None

    @property
    def is_connected(self) -> bool:
        return self._smtp_options is not None

    def update_settings(self, settings: SmtpSettings) -> None:
        """Use new SMTP settings from the next reconnect on."""
        self.settings = settings

    def _build_smtp_options(self) -> Dict[str, Any]:
        if self.settings.use_tls and self.settings.use_ssl:
            raise ReporterConnectionError("SMTP use_tls and use_ssl are mutually exclusive")

        options: Dict[str, Any] = {
            "host": self.settings.server,
            "port": self.settings.port,
            "timeout": self.settings.timeout,
        }
        if self.settings.use_tls:
            options["tls"] = True
        elif self.settings.use_ssl:
            options["ssl"] = True
        if self.settings.username:
            options["user"] = self.settings.username
        if self.settings.password:
            options["password"] = self.settings.password
        return options

    async def reconnect(self) -> None:
        """
        Prepare a fresh SMTP transport from the current settings.

        Raises:
            ReporterConnectionError: If the settings cannot form a transport
        """
        self._smtp_options = self._build_smtp_options()
        logger.debug(
            f"SMTP transport ready for {self.settings.server}:{self.settings.port}",
            emoji=LogEmoji.CONNECTION,
        )

    async def send_report(
        self,
        subject: str,
        evaluations: Sequence[SetupEvaluation],
        sender_display_name: str,
    ) -> None:
        """
        Send the report to all configured recipients.

        An empty sequence sends nothing.

        Args:
            subject: Message subject
            evaluations: Included evaluations to list in the report
            sender_display_name: Display name for the From header

        Raises:
            TransportError: If no transport is ready or the server rejects the message
        """
        if not evaluations:
            logger.info("No long setups matched the criteria, nothing to send")
            return

        if self._smtp_options is None:
            raise TransportError("SMTP transport is not initialized")

        message = emails.Message(
            subject=subject,
            html=render_report(evaluations),
            mail_from=(sender_display_name, self.settings.from_address),
        )

        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(
                None,
                lambda: message.send(to=self.settings.recipients, smtp=self._smtp_options),
            )
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError(f"Email send error: {e}") from e

        if response is None or response.status_code != SMTP_SUCCESS_STATUS:
            error = getattr(response, "error", None) or getattr(response, "status_text", None)
            status = getattr(response, "status_code", None)
            raise TransportError(f"Email send error: status={status}, error={error}")

        logger.info(
            f"Report with {len(evaluations)} setup(s) sent to "
            f"{', '.join(self.settings.recipients)}",
            emoji=LogEmoji.SUCCESS,
        )

    async def close(self) -> None:
        self._smtp_options = None
