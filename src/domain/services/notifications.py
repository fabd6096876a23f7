"""
Assessment notification emails.

Two independent channels run for every newly stored assessment:
- internal: operations notice with the full submission
- user: acknowledgment sent to the respondent

Each channel makes a single bounded attempt. Failures are logged and never
raised to the caller.
"""

from __future__ import annotations

import asyncio
import enum
from html import escape
from typing import Any

import structlog
from src.core.config import Settings, get_settings
from src.domain.scoring import category_breakdown, maturity_band, response_distribution
from src.libs.resend_client import (
    EmailClientError,
    EmailClientProtocol,
    EmailMessage,
    ResendClient,
)

logger = structlog.get_logger(__name__)

MATURITY_TEXTS: dict[str, dict[str, str]] = {
    "en": {
        "advanced": "Advanced Cybersecurity Maturity - focus on continuous posture improvements.",
        "solid": "Solid Cybersecurity Foundation - aligned with key cybersecurity core values.",
        "basic": "Basic Cybersecurity - some fundamental measures are in place, "
        "but a comprehensive assessment is needed as soon as possible.",
        "urgent": "Urgent Action Required - limited cybersecurity measures observed, "
        "indicating exposure to high risks.",
    },
    "fr": {
        "advanced": "Maturité Cybernétique Avancée - l'accent doit être mis sur "
        "l'amélioration continue de la posture.",
        "solid": "Fondation Cybersécuritaire Solide - l'organisation est alignée sur les "
        "valeurs fondamentales de la cybersécurité.",
        "basic": "Cybersécurité de Base - certaines mesures fondamentales sont en place, "
        "mais une évaluation complète est nécessaire dès que possible.",
        "urgent": "Action Urgente Requise - mesures de cybersécurité limitées observées, "
        "indiquant une exposition à des risques élevés.",
    },
}


class NotificationError(Exception):
    """Raised inside a channel when a notification cannot be delivered."""


class Channel(str, enum.Enum):
    INTERNAL = "internal"
    USER = "user"


class DeliveryStatus(str, enum.Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


def build_summary(record: dict[str, Any]) -> dict[str, Any]:
    """Derived fields shared by both templates and the report collaborator."""
    score = int(record.get("score") or 0)
    return {
        "score": score,
        "maturity_band": maturity_band(score),
        "response_distribution": response_distribution(record.get("answers") or {}),
        "category_breakdown": category_breakdown(record.get("detailed_answers") or []),
        "answered": len(record.get("answers") or {}),
    }


class NotificationService:
    """Sends the internal notice and the user acknowledgment for a record."""

    def __init__(
        self,
        client: EmailClientProtocol | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or ResendClient()
        self.timeout = self.settings.notify_timeout_seconds

    async def notify(self, record: dict[str, Any]) -> dict[Channel, DeliveryStatus]:
        """Run both channels concurrently; never raises."""
        summary = build_summary(record)
        internal, user = await asyncio.gather(
            self._run_channel(Channel.INTERNAL, record, summary),
            self._run_channel(Channel.USER, record, summary),
        )
        return {Channel.INTERNAL: internal, Channel.USER: user}

    async def _run_channel(
        self,
        channel: Channel,
        record: dict[str, Any],
        summary: dict[str, Any],
    ) -> DeliveryStatus:
        assessment_id = record.get("id")
        try:
            message = self._build_message(channel, record, summary)
            if message is None:
                return DeliveryStatus.SKIPPED
            sent = await asyncio.wait_for(self.client.send(message), timeout=self.timeout)
        except (TimeoutError, asyncio.TimeoutError):
            await logger.awarning(
                "notification_failed",
                channel=channel.value,
                assessment_id=assessment_id,
                error=f"timed out after {self.timeout}s",
            )
            return DeliveryStatus.FAILED
        except (EmailClientError, NotificationError) as exc:
            await logger.awarning(
                "notification_failed",
                channel=channel.value,
                assessment_id=assessment_id,
                error=str(exc),
            )
            return DeliveryStatus.FAILED
        except Exception as exc:  # noqa: BLE001 - log boundary for notification failures
            await logger.aerror(
                "notification_failed",
                channel=channel.value,
                assessment_id=assessment_id,
                error=str(exc),
                exc_info=True,
            )
            return DeliveryStatus.FAILED

        await logger.ainfo(
            "notification_sent",
            channel=channel.value,
            assessment_id=assessment_id,
            email_id=sent.id,
        )
        return DeliveryStatus.SENT

    def _build_message(
        self,
        channel: Channel,
        record: dict[str, Any],
        summary: dict[str, Any],
    ) -> EmailMessage | None:
        if not self.settings.notifications_configured:
            logger.info(
                "notification_skipped",
                channel=channel.value,
                assessment_id=record.get("id"),
                reason="email transport not configured",
            )
            return None

        if channel is Channel.INTERNAL:
            if not self.settings.notify_internal_to:
                logger.info(
                    "notification_skipped",
                    channel=channel.value,
                    assessment_id=record.get("id"),
                    reason="NOTIFY_INTERNAL_TO not configured",
                )
                return None
            text, html = self._internal_content(record, summary)
            environment = (record.get("environment") or {}).get("unique_name", "")
            return EmailMessage(
                from_email=self.settings.notify_from_email,
                to_emails=[self.settings.notify_internal_to],
                subject=f"New Cybersecurity Assessment - {environment}",
                html=html,
                text=text,
                reply_to=(record.get("respondent") or {}).get("email") or None,
            )

        recipient = (record.get("respondent") or {}).get("email")
        if not recipient:
            raise NotificationError("Respondent email address is missing")
        text, html = self._user_content(record, summary)
        return EmailMessage(
            from_email=self.settings.notify_from_email,
            to_emails=[recipient],
            subject="Your Cybersecurity Assessment",
            html=html,
            text=text,
        )

    def _internal_content(
        self, record: dict[str, Any], summary: dict[str, Any]
    ) -> tuple[str, str]:
        respondent = record.get("respondent") or {}
        environment = record.get("environment") or {}
        rows = [
            ("Name", respondent.get("name")),
            ("Date", respondent.get("date")),
            ("Role", respondent.get("role")),
            ("Environment Name", environment.get("unique_name")),
            ("Environment Type", environment.get("type")),
            ("Environment Size", environment.get("size")),
            ("Environment Importance", environment.get("importance")),
            ("Environment Maturity", environment.get("maturity")),
            ("Market Sector", respondent.get("market_sector")),
            ("Country", respondent.get("country")),
            ("Email", respondent.get("email")),
        ]
        answers = self._answer_rows(record)
        distribution = [
            (item["code"], f"{item['count']} ({item['percentage']}%)")
            for item in summary["response_distribution"]
        ]
        categories = [
            (item["category"], self._format_breakdown(item["breakdown"]))
            for item in summary["category_breakdown"]
        ]

        text_lines = ["New Cybersecurity Assessment Completed", ""]
        text_lines += [f"{label}: {value or '-'}" for label, value in rows]
        text_lines += [
            "",
            f"Assessment Score: {summary['score']}% ({summary['maturity_band']})",
            f"Completed: {record.get('completed_questions')}/{record.get('total_questions')}",
            "",
            "Response Distribution:",
        ]
        text_lines += [f"- {code}: {share}" for code, share in distribution]
        text_lines += ["", "Category Breakdown:"]
        text_lines += [f"- {category}: {counts}" for category, counts in categories]
        text_lines += ["", "Answers:"]
        text_lines += [f"- {question}: {answer}" for question, answer in answers]
        text_body = "\n".join(text_lines)

        info_html = "".join(
            f"<tr><td><strong>{escape(label)}:</strong></td><td>{escape(str(value or '-'))}</td></tr>"
            for label, value in rows
        )
        distribution_html = "".join(
            f"<tr><td>{escape(code)}</td><td>{escape(share)}</td></tr>"
            for code, share in distribution
        )
        categories_html = "".join(
            f"<tr><td>{escape(category)}</td><td>{escape(counts)}</td></tr>"
            for category, counts in categories
        )
        answers_html = "".join(
            f"<tr><td>{escape(question)}</td><td>{escape(answer)}</td></tr>"
            for question, answer in answers
        )
        html_body = (
            "<h1>New Cybersecurity Assessment Completed</h1>"
            f"<table><tr><th colspan=\"2\">Client Information</th></tr>{info_html}</table>"
            f"<h2>Assessment Score: {summary['score']}%</h2>"
            "<h3>Response Distribution</h3>"
            f"<table><tr><th>Response</th><th>Share</th></tr>{distribution_html}</table>"
            "<h3>Category Breakdown</h3>"
            f"<table><tr><th>Category</th><th>Responses</th></tr>{categories_html}</table>"
            f"<table><tr><th>Question</th><th>Answer</th></tr>{answers_html}</table>"
        )
        return text_body, html_body

    def _user_content(self, record: dict[str, Any], summary: dict[str, Any]) -> tuple[str, str]:
        respondent = record.get("respondent") or {}
        environment = record.get("environment") or {}
        language = record.get("language") if record.get("language") in MATURITY_TEXTS else "en"
        first_name = (str(respondent.get("name") or "").split() or ["Valued Client"])[0]
        band_text = MATURITY_TEXTS[language][summary["maturity_band"]]
        details = [
            ("Environment Name", environment.get("unique_name")),
            ("Environment Type", environment.get("type")),
            ("Environment Size", environment.get("size")),
            ("Market Sector", respondent.get("market_sector")),
        ]

        text_lines = [
            f"Dear {first_name},",
            "",
            "Thank you for completing the Cybersecurity Self-Assessment. "
            "We have received your assessment results.",
            "",
            "Assessment Details:",
        ]
        text_lines += [f"{label}: {value or '-'}" for label, value in details]
        text_lines += [
            f"Score: {summary['score']}%",
            "",
            band_text,
            "",
            "Next steps: a member of our team will reach out to discuss your results.",
            "",
            "Kind regards,",
            "The Cybersecurity Team",
        ]
        text_body = "\n".join(text_lines)

        details_html = "".join(
            f"<li><strong>{escape(label)}:</strong> {escape(str(value or '-'))}</li>"
            for label, value in details
        )
        html_body = (
            f"<p>Dear {escape(first_name)},</p>"
            "<p>Thank you for completing the Cybersecurity Self-Assessment. "
            "We have received your assessment results.</p>"
            f"<h3>Assessment Details</h3><ul>{details_html}</ul>"
            f"<p><strong>Score:</strong> {summary['score']}%</p>"
            f"<p>{escape(band_text)}</p>"
            "<p>Next steps: a member of our team will reach out to discuss your results.</p>"
            "<p>Kind regards,<br>The Cybersecurity Team</p>"
        )
        return text_body, html_body

    @staticmethod
    def _format_breakdown(breakdown: dict[str, int]) -> str:
        return ", ".join(f"{code} x{count}" for code, count in breakdown.items())

    @staticmethod
    def _answer_rows(record: dict[str, Any]) -> list[tuple[str, str]]:
        detailed = record.get("detailed_answers") or []
        if detailed:
            return [
                (str(item.get("question_text") or item.get("question_id")), str(item.get("answer_label")))
                for item in detailed
            ]
        return [(str(qid), str(value)) for qid, value in (record.get("answers") or {}).items()]
