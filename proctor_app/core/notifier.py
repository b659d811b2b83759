"""Best-effort completion notification sent when an attempt completes.

Delivery runs on a daemon thread so the engine never waits on the network.
Failures are logged and dropped; there are no retries.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
from threading import Thread
from typing import Any, Protocol

import httpx

from proctor_app.core.models import Question, Quiz, Session
from proctor_app.core.scoring import corrections

logger = logging.getLogger(__name__)


class CompletionNotifier(Protocol):
    def notify(self, payload: dict[str, Any]) -> None:
        ...


def build_completion_payload(session: Session, quiz: Quiz, questions: Sequence[Question]) -> dict[str, Any]:
    info = session.candidate_info
    return {
        "first_name": info.first_name,
        "last_name": info.last_name,
        "email": info.email,
        "manager": info.manager,
        "department": info.department,
        "level": info.level,
        "role": info.role,
        "quiz": quiz.name,
        "answers": list(session.answers),
        "corrections": corrections(session.answers, questions),
        "score": session.score,
        "classification_score": session.classification_score,
        "duration": session.completion_time,
    }


@dataclass(slots=True)
class WebhookNotifier:
    """POSTs the completion payload as JSON to a webhook URL."""

    url: str
    timeout_s: float = 10.0
    transport: httpx.BaseTransport | None = None

    def notify(self, payload: dict[str, Any]) -> None:
        thread = Thread(target=self.deliver, args=(payload,), name="CompletionWebhook", daemon=True)
        thread.start()

    def deliver(self, payload: dict[str, Any]) -> bool:
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self.transport) as client:
                response = client.post(self.url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Failed to deliver completion notification for %s: %s", payload.get("email"), exc)
            return False
        logger.info("Completion notification delivered for %s", payload.get("email"))
        return True
