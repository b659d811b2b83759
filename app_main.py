"""Application entry point for the ProctorQt console."""

from __future__ import annotations

import socket
import sys

from PySide6.QtWidgets import QApplication

from proctor_app.core.notifier import WebhookNotifier
from proctor_app.core.services.kv_store import KeyValueStore
from proctor_app.core.session_manager import SessionManager
from proctor_app.server.api_server import start_api_server
from proctor_app.ui.proctor_main_window import ProctorMainWindow
from proctor_app.utils.logging_config import configure_logging
from proctor_app.utils.settings import get_settings


def _determine_candidate_url(port: int) -> str:
    """Best-effort determination of the local IP for the candidate-facing URL."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}/"


def main() -> None:
    """Initialize logging, start the API server, and launch the Qt console."""
    settings = get_settings()
    logger = configure_logging(settings.LOG_LEVEL)
    logger.info("Starting ProctorQt...")

    store = KeyValueStore(settings.data_path)
    store.load()
    notifier = None
    if settings.WEBHOOK_URL:
        notifier = WebhookNotifier(settings.WEBHOOK_URL, timeout_s=settings.WEBHOOK_TIMEOUT_S)
    else:
        logger.info("No webhook configured; completion notifications are disabled")

    session_manager = SessionManager(
        store=store,
        notifier=notifier,
        classification_duration_s=settings.CLASSIFICATION_DURATION_S,
        classification_feedback_s=settings.CLASSIFICATION_FEEDBACK_S,
    )
    start_api_server(session_manager=session_manager, host=settings.HOST, port=settings.PORT)
    candidate_url = _determine_candidate_url(settings.PORT)
    logger.info("Candidate page available at %s", candidate_url)

    app = QApplication(sys.argv)
    window = ProctorMainWindow(session_manager=session_manager, candidate_url=candidate_url)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
