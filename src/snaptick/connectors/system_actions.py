# src/snaptick/connectors/system_actions.py

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable
from urllib.parse import quote

logger = logging.getLogger(__name__)


class BrowserActions:
    """
    Navigation-drawer actions for desktop runs.

    Mail and store links open in the default browser / mail client.
    Sharing has no desktop equivalent, so the share text is emitted instead.
    """

    def __init__(
        self,
        *,
        feedback_email: str,
        share_url: str,
        app_name: str = "snaptick",
        emit: Callable[[str], None] | None = None,
    ) -> None:
        self._feedback_email = feedback_email
        self._share_url = share_url
        self._app_name = app_name
        self._emit = emit

    def open_mail(self, subject: str) -> None:
        url = f"mailto:{self._feedback_email}?subject={quote(subject)}"
        self.open_url(url)

    def open_url(self, url: str) -> None:
        opened = webbrowser.open(url)
        logger.info("Open url=%s opened=%s", url, opened)
        if not opened and self._emit is not None:
            self._emit(f"Open this link: {url}")

    def share_app(self) -> None:
        text = f"Plan your day with {self._app_name}: {self._share_url}"
        logger.info("Share app text prepared")
        if self._emit is not None:
            self._emit(text)
