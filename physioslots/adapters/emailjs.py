"""
Email sender using the EmailJS REST API.
"""

import logging
from typing import Any, Dict

import requests

from ..config import EmailConfig
from ..domain.exceptions import CollaboratorError, CollaboratorUnavailableError

logger = logging.getLogger(__name__)


class EmailJSSender:
    """Sends templated emails through EmailJS."""

    SEND_ENDPOINT = "https://api.emailjs.com/api/v1.0/email/send"

    def __init__(self, settings: EmailConfig, timeout_seconds: float = 15.0):
        self.settings = settings
        self.timeout_seconds = timeout_seconds

    def send(self, template_id: str, to_email: str, params: Dict[str, Any]) -> None:
        """
        Raises:
            CollaboratorUnavailableError: On network failures or 5xx answers
            CollaboratorError: If EmailJS rejects the message
        """
        payload = {
            "service_id": self.settings.service_id,
            "template_id": template_id,
            "user_id": self.settings.public_key,
            "template_params": {"to_email": to_email, **params},
        }

        try:
            response = requests.post(self.SEND_ENDPOINT, json=payload, timeout=self.timeout_seconds)
        except requests.exceptions.RequestException as exc:
            raise CollaboratorUnavailableError(f"Failed to reach EmailJS: {exc}") from exc

        if response.status_code >= 500:
            raise CollaboratorUnavailableError(
                f"EmailJS is temporarily unavailable (HTTP {response.status_code})",
                status=response.status_code,
            )
        if response.status_code >= 400:
            raise CollaboratorError(
                f"EmailJS rejected the message: {response.text}", status=response.status_code
            )

        logger.debug("Sent template %s to %s", template_id, to_email)
