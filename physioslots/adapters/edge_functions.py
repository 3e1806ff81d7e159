"""
HTTP client for the managed backend's serverless functions.
"""

import logging
import re
from typing import Any, Dict, Optional

import requests

from ..config import BackendConfig
from ..domain.exceptions import CollaboratorError, CollaboratorUnavailableError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429}
HEADING_PATTERN = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)


class EdgeFunctionClient:
    """
    Invokes backend functions with a JSON body and returns their JSON answer.

    Network failures, timeouts, 429 and 5xx responses raise
    CollaboratorUnavailableError; any other error status raises
    CollaboratorError.
    """

    def __init__(self, backend: BackendConfig, session: requests.Session | None = None):
        """
        Initialize the client.

        Args:
            backend: Backend URL, anon key and timeout
            session: Optional requests session (reused between calls)
        """
        if not backend.url:
            raise ValueError("backend.url is not configured")
        self.backend = backend
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {backend.anon_key}",
            "apikey": backend.anon_key,
            "Content-Type": "application/json",
        }

    def invoke(self, name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Call function ``name`` with ``payload``.

        Raises:
            CollaboratorUnavailableError: If the call can be retried later
            CollaboratorError: If the function rejected the call
        """
        response = self._post(name, json=payload)
        status = response.status_code

        try:
            data = response.json()
        except ValueError as exc:
            raise CollaboratorError(
                f"Backend function {name} returned invalid JSON", status=status, function_name=name
            ) from exc

        if not isinstance(data, dict):
            raise CollaboratorError(
                f"Backend function {name} returned an unexpected payload",
                status=status,
                function_name=name,
            )
        return data

    def submit(self, name: str, params: Dict[str, str]) -> str:
        """
        POST to a function that takes query parameters and answers with a page.

        Returns the response body. Error statuses are mapped as in ``invoke``.
        """
        return self._post(name, params=params).text

    def _post(
        self,
        name: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        url = self.backend.functions_url(name)
        logger.debug("Invoking backend function %s", name)

        try:
            response = self.session.post(
                url,
                headers=self.headers,
                json=json,
                params=params,
                timeout=self.backend.timeout_seconds,
            )
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as exc:
            raise CollaboratorUnavailableError(
                f"Backend function {name} is unreachable: {exc}", function_name=name
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise CollaboratorError(
                f"Failed to call backend function {name}: {exc}", function_name=name
            ) from exc

        status = response.status_code
        if status >= 500 or status in RETRYABLE_STATUS_CODES:
            raise CollaboratorUnavailableError(
                f"Backend function {name} is temporarily unavailable (HTTP {status})",
                status=status,
                function_name=name,
            )
        if status >= 400:
            raise CollaboratorError(
                f"Backend function {name} failed (HTTP {status}): {self._error_message(response)}",
                status=status,
                function_name=name,
            )
        return response

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            # Page-returning functions put the reason in the heading.
            heading = HEADING_PATTERN.search(response.text or "")
            if heading:
                return heading.group(1).strip()
            return response.text or "no details"
        if isinstance(body, dict):
            return str(body.get("error") or body.get("message") or body)
        return str(body)
