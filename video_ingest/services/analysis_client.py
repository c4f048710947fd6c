"""HTTP client for the third-party video analysis service"""

from typing import Optional

import requests
import urllib3

from ..utils import get_logger

logger = get_logger(__name__)


class AnalysisRequestError(Exception):
    """The analysis service rejected a request or answered with something unusable"""


class AnalysisConfigurationError(ValueError):
    """The analysis service URL is missing"""


class AnalysisClient:
    """Submits analysis requests over HTTPS with bearer-token auth"""

    def __init__(
        self,
        url: str,
        token: str,
        workspace: str = "demo-en",
        timeout: float = 30,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None,
    ):
        if not url:
            raise AnalysisConfigurationError("Analysis service URL is not configured (ANALYSIS_URL)")
        self.url = url
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Nb-Workspace": workspace,
        })

        if not verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def submit(self, payload: dict) -> Optional[str]:
        """
        Post one analysis request.

        Returns:
            The analysis request id, or None if the response carries none

        Raises:
            AnalysisRequestError: On transport errors, non-2xx responses or
                a body that is not a JSON object
        """
        try:
            response = self.session.post(
                self.url,
                json=payload,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.RequestException as e:
            raise AnalysisRequestError(f"Request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise AnalysisRequestError(f"HTTP {response.status_code}: {response.text[:500]}")

        try:
            data = response.json()
        except ValueError as e:
            raise AnalysisRequestError(f"Malformed response body: {e}") from e
        if not isinstance(data, dict):
            raise AnalysisRequestError(f"Unexpected response body: {data!r}")

        return data.get("analysis_request_id")

    def close(self):
        self.session.close()
