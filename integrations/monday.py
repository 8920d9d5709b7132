"""
monday.com GraphQL API client.

Thin transport layer: posts a query with variables and returns the `data`
object. Everything that goes wrong is raised as one of two errors:
- MondayTransportError: network failure, HTTP error status, bad JSON
- MondayApiError: the response carries GraphQL `errors`
"""

from typing import Any, Optional
import requests
import structlog

from exceptions import MondayApiError, MondayTransportError

logger = structlog.get_logger(__name__)


DEFAULT_API_URL = "https://api.monday.com/v2"


class MondayClient:
    """
    Blocking GraphQL client for monday.com.

    Usage:
        client = MondayClient(token="...")
        data = client.execute("query { me { id name } }")
    """

    def __init__(
        self,
        token: Optional[str],
        api_url: str = DEFAULT_API_URL,
        api_version: Optional[str] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.token = token
        self.api_url = api_url
        self.api_version = api_version
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, use_api_version: bool) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": self.token or "",
        }
        if use_api_version and self.api_version:
            headers["API-Version"] = self.api_version
        return headers

    def execute(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
        use_api_version: bool = True,
    ) -> dict[str, Any]:
        """
        Run a GraphQL query or mutation.

        Args:
            query: GraphQL document
            variables: Query variables
            use_api_version: Send the API-Version header

        Returns:
            The `data` object of the response (empty dict if absent)

        Raises:
            MondayTransportError: Request failed or response unreadable
            MondayApiError: API reported errors
        """
        if not self.token:
            raise MondayTransportError("monday.com API token is not configured")

        payload = {"query": query, "variables": variables or {}}

        try:
            response = self.session.post(
                self.api_url,
                json=payload,
                headers=self._headers(use_api_version),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("monday_request_failed", error=str(e))
            raise MondayTransportError(f"monday.com request failed: {e}") from e

        if response.status_code >= 400:
            logger.error(
                "monday_http_error",
                status=response.status_code,
                body=response.text[:500]
            )
            raise MondayTransportError(
                f"monday.com returned HTTP {response.status_code}",
                http_status=response.status_code
            )

        try:
            body = response.json()
        except ValueError as e:
            logger.error("monday_invalid_json", body=response.text[:500])
            raise MondayTransportError(
                "monday.com returned a non-JSON response",
                http_status=response.status_code
            ) from e

        errors = body.get("errors")
        if not errors and body.get("error_message"):
            errors = [{"message": body["error_message"], "code": body.get("error_code")}]
        if errors:
            logger.warning("monday_api_errors", errors=errors)
            raise MondayApiError(errors)

        return body.get("data") or {}
