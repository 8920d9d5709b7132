"""
Unit tests for MondayClient.

The HTTP session is a MagicMock; no request leaves the process.
"""

import pytest
import requests
from unittest.mock import MagicMock

from exceptions import MondayApiError, MondayTransportError
from integrations.monday import MondayClient


def _response(status_code: int = 200, body=None, json_error: bool = False) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = "body"
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = body if body is not None else {}
    return response


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(session) -> MondayClient:
    return MondayClient(token="tok", api_version="2023-10", timeout=5, session=session)


class TestExecute:
    """Tests for MondayClient.execute()"""

    def test_returns_data(self, client, session):
        """Should return the data object of the response."""
        session.post.return_value = _response(body={"data": {"me": {"id": 1}}})

        assert client.execute("query { me { id } }") == {"me": {"id": 1}}

    def test_sends_query_variables_and_auth(self, client, session):
        session.post.return_value = _response(body={"data": {}})

        client.execute("query($a: Int) { x }", {"a": 1})

        kwargs = session.post.call_args.kwargs
        assert kwargs["json"] == {"query": "query($a: Int) { x }", "variables": {"a": 1}}
        assert kwargs["headers"]["Authorization"] == "tok"
        assert kwargs["timeout"] == 5

    def test_api_version_header_is_optional(self, client, session):
        """Should send API-Version only when asked to."""
        session.post.return_value = _response(body={"data": {}})

        client.execute("query { me { id } }")
        assert session.post.call_args.kwargs["headers"]["API-Version"] == "2023-10"

        client.execute("query { me { id } }", use_api_version=False)
        assert "API-Version" not in session.post.call_args.kwargs["headers"]

    def test_missing_data_is_empty_dict(self, client, session):
        session.post.return_value = _response(body={"data": None})

        assert client.execute("query { x }") == {}

    def test_graphql_errors_raise_api_error(self, client, session):
        """Should raise MondayApiError with the joined messages."""
        session.post.return_value = _response(body={
            "errors": [{"message": "bad column"}, {"message": "bad board"}]
        })

        with pytest.raises(MondayApiError) as exc_info:
            client.execute("mutation { x }")

        assert exc_info.value.message == "bad column; bad board"
        assert len(exc_info.value.errors) == 2

    def test_error_message_shape_raises_api_error(self, client, session):
        session.post.return_value = _response(body={
            "error_message": "Complexity budget exhausted",
            "error_code": "ComplexityException",
        })

        with pytest.raises(MondayApiError) as exc_info:
            client.execute("query { x }")

        assert "Complexity budget" in exc_info.value.message

    def test_http_error_raises_transport_error(self, client, session):
        session.post.return_value = _response(status_code=500)

        with pytest.raises(MondayTransportError) as exc_info:
            client.execute("query { x }")

        assert exc_info.value.http_status == 500
        assert exc_info.value.status_code == 503

    def test_network_failure_raises_transport_error(self, client, session):
        session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(MondayTransportError):
            client.execute("query { x }")

    def test_non_json_raises_transport_error(self, client, session):
        session.post.return_value = _response(json_error=True)

        with pytest.raises(MondayTransportError):
            client.execute("query { x }")

    def test_missing_token_raises_without_request(self, session):
        """Should fail fast when no token is configured."""
        client = MondayClient(token=None, session=session)

        with pytest.raises(MondayTransportError):
            client.execute("query { x }")

        session.post.assert_not_called()
