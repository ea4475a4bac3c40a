"""Unit tests for the GitHub API client.

Tests endpoint construction, request bodies, headers, JSON decoding and
transport failure handling against an ``httpx.MockTransport``.
"""

import json

import httpx
import pytest

from conftest import FakeGitHub
from peachy_ci.github.client import (
    HOST,
    USER_AGENT,
    GitHubClient,
    TransportError,
)


class TestConstruction:
    def test_stores_token_and_repository(self):
        client = GitHubClient("ghp_abc", "acme/widgets")
        assert client.token == "ghp_abc"
        assert client.repository == "acme/widgets"

    def test_token_and_repository_are_read_only(self):
        client = GitHubClient("ghp_abc", "acme/widgets")
        with pytest.raises(AttributeError):
            client.token = "other"
        with pytest.raises(AttributeError):
            client.repository = "other/repo"

    def test_no_request_made_on_construction(self, fake_github):
        fake_github.client()
        assert fake_github.requests == []


class TestHeaders:
    def test_authorization_uses_token_scheme(self, fake_github):
        fake_github.client(token="ghp_secret").get_deployments()
        assert fake_github.last_request.headers["Authorization"] == "token ghp_secret"

    def test_user_agent(self, fake_github):
        fake_github.client().get_deployments()
        assert fake_github.last_request.headers["User-Agent"] == USER_AGENT

    def test_no_content_type_on_write(self, fake_github):
        fake_github.client().create_deploy("main", "release")
        assert "content-type" not in fake_github.last_request.headers


class TestEndpoints:
    def test_get_issues_appends_filters_verbatim(self, fake_github):
        fake_github.client().get_issues("state=open&labels=bug")
        request = fake_github.last_request
        assert request.method == "GET"
        assert str(request.url) == f"{HOST}/repos/acme/widgets/issues?state=open&labels=bug"

    def test_get_pull_request(self, fake_github):
        fake_github.client().get_pull_request(42)
        request = fake_github.last_request
        assert request.method == "GET"
        assert str(request.url) == f"{HOST}/repos/acme/widgets/pulls/42"
        assert request.content == b""

    def test_merge_pull_request_sends_empty_object(self, fake_github):
        fake_github.client().merge_pull_request(7)
        request = fake_github.last_request
        assert request.method == "PUT"
        assert str(request.url) == f"{HOST}/repos/acme/widgets/pulls/7/merge"
        assert request.content == b"{}"

    def test_delete_branch(self, fake_github):
        fake_github.client().delete_branch("feature/login")
        request = fake_github.last_request
        assert request.method == "DELETE"
        assert str(request.url) == f"{HOST}/repos/acme/widgets/git/refs/heads/feature/login"

    def test_get_deployments_is_scoped_to_stage(self, fake_github):
        fake_github.client().get_deployments()
        request = fake_github.last_request
        assert request.method == "GET"
        assert str(request.url) == f"{HOST}/repos/acme/widgets/deployments?environment=stage"

    def test_create_deploy(self, fake_github):
        fake_github.client().create_deploy("release-1.2", "Deploy 1.2")
        request = fake_github.last_request
        assert request.method == "POST"
        assert str(request.url) == f"{HOST}/repos/acme/widgets/deployments"
        assert json.loads(request.content) == {
            "ref": "release-1.2",
            "auto_merge": False,
            "environment": "stage",
            "required_contexts": [],
            "description": "Deploy 1.2",
        }

    def test_deploy_status(self, fake_github):
        fake_github.client().deploy_status(991, "pending", "Deploying")
        request = fake_github.last_request
        assert request.method == "POST"
        assert str(request.url) == f"{HOST}/repos/acme/widgets/deployments/991/statuses"
        assert json.loads(request.content) == {
            "state": "pending",
            "description": "Deploying",
        }

    def test_deploy_status_does_not_check_state(self, fake_github):
        fake_github.client().deploy_status(1, "exploded", "")
        assert json.loads(fake_github.last_request.content)["state"] == "exploded"

    def test_numeric_ids_are_formatted_as_integers(self, fake_github):
        fake_github.client().get_pull_request("42")
        assert fake_github.last_request.url.path == "/repos/acme/widgets/pulls/42"


class TestResponses:
    def test_returns_decoded_json(self):
        fake = FakeGitHub(body={"number": 42, "mergeable": True, "mergeable_state": "clean"})
        result = fake.client().get_pull_request(42)
        assert result == {"number": 42, "mergeable": True, "mergeable_state": "clean"}

    def test_http_error_status_returns_error_body(self):
        fake = FakeGitHub(body={"message": "Not Found"}, status_code=404)
        result = fake.client().get_pull_request(1)
        assert result == {"message": "Not Found"}

    def test_unprocessable_merge_returns_error_body(self):
        body = {"message": "Pull Request is not mergeable"}
        fake = FakeGitHub(body=body, status_code=405)
        assert fake.client().merge_pull_request(3) == body

    def test_empty_body_returns_none(self):
        fake = FakeGitHub(body=None, status_code=204)
        assert fake.client().delete_branch("old") is None

    def test_malformed_json_returns_none(self):
        fake = FakeGitHub(body=b"<html>Bad gateway</html>", status_code=502)
        assert fake.client().get_deployments() is None

    def test_scalar_json_is_returned(self):
        fake = FakeGitHub(body=b"true")
        assert fake.client().get_issues("") is True


class TestLatestDeployment:
    def test_returns_first_deployment(self):
        fake = FakeGitHub(body=[{"id": 3, "ref": "main"}, {"id": 2, "ref": "old"}])
        assert fake.client().get_latest_deployment() == {"id": 3, "ref": "main"}

    def test_empty_list_returns_none(self):
        fake = FakeGitHub(body=[])
        assert fake.client().get_latest_deployment() is None

    def test_error_object_returns_none(self):
        fake = FakeGitHub(body={"message": "Bad credentials"}, status_code=401)
        assert fake.client().get_latest_deployment() is None

    def test_uses_stage_deployments_endpoint(self):
        fake = FakeGitHub(body=[])
        fake.client().get_latest_deployment()
        assert len(fake.requests) == 1
        assert fake.last_request.url.params["environment"] == "stage"


class TestTransportFailure:
    def test_connect_error_raises_transport_error(self):
        fake = FakeGitHub(error=httpx.ConnectError("Could not resolve host"))
        with pytest.raises(TransportError) as exc_info:
            fake.client().get_pull_request(42)

        error = exc_info.value
        assert error.url == f"{HOST}/repos/acme/widgets/pulls/42"
        assert error.code == "ConnectError"
        assert error.message == "Could not resolve host"
        assert isinstance(error.__cause__, httpx.ConnectError)

    def test_read_error_raises_transport_error(self):
        fake = FakeGitHub(error=httpx.ReadError("Connection reset by peer"))
        with pytest.raises(TransportError) as exc_info:
            fake.client().create_deploy("main", "x")
        assert exc_info.value.code == "ReadError"

    def test_transport_error_message_includes_url_and_code(self):
        error = TransportError(url="https://api.github.com/x", code="ConnectError", message="boom")
        assert "https://api.github.com/x" in str(error)
        assert "ConnectError" in str(error)
        assert "boom" in str(error)

    def test_get_latest_deployment_propagates_transport_error(self):
        fake = FakeGitHub(error=httpx.ConnectTimeout("timed out"))
        with pytest.raises(TransportError):
            fake.client().get_latest_deployment()
