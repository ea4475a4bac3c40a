"""GitHub REST API client used by the Peachy CI jobs.

This module provides a small synchronous wrapper around the GitHub API for:
- Listing issues of a repository
- Inspecting and merging pull requests
- Deleting branches
- Creating deployments to the stage environment and posting their statuses

Every public method performs exactly one HTTP round trip and returns the
decoded JSON body as-is. HTTP error statuses are not raised; GitHub's error
objects (``{"message": ...}``) are returned like any other payload. Only a
failure at the transport layer raises, as ``TransportError``.

There is no retry, rate-limit handling or pagination.
"""

import json
import logging
from typing import Any, Dict, Optional, Union

import httpx


logger = logging.getLogger(__name__)

# Decoded JSON body: dict, list, str, int, float, bool or None.
JSONValue = Any

HTTP_METHOD_GET = "GET"
HTTP_METHOD_PUT = "PUT"
HTTP_METHOD_DELETE = "DELETE"
HTTP_METHOD_POST = "POST"

HOST = "https://api.github.com"
USER_AGENT = "Peachy CI"
DEPLOY_ENVIRONMENT = "stage"


class TransportError(Exception):
    """Raised when a request fails before any response is received.

    Covers DNS resolution, connection, TLS and protocol failures. HTTP
    error statuses never raise this.

    Attributes:
        url: The full URL that was requested.
        code: Name of the underlying transport failure (e.g. ``ConnectError``).
        message: Message reported by the transport.
    """

    def __init__(self, url: str, code: str, message: str):
        self.url = url
        self.code = code
        self.message = message
        super().__init__(f'Error: "{message}" - Code: {code} (URL: {url})')


class GitHubClient:
    """GitHub API client scoped to a single repository.

    The token and repository are fixed at construction. Each call opens
    its own HTTP client and closes it before returning, so an instance
    holds no per-call state.

    Attributes:
        token: GitHub API token sent as ``Authorization: token <token>``.
        repository: Repository in ``owner/name`` form.

    Example:
        >>> client = GitHubClient(token="ghp_xxx", repository="acme/widgets")
        >>> pr = client.get_pull_request(42)
        >>> pr["mergeable_state"]
        'clean'
    """

    def __init__(
        self,
        token: str,
        repository: str,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub API token for authentication.
            repository: Target repository as ``owner/name``.
            transport: Optional httpx transport, used instead of the network.
        """
        self._token = token
        self._repository = repository
        self._transport = transport

    @property
    def token(self) -> str:
        return self._token

    @property
    def repository(self) -> str:
        return self._repository

    def get_issues(self, filters: str) -> JSONValue:
        """List issues for the repository.

        See https://docs.github.com/rest/issues/issues#list-repository-issues

        Args:
            filters: Already encoded query string (e.g. ``state=open&labels=bug``),
                appended to the endpoint verbatim.

        Returns:
            Decoded JSON response.
        """
        endpoint = f"/repos/{self._repository}/issues?{filters}"
        return self._request(HTTP_METHOD_GET, endpoint)

    def get_pull_request(self, pr_id: int) -> JSONValue:
        """Get a single pull request.

        Callers deciding whether to merge should require ``mergeable`` to be
        true and ``mergeable_state`` to be ``clean``:

        - clean: required checks passed, no merge conflicts
        - unstable: checks still running or failing, no merge conflicts
        - dirty: merge conflicts

        See https://docs.github.com/rest/pulls/pulls#get-a-pull-request

        Args:
            pr_id: Pull request number.

        Returns:
            Decoded JSON response.
        """
        endpoint = f"/repos/{self._repository}/pulls/{int(pr_id):d}"
        return self._request(HTTP_METHOD_GET, endpoint)

    def merge_pull_request(self, pr_id: int) -> JSONValue:
        """Merge a pull request.

        No eligibility check is made here; see ``peachy_ci.github.merge``.

        Args:
            pr_id: Pull request number.

        Returns:
            Decoded JSON response.
        """
        endpoint = f"/repos/{self._repository}/pulls/{int(pr_id):d}/merge"
        return self._request(HTTP_METHOD_PUT, endpoint, "{}")

    def delete_branch(self, branch: str) -> JSONValue:
        """Delete a branch by removing its ``refs/heads`` reference.

        See https://docs.github.com/rest/git/refs#delete-a-reference

        Args:
            branch: Branch name, interpolated into the path verbatim.

        Returns:
            Decoded JSON response. None on success (204, empty body).
        """
        endpoint = f"/repos/{self._repository}/git/refs/heads/{branch}"
        return self._request(HTTP_METHOD_DELETE, endpoint)

    def get_deployments(self) -> JSONValue:
        """List deployments for the stage environment.

        See https://docs.github.com/rest/deployments/deployments#list-deployments

        Returns:
            Decoded JSON response, normally a list with the newest first.
        """
        endpoint = (
            f"/repos/{self._repository}/deployments"
            f"?environment={DEPLOY_ENVIRONMENT}"
        )
        return self._request(HTTP_METHOD_GET, endpoint)

    def get_latest_deployment(self) -> JSONValue:
        """Return the first deployment listed for the stage environment.

        Returns:
            The first element of ``get_deployments()``, or None when the
            list is empty or the response is not a list.
        """
        deployments = self.get_deployments()
        if isinstance(deployments, list) and deployments:
            return deployments[0]
        return None

    def create_deploy(self, branch: str, description: str) -> JSONValue:
        """Create a deployment of ``branch`` to the stage environment.

        Args:
            branch: Ref to deploy.
            description: Short description shown on GitHub.

        Returns:
            Decoded JSON response.
        """
        data = {
            "ref": branch,
            "auto_merge": False,
            "environment": DEPLOY_ENVIRONMENT,
            "required_contexts": [],
            "description": description,
        }
        endpoint = f"/repos/{self._repository}/deployments"
        return self._request(HTTP_METHOD_POST, endpoint, data)

    def deploy_status(
        self,
        deploy_id: int,
        state: str,
        description: str,
    ) -> JSONValue:
        """Create a status for a deployment.

        Args:
            deploy_id: Deployment id.
            state: Deployment state, usually ``pending`` or ``success``.
                Passed through without checking.
            description: Short description of the status.

        Returns:
            Decoded JSON response.
        """
        data = {"state": state, "description": description}
        endpoint = (
            f"/repos/{self._repository}/deployments/{int(deploy_id):d}/statuses"
        )
        return self._request(HTTP_METHOD_POST, endpoint, data)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"token {self._token}",
            "User-Agent": USER_AGENT,
        }

    def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Union[str, Dict[str, Any]]] = None,
    ) -> JSONValue:
        """Perform one request and decode the response body.

        The body is sent as raw content; no Content-Type header is added.
        There is no timeout and redirects are not followed.

        Args:
            method: HTTP method (GET, PUT, POST, DELETE).
            endpoint: API path including any query string.
            data: Optional body, either a pre-encoded string or a dict that
                is JSON-encoded before sending.

        Returns:
            The decoded JSON body, or None if the body is empty or not JSON.

        Raises:
            TransportError: If no response could be obtained.
        """
        url = HOST + endpoint
        content = None
        if data is not None:
            content = data if isinstance(data, str) else json.dumps(data)

        logger.debug(
            "Sending GitHub API request",
            extra={"method": method, "url": url},
        )

        try:
            with httpx.Client(
                headers=self._headers(),
                timeout=None,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                response = client.request(method, url, content=content)
        except httpx.RequestError as e:
            logger.error(
                "GitHub API transport failure",
                extra={
                    "method": method,
                    "url": url,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise TransportError(url=url, code=type(e).__name__, message=str(e)) from e

        if response.status_code >= 400:
            logger.warning(
                "GitHub API returned error status",
                extra={
                    "method": method,
                    "url": url,
                    "status_code": response.status_code,
                },
            )

        return _decode_body(response)


def _decode_body(response: httpx.Response) -> JSONValue:
    """Decode a response body as JSON, returning None when that fails."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        logger.debug(
            "Response body is not valid JSON",
            extra={
                "url": str(response.request.url),
                "status_code": response.status_code,
            },
        )
        return None
