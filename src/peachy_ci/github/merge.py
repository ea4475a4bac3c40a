"""Merge-eligibility checks for pull requests.

A pull request is only merged when GitHub reports it as ``mergeable`` and
its ``mergeable_state`` is ``clean``. The API client does not enforce this;
callers use these helpers before calling ``merge_pull_request``.
"""

from typing import Optional

from peachy_ci.github.client import JSONValue
from peachy_ci.github.models import MergeableState, PullRequestStatus


def github_error_message(response: JSONValue) -> Optional[str]:
    """Return the ``message`` of a GitHub error object, if the response is one."""
    if isinstance(response, dict) and "message" in response:
        return str(response["message"])
    return None


def status_block_reason(status: PullRequestStatus) -> Optional[str]:
    """Explain why a pull request with this status cannot be merged."""
    if not status.mergeable:
        return "not mergeable"
    if status.mergeable_state == MergeableState.CLEAN.value:
        return None
    if status.mergeable_state == MergeableState.UNSTABLE.value:
        return "checks pending or failing (unstable)"
    if status.mergeable_state == MergeableState.DIRTY.value:
        return "merge conflicts (dirty)"
    return f"mergeable state is {status.mergeable_state!r}"


def merge_block_reason(pull_request: JSONValue) -> Optional[str]:
    """Explain why a pull request cannot be merged.

    Args:
        pull_request: Decoded pull request payload.

    Returns:
        A short reason, or None if the pull request can be merged.
    """
    if not isinstance(pull_request, dict):
        return "no pull request data"
    if "number" not in pull_request:
        message = github_error_message(pull_request)
        return f"GitHub error: {message}" if message else "no pull request data"
    return status_block_reason(PullRequestStatus.from_github_response(pull_request))


def is_mergeable(pull_request: JSONValue) -> bool:
    return merge_block_reason(pull_request) is None
