"""GitHub API client for issue, pull request, branch and deployment calls.

This module provides a wrapper around the GitHub API for:
- Listing issues
- Inspecting and merging pull requests
- Deleting branches
- Creating stage deployments and their statuses
"""

from peachy_ci.github.client import GitHubClient, JSONValue, TransportError
from peachy_ci.github.merge import is_mergeable, merge_block_reason
from peachy_ci.github.models import Deployment, MergeableState, PullRequestStatus

__all__ = [
    "Deployment",
    "GitHubClient",
    "JSONValue",
    "MergeableState",
    "PullRequestStatus",
    "TransportError",
    "is_mergeable",
    "merge_block_reason",
]
