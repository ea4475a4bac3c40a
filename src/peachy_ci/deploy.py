"""CI flows built on the GitHub client.

Drives the two jobs Peachy CI runs against a repository:

- merge a pull request once it is clean, optionally deleting its branch
- deploy a branch to stage, reporting ``pending`` then ``success``

All GitHub access goes through an injected ``GitHubClient``. A
``TransportError`` from the client is not caught here; the caller decides
whether to exit. GitHub error objects returned by follow-up calls are
treated as failures of the flow.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from peachy_ci.github.client import GitHubClient, JSONValue
from peachy_ci.github.merge import github_error_message, merge_block_reason
from peachy_ci.github.models import Deployment, PullRequestStatus

logger = logging.getLogger(__name__)

STATE_PENDING = "pending"
STATE_SUCCESS = "success"


@dataclass
class MergeOutcome:
    """Result of a merge attempt.

    Attributes:
        pr_id: Pull request number.
        merged: Whether GitHub reported the merge as done.
        reason: Why the merge was skipped or refused, if it was.
        branch_deleted: Whether the head branch was deleted afterwards.
        response: Raw response of the merge call, if one was made.
    """

    pr_id: int
    merged: bool
    reason: Optional[str] = None
    branch_deleted: bool = False
    response: JSONValue = None


class DeployWorkflow:
    """Merge and deploy flows for a single repository.

    Attributes:
        github_client: Client scoped to the repository.
    """

    def __init__(self, github_client: GitHubClient):
        self.github_client = github_client

    def merge_if_ready(
        self,
        pr_id: int,
        delete_branch: bool = False,
        force: bool = False,
    ) -> MergeOutcome:
        """Merge a pull request if it is mergeable and clean.

        Args:
            pr_id: Pull request number.
            delete_branch: Delete the head branch after a successful merge.
            force: Merge without checking the mergeable state.

        Returns:
            MergeOutcome describing what happened.
        """
        status: Optional[PullRequestStatus] = None
        if not force or delete_branch:
            pull_request = self.github_client.get_pull_request(pr_id)
            reason = merge_block_reason(pull_request)
            if reason is not None and not force:
                logger.info(
                    "Skipping merge of pull request",
                    extra={"pr_id": pr_id, "reason": reason},
                )
                return MergeOutcome(pr_id=pr_id, merged=False, reason=reason)
            if isinstance(pull_request, dict) and "number" in pull_request:
                status = PullRequestStatus.from_github_response(pull_request)

        response = self.github_client.merge_pull_request(pr_id)
        merged = isinstance(response, dict) and bool(response.get("merged"))
        if not merged:
            message = github_error_message(response)
            logger.warning(
                "GitHub refused to merge pull request",
                extra={"pr_id": pr_id, "github_message": message},
            )
            return MergeOutcome(
                pr_id=pr_id,
                merged=False,
                reason=message or "merge failed",
                response=response,
            )

        logger.info(
            "Pull request merged",
            extra={
                "pr_id": pr_id,
                "forced": force,
                "mergeable_state": status.mergeable_state if status else None,
            },
        )

        branch_deleted = False
        head_ref = status.head_ref if status else None
        if delete_branch and head_ref:
            branch_deleted = self._delete_merged_branch(pr_id, head_ref)

        return MergeOutcome(
            pr_id=pr_id,
            merged=True,
            branch_deleted=branch_deleted,
            response=response,
        )

    def _delete_merged_branch(self, pr_id: int, branch: str) -> bool:
        response = self.github_client.delete_branch(branch)
        message = github_error_message(response)
        if message is not None:
            logger.warning(
                "Could not delete merged branch",
                extra={"pr_id": pr_id, "branch": branch, "github_message": message},
            )
            return False

        logger.info(
            "Deleted merged branch",
            extra={"pr_id": pr_id, "branch": branch},
        )
        return True

    def deploy_branch(self, branch: str, description: str) -> Optional[JSONValue]:
        """Deploy a branch to stage and report its status.

        Creates the deployment, then posts a ``pending`` status followed by
        ``success``. Stops at the first status GitHub does not accept.

        Args:
            branch: Ref to deploy.
            description: Description for the deployment and its statuses.

        Returns:
            The created deployment payload, or None if GitHub did not
            return a deployment id or rejected a status.
        """
        deployment = self.github_client.create_deploy(branch, description)
        deploy_id = deployment.get("id") if isinstance(deployment, dict) else None
        if deploy_id is None:
            logger.error(
                "Deployment was not created",
                extra={"branch": branch, "response": deployment},
            )
            return None

        logger.info(
            "Deployment created",
            extra={"branch": branch, "deploy_id": deploy_id},
        )
        for state in (STATE_PENDING, STATE_SUCCESS):
            result = self.github_client.deploy_status(deploy_id, state, description)
            if not isinstance(result, dict) or "message" in result:
                logger.error(
                    "Deployment status was not created",
                    extra={
                        "branch": branch,
                        "deploy_id": deploy_id,
                        "state": state,
                        "github_message": github_error_message(result),
                    },
                )
                return None
        return deployment

    def latest_deployment(self) -> Optional[Deployment]:
        """Typed view of the most recent stage deployment, if any."""
        latest = self.github_client.get_latest_deployment()
        if not isinstance(latest, dict):
            return None
        return Deployment.model_validate(latest)
