"""Typed views over the GitHub response fields Peachy CI reads.

The client returns raw decoded JSON. These models are used by callers that
want typed access to the handful of fields the CI flows depend on. Unknown
fields are ignored.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class MergeableState(str, Enum):
    """GitHub's computed merge-readiness of a pull request.

    Attributes:
        CLEAN: Required checks passed, no merge conflicts.
        UNSTABLE: Checks running or failing, no merge conflicts.
        DIRTY: Merge conflicts.
    """

    CLEAN = "clean"
    UNSTABLE = "unstable"
    DIRTY = "dirty"
    UNKNOWN = "unknown"
    BLOCKED = "blocked"
    BEHIND = "behind"
    HAS_HOOKS = "has_hooks"
    DRAFT = "draft"


class PullRequestStatus(BaseModel):
    """Merge-relevant fields of a pull request payload.

    Attributes:
        number: Pull request number.
        state: ``open`` or ``closed``.
        mergeable: Whether GitHub can merge the PR. None while GitHub is
            still computing it.
        mergeable_state: Raw mergeable state string.
        head_ref: Name of the branch the PR merges from.
    """

    model_config = ConfigDict(extra="ignore")

    number: int
    state: str = ""
    mergeable: Optional[bool] = None
    mergeable_state: Optional[str] = None
    head_ref: Optional[str] = None

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "PullRequestStatus":
        """Build from a GitHub pull request payload."""
        head = data.get("head") or {}
        return cls(
            number=data["number"],
            state=data.get("state", ""),
            mergeable=data.get("mergeable"),
            mergeable_state=data.get("mergeable_state"),
            head_ref=head.get("ref"),
        )


class Deployment(BaseModel):
    """A GitHub deployment."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., gt=0)
    ref: str
    environment: str = ""
    description: Optional[str] = None
