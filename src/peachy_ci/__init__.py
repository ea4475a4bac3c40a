"""Peachy CI: GitHub pull request merging and stage deployments for CI jobs.

This package provides:
- A synchronous GitHub REST client scoped to one repository
- Merge-eligibility checks for pull requests
- Merge and deploy flows used by the CI jobs
- A command-line entry point
"""
