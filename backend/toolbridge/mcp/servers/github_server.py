"""GitHub-backed MCP server: REST v3 plus the GraphQL endpoint."""

from __future__ import annotations

import base64
from typing import Any, Mapping

from pydantic import SecretStr

from ..adapters import render_path
from ..api_client import ApiClient, AuthenticatedApiClient, BackendProfile
from ..catalogue import (
    CatalogueEntry,
    array,
    boolean,
    graphql,
    number,
    obj,
    probe,
    rest,
    string,
    tool,
)
from ..errors import ArgumentValidationError
from ..schema import ToolCallResult
from ..server import MCPServer

SERVER_ID = "github"
DEFAULT_BASE_URL = "https://api.github.com"
API_VERSION = "2022-11-28"


def github_profile(base_url: str = DEFAULT_BASE_URL) -> BackendProfile:
    return BackendProfile(
        service="GitHub",
        base_url=base_url,
        headers={
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": "toolbridge-github-mcp",
        },
    )


REPO = {"owner": string("Repository owner"), "repo": string("Repository name")}
PAGE = {"per_page": number("Results per page (max 100)"), "page": number("Page number")}
ISSUE = {**REPO, "issue_number": number("Issue number")}
PULL = {**REPO, "pull_number": number("Pull request number")}
BRANCH = {**REPO, "branch": string("Branch name")}
PAGING = ("per_page", "page")


async def create_branch(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    """Read the source ref, then create the new ref from its sha.

    The two requests are not atomic; a failed second step leaves nothing to undo.
    """
    source = arguments.get("from_branch") or "main"
    ref = await client.get(
        render_path(
            "/repos/{owner}/{repo}/git/ref/heads/{from_branch*}",
            {**arguments, "from_branch": source},
        )
    )
    sha = None
    if isinstance(ref, Mapping):
        sha = (ref.get("object") or {}).get("sha")
    if not sha:
        raise ArgumentValidationError("from_branch", f"Could not resolve sha for branch {source}")
    created = await client.post(
        render_path("/repos/{owner}/{repo}/git/refs", arguments),
        {"ref": f"refs/heads/{arguments['branch']}", "sha": sha},
    )
    return ToolCallResult.from_payload(created, empty_message="Branch created")


async def read_file(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    """Fetch a file through the contents API and return it decoded."""
    path = str(arguments["path"]).lstrip("/")
    payload = await client.get(
        render_path("/repos/{owner}/{repo}/contents/{path*}", {**arguments, "path": path}),
        {"ref": arguments.get("ref")},
    )
    if not isinstance(payload, Mapping) or payload.get("type") != "file":
        raise ArgumentValidationError("path", f"{path} is not a file")
    raw_content = payload.get("content")
    if not isinstance(raw_content, str):
        raise ArgumentValidationError("path", f"{path} has no inline content")
    if payload.get("encoding") != "base64":
        raise ArgumentValidationError("path", f"unsupported encoding {payload.get('encoding')}")
    decoded = base64.b64decode(raw_content).decode("utf-8", errors="replace")
    return ToolCallResult.text(decoded)


CATALOGUE: list[CatalogueEntry] = [
    # repositories
    rest(
        "github_list_repos",
        "List repositories for authenticated user or organization",
        "GET",
        "/orgs/{org}/repos",
        fallback_path="/user/repos",
        properties={
            "org": string("Organization login; omit for the authenticated user"),
            "type": string(enum=["all", "owner", "public", "private", "member"]),
            "sort": string(),
            **PAGE,
        },
        query=("type", "sort", *PAGING),
    ),
    rest("github_get_repo", "Get repository details", "GET", "/repos/{owner}/{repo}", properties=REPO),
    rest(
        "github_create_repo",
        "Create a new repository",
        "POST",
        "/orgs/{org}/repos",
        fallback_path="/user/repos",
        properties={
            "name": string(),
            "description": string(),
            "private": boolean(),
            "auto_init": boolean(),
            "gitignore_template": string(),
            "license_template": string(),
            "org": string(),
        },
        required=["name"],
        body=("name", "description", "private", "auto_init", "gitignore_template", "license_template"),
    ),
    rest(
        "github_update_repo",
        "Update repository settings",
        "PATCH",
        "/repos/{owner}/{repo}",
        properties={
            **REPO,
            "name": string(),
            "description": string(),
            "private": boolean(),
            "has_issues": boolean(),
            "has_projects": boolean(),
            "has_wiki": boolean(),
        },
        body=("name", "description", "private", "has_issues", "has_projects", "has_wiki"),
    ),
    rest(
        "github_delete_repo",
        "Delete a repository",
        "DELETE",
        "/repos/{owner}/{repo}",
        properties=REPO,
        message="Repository deleted successfully",
    ),
    rest("github_list_repo_topics", "List repository topics", "GET", "/repos/{owner}/{repo}/topics", properties=REPO),
    rest(
        "github_replace_repo_topics",
        "Replace all repository topics",
        "PUT",
        "/repos/{owner}/{repo}/topics",
        properties={**REPO, "names": array()},
        required=["names"],
        body=("names",),
    ),
    rest(
        "github_list_repo_languages",
        "List programming languages used in repository",
        "GET",
        "/repos/{owner}/{repo}/languages",
        properties=REPO,
    ),
    rest(
        "github_list_repo_tags",
        "List repository tags",
        "GET",
        "/repos/{owner}/{repo}/tags",
        properties={**REPO, **PAGE},
        query=PAGING,
    ),
    rest(
        "github_transfer_repo",
        "Transfer repository to another user/org",
        "POST",
        "/repos/{owner}/{repo}/transfer",
        properties={**REPO, "new_owner": string()},
        required=["new_owner"],
        body=("new_owner",),
    ),
    rest(
        "github_enable_vulnerability_alerts",
        "Enable vulnerability alerts",
        "PUT",
        "/repos/{owner}/{repo}/vulnerability-alerts",
        properties=REPO,
        message="Vulnerability alerts enabled",
    ),
    rest(
        "github_disable_vulnerability_alerts",
        "Disable vulnerability alerts",
        "DELETE",
        "/repos/{owner}/{repo}/vulnerability-alerts",
        properties=REPO,
        message="Vulnerability alerts disabled",
    ),
    rest(
        "github_get_repo_readme",
        "Get repository README",
        "GET",
        "/repos/{owner}/{repo}/readme",
        properties={**REPO, "ref": string()},
        query=("ref",),
    ),
    rest(
        "github_get_repo_community_profile",
        "Get community profile metrics",
        "GET",
        "/repos/{owner}/{repo}/community/profile",
        properties=REPO,
    ),
    rest(
        "github_list_repo_contributors",
        "List repository contributors",
        "GET",
        "/repos/{owner}/{repo}/contributors",
        properties={**REPO, "anon": boolean(), **PAGE},
        query=("anon", *PAGING),
    ),
    # branches
    rest(
        "github_list_branches",
        "List repository branches",
        "GET",
        "/repos/{owner}/{repo}/branches",
        properties={**REPO, "protected": boolean(), **PAGE},
        query=("protected", *PAGING),
    ),
    rest("github_get_branch", "Get branch details", "GET", "/repos/{owner}/{repo}/branches/{branch}", properties=BRANCH),
    tool(
        "github_create_branch",
        "Create a new branch from an existing one (defaults to main)",
        create_branch,
        properties={**BRANCH, "from_branch": string("Source branch, defaults to main")},
        required=["owner", "repo", "branch"],
    ),
    rest(
        "github_delete_branch",
        "Delete a branch",
        "DELETE",
        "/repos/{owner}/{repo}/git/refs/heads/{branch*}",
        properties=BRANCH,
        message="Branch deleted successfully",
    ),
    rest(
        "github_merge_branch",
        "Merge a branch",
        "POST",
        "/repos/{owner}/{repo}/merges",
        properties={**REPO, "base": string(), "head": string(), "commit_message": string()},
        required=["base", "head"],
        body=("base", "head", "commit_message"),
    ),
    rest(
        "github_rename_branch",
        "Rename a branch",
        "POST",
        "/repos/{owner}/{repo}/branches/{branch}/rename",
        properties={**BRANCH, "new_name": string()},
        required=["new_name"],
        body=("new_name",),
    ),
    rest(
        "github_get_branch_protection",
        "Get branch protection rules",
        "GET",
        "/repos/{owner}/{repo}/branches/{branch}/protection",
        properties=BRANCH,
    ),
    rest(
        "github_update_branch_protection",
        "Update branch protection rules",
        "PUT",
        "/repos/{owner}/{repo}/branches/{branch}/protection",
        properties={
            **BRANCH,
            "required_status_checks": obj(),
            "enforce_admins": boolean(),
            "required_pull_request_reviews": obj(),
            "restrictions": obj(),
        },
        body=("required_status_checks", "enforce_admins", "required_pull_request_reviews", "restrictions"),
    ),
    rest(
        "github_delete_branch_protection",
        "Remove branch protection",
        "DELETE",
        "/repos/{owner}/{repo}/branches/{branch}/protection",
        properties=BRANCH,
        message="Branch protection removed",
    ),
    rest(
        "github_set_admin_enforcement",
        "Enable admin enforcement",
        "POST",
        "/repos/{owner}/{repo}/branches/{branch}/protection/enforce_admins",
        properties=BRANCH,
        static_body={},
    ),
    # commits
    rest(
        "github_list_commits",
        "List commits",
        "GET",
        "/repos/{owner}/{repo}/commits",
        properties={
            **REPO,
            "sha": string(),
            "path": string(),
            "author": string(),
            "since": string(),
            "until": string(),
            **PAGE,
        },
        query=("sha", "path", "author", "since", "until", *PAGING),
    ),
    rest(
        "github_get_commit",
        "Get commit details",
        "GET",
        "/repos/{owner}/{repo}/commits/{ref}",
        properties={**REPO, "ref": string()},
    ),
    rest(
        "github_compare_commits",
        "Compare two commits",
        "GET",
        "/repos/{owner}/{repo}/compare/{base}...{head}",
        properties={**REPO, "base": string(), "head": string()},
    ),
    rest(
        "github_create_commit_comment",
        "Create commit comment",
        "POST",
        "/repos/{owner}/{repo}/commits/{commit_sha}/comments",
        properties={**REPO, "commit_sha": string(), "body": string(), "path": string(), "position": number()},
        required=["body"],
        body=("body", "path", "position"),
    ),
    rest(
        "github_get_commit_status",
        "Get combined commit status",
        "GET",
        "/repos/{owner}/{repo}/commits/{ref}/status",
        properties={**REPO, "ref": string()},
    ),
    rest(
        "github_create_commit_status",
        "Create commit status",
        "POST",
        "/repos/{owner}/{repo}/statuses/{sha}",
        properties={
            **REPO,
            "sha": string(),
            "state": string(enum=["error", "failure", "pending", "success"]),
            "target_url": string(),
            "description": string(),
            "context": string(),
        },
        required=["state"],
        body=("state", "target_url", "description", "context"),
    ),
    # issues
    rest(
        "github_list_issues",
        "List issues",
        "GET",
        "/repos/{owner}/{repo}/issues",
        properties={
            **REPO,
            "state": string(enum=["open", "closed", "all"]),
            "labels": array(),
            "sort": string(),
            "direction": string(),
            "since": string(),
            **PAGE,
        },
        query=("state", "labels", "sort", "direction", "since", *PAGING),
    ),
    rest(
        "github_get_issue",
        "Get issue details",
        "GET",
        "/repos/{owner}/{repo}/issues/{issue_number}",
        properties=ISSUE,
    ),
    rest(
        "github_create_issue",
        "Create an issue",
        "POST",
        "/repos/{owner}/{repo}/issues",
        properties={
            **REPO,
            "title": string(),
            "body": string(),
            "assignees": array(),
            "milestone": number(),
            "labels": array(),
        },
        required=["title"],
        body=("title", "body", "assignees", "milestone", "labels"),
    ),
    rest(
        "github_update_issue",
        "Update an issue",
        "PATCH",
        "/repos/{owner}/{repo}/issues/{issue_number}",
        properties={
            **ISSUE,
            "title": string(),
            "body": string(),
            "state": string(enum=["open", "closed"]),
            "assignees": array(),
            "labels": array(),
        },
        body=("title", "body", "state", "assignees", "labels"),
    ),
    rest(
        "github_lock_issue",
        "Lock an issue",
        "PUT",
        "/repos/{owner}/{repo}/issues/{issue_number}/lock",
        properties={**ISSUE, "lock_reason": string(enum=["off-topic", "too heated", "resolved", "spam"])},
        body=("lock_reason",),
        message="Issue locked successfully",
    ),
    rest(
        "github_unlock_issue",
        "Unlock an issue",
        "DELETE",
        "/repos/{owner}/{repo}/issues/{issue_number}/lock",
        properties=ISSUE,
        message="Issue unlocked successfully",
    ),
    rest(
        "github_add_assignees",
        "Add assignees to issue",
        "POST",
        "/repos/{owner}/{repo}/issues/{issue_number}/assignees",
        properties={**ISSUE, "assignees": array()},
        required=["assignees"],
        body=("assignees",),
    ),
    rest(
        "github_add_labels",
        "Add labels to issue",
        "POST",
        "/repos/{owner}/{repo}/issues/{issue_number}/labels",
        properties={**ISSUE, "labels": array()},
        required=["labels"],
        body=("labels",),
    ),
    rest(
        "github_remove_label",
        "Remove label from issue",
        "DELETE",
        "/repos/{owner}/{repo}/issues/{issue_number}/labels/{name}",
        properties={**ISSUE, "name": string()},
        message="Label removed successfully",
    ),
    rest(
        "github_list_issue_comments",
        "List issue comments",
        "GET",
        "/repos/{owner}/{repo}/issues/{issue_number}/comments",
        properties={**ISSUE, "since": string(), **PAGE},
        query=("since", *PAGING),
    ),
    rest(
        "github_create_issue_comment",
        "Create issue comment",
        "POST",
        "/repos/{owner}/{repo}/issues/{issue_number}/comments",
        properties={**ISSUE, "body": string()},
        required=["body"],
        body=("body",),
    ),
    rest(
        "github_delete_issue_comment",
        "Delete issue comment",
        "DELETE",
        "/repos/{owner}/{repo}/issues/comments/{comment_id}",
        properties={**REPO, "comment_id": number()},
        message="Comment deleted successfully",
    ),
    rest(
        "github_list_labels",
        "List repository labels",
        "GET",
        "/repos/{owner}/{repo}/labels",
        properties={**REPO, **PAGE},
        query=PAGING,
    ),
    rest(
        "github_create_label",
        "Create a label",
        "POST",
        "/repos/{owner}/{repo}/labels",
        properties={**REPO, "name": string(), "color": string("Hex color without #"), "description": string()},
        required=["name", "color"],
        body=("name", "color", "description"),
    ),
    # pull requests
    rest(
        "github_list_pull_requests",
        "List pull requests",
        "GET",
        "/repos/{owner}/{repo}/pulls",
        properties={
            **REPO,
            "state": string(enum=["open", "closed", "all"]),
            "head": string(),
            "base": string(),
            "sort": string(),
            "direction": string(),
            **PAGE,
        },
        query=("state", "head", "base", "sort", "direction", *PAGING),
    ),
    rest(
        "github_get_pull_request",
        "Get pull request details",
        "GET",
        "/repos/{owner}/{repo}/pulls/{pull_number}",
        properties=PULL,
    ),
    rest(
        "github_create_pull_request",
        "Create a pull request",
        "POST",
        "/repos/{owner}/{repo}/pulls",
        properties={
            **REPO,
            "title": string(),
            "head": string(),
            "base": string(),
            "body": string(),
            "draft": boolean(),
            "maintainer_can_modify": boolean(),
        },
        required=["title", "head", "base"],
        body=("title", "head", "base", "body", "draft", "maintainer_can_modify"),
    ),
    rest(
        "github_update_pull_request",
        "Update a pull request",
        "PATCH",
        "/repos/{owner}/{repo}/pulls/{pull_number}",
        properties={
            **PULL,
            "title": string(),
            "body": string(),
            "state": string(enum=["open", "closed"]),
            "base": string(),
        },
        body=("title", "body", "state", "base"),
    ),
    rest(
        "github_merge_pull_request",
        "Merge a pull request",
        "PUT",
        "/repos/{owner}/{repo}/pulls/{pull_number}/merge",
        properties={
            **PULL,
            "commit_title": string(),
            "commit_message": string(),
            "merge_method": string(enum=["merge", "squash", "rebase"]),
        },
        body=("commit_title", "commit_message", "merge_method"),
    ),
    probe(
        "github_get_pull_request_merge_status",
        "Check if a pull request has been merged",
        "/repos/{owner}/{repo}/pulls/{pull_number}/merge",
        properties=PULL,
        found="Pull request has been merged",
        missing="Pull request has not been merged",
    ),
    rest(
        "github_list_pull_request_files",
        "List pull request files",
        "GET",
        "/repos/{owner}/{repo}/pulls/{pull_number}/files",
        properties={**PULL, **PAGE},
        query=PAGING,
    ),
    rest(
        "github_list_pull_request_reviews",
        "List pull request reviews",
        "GET",
        "/repos/{owner}/{repo}/pulls/{pull_number}/reviews",
        properties={**PULL, **PAGE},
        query=PAGING,
    ),
    rest(
        "github_create_pull_request_review",
        "Create a pull request review",
        "POST",
        "/repos/{owner}/{repo}/pulls/{pull_number}/reviews",
        properties={
            **PULL,
            "body": string(),
            "event": string(enum=["APPROVE", "REQUEST_CHANGES", "COMMENT"]),
            "comments": array(items={"type": "object"}),
        },
        body=("body", "event", "comments"),
    ),
    rest(
        "github_request_pull_request_reviewers",
        "Request reviewers for a pull request",
        "POST",
        "/repos/{owner}/{repo}/pulls/{pull_number}/requested_reviewers",
        properties={**PULL, "reviewers": array(), "team_reviewers": array()},
        body=("reviewers", "team_reviewers"),
    ),
    rest(
        "github_get_pull_request_diff",
        "Get pull request diff",
        "GET",
        "/repos/{owner}/{repo}/pulls/{pull_number}",
        properties=PULL,
        accept="application/vnd.github.v3.diff",
    ),
    rest(
        "github_get_pull_request_patch",
        "Get pull request patch",
        "GET",
        "/repos/{owner}/{repo}/pulls/{pull_number}",
        properties=PULL,
        accept="application/vnd.github.v3.patch",
    ),
    # actions
    rest(
        "github_list_workflows",
        "List repository workflows",
        "GET",
        "/repos/{owner}/{repo}/actions/workflows",
        properties={**REPO, **PAGE},
        query=PAGING,
    ),
    rest(
        "github_create_workflow_dispatch",
        "Trigger a workflow_dispatch event",
        "POST",
        "/repos/{owner}/{repo}/actions/workflows/{workflow_id}/dispatches",
        properties={**REPO, "workflow_id": string("Workflow id or file name"), "ref": string(), "inputs": obj()},
        required=["ref"],
        body=("ref", "inputs"),
        message="Workflow dispatch triggered successfully",
    ),
    rest(
        "github_list_workflow_runs",
        "List workflow runs",
        "GET",
        "/repos/{owner}/{repo}/actions/runs",
        properties={
            **REPO,
            "actor": string(),
            "branch": string(),
            "event": string(),
            "status": string(),
            **PAGE,
        },
        query=("actor", "branch", "event", "status", *PAGING),
    ),
    rest(
        "github_get_workflow_run",
        "Get a workflow run",
        "GET",
        "/repos/{owner}/{repo}/actions/runs/{run_id}",
        properties={**REPO, "run_id": number()},
    ),
    rest(
        "github_cancel_workflow_run",
        "Cancel a workflow run",
        "POST",
        "/repos/{owner}/{repo}/actions/runs/{run_id}/cancel",
        properties={**REPO, "run_id": number()},
        message="Workflow run cancelled",
    ),
    rest(
        "github_rerun_workflow",
        "Re-run a workflow",
        "POST",
        "/repos/{owner}/{repo}/actions/runs/{run_id}/rerun",
        properties={**REPO, "run_id": number()},
        message="Workflow re-run triggered",
    ),
    rest(
        "github_create_or_update_repo_secret",
        "Create or update an encrypted repository secret",
        "PUT",
        "/repos/{owner}/{repo}/actions/secrets/{secret_name}",
        properties={**REPO, "secret_name": string(), "encrypted_value": string(), "key_id": string()},
        required=["encrypted_value"],
        body=("encrypted_value", "key_id"),
        message="Secret created/updated successfully",
    ),
    # releases
    rest(
        "github_list_releases",
        "List releases",
        "GET",
        "/repos/{owner}/{repo}/releases",
        properties={**REPO, **PAGE},
        query=PAGING,
    ),
    rest(
        "github_get_latest_release",
        "Get the latest release",
        "GET",
        "/repos/{owner}/{repo}/releases/latest",
        properties=REPO,
    ),
    rest(
        "github_create_release",
        "Create a release",
        "POST",
        "/repos/{owner}/{repo}/releases",
        properties={
            **REPO,
            "tag_name": string(),
            "target_commitish": string(),
            "name": string(),
            "body": string(),
            "draft": boolean(),
            "prerelease": boolean(),
            "generate_release_notes": boolean(),
        },
        required=["tag_name"],
        body=("tag_name", "target_commitish", "name", "body", "draft", "prerelease", "generate_release_notes"),
    ),
    rest(
        "github_delete_release",
        "Delete a release",
        "DELETE",
        "/repos/{owner}/{repo}/releases/{release_id}",
        properties={**REPO, "release_id": number()},
        message="Release deleted successfully",
    ),
    # contents
    rest(
        "github_get_content",
        "Get file or directory contents",
        "GET",
        "/repos/{owner}/{repo}/contents/{path*}",
        properties={**REPO, "path": string(), "ref": string()},
        query=("ref",),
    ),
    tool(
        "github_read_file",
        "Read a repository file and return its decoded text",
        read_file,
        properties={**REPO, "path": string("Path to the file to read"), "ref": string()},
        required=["owner", "repo", "path"],
    ),
    rest(
        "github_create_or_update_file",
        "Create or update a file (content must be base64 encoded)",
        "PUT",
        "/repos/{owner}/{repo}/contents/{path*}",
        properties={
            **REPO,
            "path": string(),
            "message": string(),
            "content": string("Base64 encoded file content"),
            "sha": string("Blob sha of the file being replaced"),
            "branch": string(),
        },
        required=["message", "content"],
        body=("message", "content", "sha", "branch"),
    ),
    rest(
        "github_delete_file",
        "Delete a file",
        "DELETE",
        "/repos/{owner}/{repo}/contents/{path*}",
        properties={**REPO, "path": string(), "message": string(), "sha": string(), "branch": string()},
        required=["message", "sha"],
        body=("message", "sha", "branch"),
    ),
    rest(
        "github_get_ref",
        "Get a git reference",
        "GET",
        "/repos/{owner}/{repo}/git/ref/{ref*}",
        properties={**REPO, "ref": string("Reference such as heads/main")},
    ),
    rest(
        "github_get_tree",
        "Get a git tree",
        "GET",
        "/repos/{owner}/{repo}/git/trees/{tree_sha}",
        properties={**REPO, "tree_sha": string(), "recursive": boolean()},
        query=("recursive",),
    ),
    # collaborators
    rest(
        "github_list_collaborators",
        "List repository collaborators",
        "GET",
        "/repos/{owner}/{repo}/collaborators",
        properties={**REPO, **PAGE},
        query=PAGING,
    ),
    probe(
        "github_check_collaborator",
        "Check if a user is a repository collaborator",
        "/repos/{owner}/{repo}/collaborators/{username}",
        properties={**REPO, "username": string()},
        found="User is a collaborator",
        missing="User is not a collaborator",
    ),
    rest(
        "github_add_collaborator",
        "Add a repository collaborator",
        "PUT",
        "/repos/{owner}/{repo}/collaborators/{username}",
        properties={
            **REPO,
            "username": string(),
            "permission": string(enum=["pull", "triage", "push", "maintain", "admin"]),
        },
        body=("permission",),
        message="Collaborator added successfully",
    ),
    rest(
        "github_remove_collaborator",
        "Remove a repository collaborator",
        "DELETE",
        "/repos/{owner}/{repo}/collaborators/{username}",
        properties={**REPO, "username": string()},
        message="Collaborator removed successfully",
    ),
    # webhooks
    rest(
        "github_list_webhooks",
        "List repository webhooks",
        "GET",
        "/repos/{owner}/{repo}/hooks",
        properties={**REPO, **PAGE},
        query=PAGING,
    ),
    rest(
        "github_create_webhook",
        "Create a repository webhook",
        "POST",
        "/repos/{owner}/{repo}/hooks",
        properties={**REPO, "config": obj("url, content_type, secret"), "events": array(), "active": boolean()},
        required=["config"],
        body=("config", "events", "active"),
        static_body={"name": "web"},
    ),
    rest(
        "github_delete_webhook",
        "Delete a repository webhook",
        "DELETE",
        "/repos/{owner}/{repo}/hooks/{hook_id}",
        properties={**REPO, "hook_id": number()},
        message="Webhook deleted successfully",
    ),
    rest(
        "github_ping_webhook",
        "Ping a repository webhook",
        "POST",
        "/repos/{owner}/{repo}/hooks/{hook_id}/pings",
        properties={**REPO, "hook_id": number()},
        message="Webhook pinged",
    ),
    # organizations
    rest("github_list_user_orgs", "List organizations for the authenticated user", "GET", "/user/orgs"),
    rest("github_get_org", "Get an organization", "GET", "/orgs/{org}", properties={"org": string()}),
    rest(
        "github_list_org_members",
        "List organization members",
        "GET",
        "/orgs/{org}/members",
        properties={"org": string(), "role": string(enum=["all", "admin", "member"]), **PAGE},
        query=("role", *PAGING),
    ),
    probe(
        "github_check_org_membership",
        "Check organization membership",
        "/orgs/{org}/members/{username}",
        properties={"org": string(), "username": string()},
        found="User is a member",
        missing="User is not a member",
    ),
    rest(
        "github_list_org_teams",
        "List organization teams",
        "GET",
        "/orgs/{org}/teams",
        properties={"org": string(), **PAGE},
        query=PAGING,
    ),
    rest(
        "github_create_team",
        "Create a team",
        "POST",
        "/orgs/{org}/teams",
        properties={
            "org": string(),
            "name": string(),
            "description": string(),
            "privacy": string(enum=["secret", "closed"]),
        },
        required=["name"],
        body=("name", "description", "privacy"),
    ),
    # search
    rest(
        "github_search_repositories",
        "Search repositories",
        "GET",
        "/search/repositories",
        properties={"q": string("GitHub search query"), "sort": string(), "order": string(enum=["asc", "desc"]), **PAGE},
        required=["q"],
        query=("q", "sort", "order", *PAGING),
    ),
    rest(
        "github_search_code",
        "Search code",
        "GET",
        "/search/code",
        properties={"q": string("GitHub search query"), "sort": string(), "order": string(enum=["asc", "desc"]), **PAGE},
        required=["q"],
        query=("q", "sort", "order", *PAGING),
    ),
    rest(
        "github_search_issues",
        "Search issues and pull requests",
        "GET",
        "/search/issues",
        properties={"q": string("GitHub search query"), "sort": string(), "order": string(enum=["asc", "desc"]), **PAGE},
        required=["q"],
        query=("q", "sort", "order", *PAGING),
    ),
    rest(
        "github_search_users",
        "Search users",
        "GET",
        "/search/users",
        properties={"q": string("GitHub search query"), "sort": string(), "order": string(enum=["asc", "desc"]), **PAGE},
        required=["q"],
        query=("q", "sort", "order", *PAGING),
    ),
    # users
    rest("github_get_authenticated_user", "Get the authenticated user", "GET", "/user"),
    rest("github_get_user", "Get a user", "GET", "/users/{username}", properties={"username": string()}),
    probe(
        "github_check_following",
        "Check if a user follows another user",
        "/users/{username}/following/{target_user}",
        properties={"username": string(), "target_user": string()},
        found="User is following target user",
        missing="User is not following target user",
    ),
    # gists
    rest(
        "github_list_gists",
        "List gists for the authenticated user",
        "GET",
        "/gists",
        properties={"since": string(), **PAGE},
        query=("since", *PAGING),
    ),
    rest("github_get_gist", "Get a gist", "GET", "/gists/{gist_id}", properties={"gist_id": string()}),
    rest(
        "github_create_gist",
        "Create a gist",
        "POST",
        "/gists",
        properties={"description": string(), "public": boolean(), "files": obj("Map of filename to {content}")},
        required=["files"],
        body=("description", "public", "files"),
    ),
    rest(
        "github_delete_gist",
        "Delete a gist",
        "DELETE",
        "/gists/{gist_id}",
        properties={"gist_id": string()},
        message="Gist deleted successfully",
    ),
    probe(
        "github_check_gist_star",
        "Check if a gist is starred",
        "/gists/{gist_id}/star",
        properties={"gist_id": string()},
        found="Gist is starred",
        missing="Gist is not starred",
    ),
    # milestones
    rest(
        "github_list_milestones",
        "List milestones",
        "GET",
        "/repos/{owner}/{repo}/milestones",
        properties={**REPO, "state": string(enum=["open", "closed", "all"]), **PAGE},
        query=("state", *PAGING),
    ),
    rest(
        "github_create_milestone",
        "Create a milestone",
        "POST",
        "/repos/{owner}/{repo}/milestones",
        properties={
            **REPO,
            "title": string(),
            "state": string(enum=["open", "closed"]),
            "description": string(),
            "due_on": string("ISO 8601 timestamp"),
        },
        required=["title"],
        body=("title", "state", "description", "due_on"),
    ),
    # projects v2 (GraphQL)
    graphql(
        "github_list_org_projects_v2",
        "List organization projects (v2)",
        "query($org: String!) { organization(login: $org) { projectsV2(first: 20) { nodes { id title } } } }",
        properties={"org": string()},
        required=["org"],
    ),
    graphql(
        "github_get_project_v2",
        "Get a project (v2) by node id",
        "query($project_id: ID!) { node(id: $project_id) { ... on ProjectV2 { id title shortDescription } } }",
        properties={"project_id": string()},
        required=["project_id"],
    ),
    graphql(
        "github_add_project_item",
        "Add an issue or pull request to a project (v2)",
        "mutation($project_id: ID!, $content_id: ID!) {"
        " addProjectV2ItemById(input: {projectId: $project_id, contentId: $content_id}) { item { id } } }",
        properties={"project_id": string(), "content_id": string("Node id of the issue or pull request")},
        required=["project_id", "content_id"],
        message="Item added to project",
    ),
    graphql(
        "github_list_discussion_categories",
        "List discussion categories",
        "query($owner: String!, $repo: String!) { repository(owner: $owner, name: $repo)"
        " { discussionCategories(first: 25) { nodes { id name } } } }",
        properties=REPO,
        required=["owner", "repo"],
    ),
    # security
    rest(
        "github_list_code_scanning_alerts",
        "List code scanning alerts",
        "GET",
        "/repos/{owner}/{repo}/code-scanning/alerts",
        properties={**REPO, "state": string(enum=["open", "closed", "dismissed", "fixed"])},
        query=("state",),
    ),
    rest(
        "github_update_code_scanning_alert",
        "Update code scanning alert",
        "PATCH",
        "/repos/{owner}/{repo}/code-scanning/alerts/{alert_number}",
        properties={**REPO, "alert_number": number(), "state": string(enum=["dismissed", "open"]), "dismissed_reason": string()},
        required=["state"],
        body=("state", "dismissed_reason"),
    ),
    rest(
        "github_list_secret_scanning_alerts",
        "List secret scanning alerts",
        "GET",
        "/repos/{owner}/{repo}/secret-scanning/alerts",
        properties={**REPO, "state": string(enum=["open", "resolved"])},
        query=("state",),
    ),
]


class GitHubMCPServer(MCPServer):
    """GitHub integration implemented via MCP."""

    def __init__(self, client: ApiClient):
        super().__init__(SERVER_ID, CATALOGUE, client, version="2.0.0")

    @classmethod
    def from_token(
        cls,
        token: SecretStr | str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> "GitHubMCPServer":
        client = AuthenticatedApiClient(github_profile(base_url), token, timeout=timeout)
        return cls(client)
