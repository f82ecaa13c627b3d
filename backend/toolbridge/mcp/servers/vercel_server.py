"""Vercel-backed MCP server."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import SecretStr

from ..adapters import render_path
from ..api_client import ApiClient, AuthenticatedApiClient, BackendProfile
from ..catalogue import (
    CatalogueEntry,
    array,
    boolean,
    number,
    obj,
    rest,
    string,
    tool,
)
from ..errors import ApiError
from ..schema import ToolCallResult
from ..server import MCPServer

SERVER_ID = "vercel"
DEFAULT_BASE_URL = "https://api.vercel.com"


def vercel_profile(base_url: str = DEFAULT_BASE_URL, team_id: str | None = None) -> BackendProfile:
    """Every request is scoped to ``team_id`` when one is configured."""
    return BackendProfile(
        service="Vercel",
        base_url=base_url,
        default_params={"teamId": team_id} if team_id else {},
    )


PROJECT = {"projectId": string("Project id or name")}
DEPLOYMENT = {"deploymentId": string("Deployment id or URL")}
DOMAIN = {"domain": string("Domain name")}
TIME_RANGE = {"from": string("Start timestamp"), "to": string("End timestamp")}
TARGET = string(enum=["production", "preview", "development"])


async def bulk_create_env_vars(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    """Create each variable in turn; one failure does not stop the rest.

    Each item reports its own outcome so the caller can retry just the failures.
    """
    path = render_path("/v10/projects/{projectId}/env", arguments)
    results: list[dict[str, Any]] = []
    for variable in arguments["variables"]:
        key = variable.get("key") if isinstance(variable, Mapping) else None
        try:
            data = await client.post(path, variable)
        except ApiError as exc:
            results.append({"success": False, "key": key, "error": str(exc)})
        else:
            results.append({"success": True, "key": key, "data": data})
    return ToolCallResult.from_payload({"results": results}, empty_message="No variables created")


CATALOGUE: list[CatalogueEntry] = [
    # projects
    rest(
        "vercel_list_projects",
        "List all projects",
        "GET",
        "/v9/projects",
        properties={
            "limit": number("Maximum number of projects"),
            "since": number(),
            "until": number(),
            "search": string(),
            "teamId": string("Team scope, overrides the configured team"),
        },
        query=("limit", "since", "until", "search", "teamId"),
    ),
    rest("vercel_get_project", "Get project details", "GET", "/v9/projects/{projectId}", properties=PROJECT),
    rest(
        "vercel_create_project",
        "Create a new project",
        "POST",
        "/v9/projects",
        properties={
            "name": string(),
            "framework": string(),
            "gitRepository": obj("{type, repo}"),
            "buildCommand": string(),
            "outputDirectory": string(),
            "rootDirectory": string(),
        },
        required=["name"],
        body_mode="remainder",
    ),
    rest(
        "vercel_update_project",
        "Update project settings",
        "PATCH",
        "/v9/projects/{projectId}",
        properties={
            **PROJECT,
            "name": string(),
            "framework": string(),
            "buildCommand": string(),
            "devCommand": string(),
            "installCommand": string(),
            "outputDirectory": string(),
            "rootDirectory": string(),
        },
        body_mode="remainder",
    ),
    rest(
        "vercel_delete_project",
        "Delete a project",
        "DELETE",
        "/v9/projects/{projectId}",
        properties=PROJECT,
        message="Project deleted successfully",
    ),
    # deployments
    rest(
        "vercel_list_deployments",
        "List deployments",
        "GET",
        "/v6/deployments",
        properties={
            **PROJECT,
            "limit": number(),
            "state": string(enum=["BUILDING", "ERROR", "INITIALIZING", "QUEUED", "READY", "CANCELED"]),
            "target": TARGET,
        },
        required=["projectId"],
        query=("projectId", "limit", "state", "target"),
    ),
    rest(
        "vercel_get_deployment",
        "Get deployment details",
        "GET",
        "/v13/deployments/{deploymentId}",
        properties=DEPLOYMENT,
    ),
    rest(
        "vercel_create_deployment",
        "Create a new deployment",
        "POST",
        "/v13/deployments",
        properties={
            "name": string(),
            "project": string(),
            "target": TARGET,
            "gitSource": obj("{type, ref, repoId}"),
            "files": array(items={"type": "object"}),
        },
        required=["name"],
        body_mode="remainder",
    ),
    rest(
        "vercel_cancel_deployment",
        "Cancel a running deployment",
        "PATCH",
        "/v12/deployments/{deploymentId}/cancel",
        properties=DEPLOYMENT,
    ),
    rest(
        "vercel_delete_deployment",
        "Delete a deployment",
        "DELETE",
        "/v13/deployments/{deploymentId}",
        properties=DEPLOYMENT,
        message="Deployment deleted successfully",
    ),
    rest(
        "vercel_get_deployment_events",
        "Get deployment build events",
        "GET",
        "/v3/deployments/{deploymentId}/events",
        properties=DEPLOYMENT,
    ),
    rest(
        "vercel_get_deployment_logs",
        "Get deployment runtime logs",
        "GET",
        "/v2/deployments/{deploymentId}/events",
        properties={**DEPLOYMENT, "limit": number(), "since": number()},
        query=("limit", "since"),
    ),
    rest(
        "vercel_redeploy",
        "Redeploy an existing deployment",
        "POST",
        "/v13/deployments/{deploymentId}/redeploy",
        properties={**DEPLOYMENT, "target": TARGET},
        body=("target",),
    ),
    rest(
        "vercel_promote_deployment",
        "Promote a deployment to production",
        "POST",
        "/v13/deployments/{deploymentId}/promote",
        properties=DEPLOYMENT,
    ),
    rest(
        "vercel_list_deployment_files",
        "List files of a deployment",
        "GET",
        "/v6/deployments/{deploymentId}/files",
        properties=DEPLOYMENT,
    ),
    rest(
        "vercel_get_deployment_file",
        "Get a single deployment file",
        "GET",
        "/v6/deployments/{deploymentId}/files/{fileId}",
        properties={**DEPLOYMENT, "fileId": string()},
    ),
    # environment variables
    rest(
        "vercel_list_env_vars",
        "List environment variables",
        "GET",
        "/v9/projects/{projectId}/env",
        properties={**PROJECT, "decrypt": boolean()},
        query=("decrypt",),
    ),
    rest(
        "vercel_create_env_var",
        "Create an environment variable",
        "POST",
        "/v10/projects/{projectId}/env",
        properties={
            **PROJECT,
            "key": string(),
            "value": string(),
            "target": array(items=TARGET),
            "type": string(enum=["plain", "secret", "encrypted", "sensitive", "system"]),
            "gitBranch": string(),
        },
        required=["key", "value", "target"],
        body_mode="remainder",
    ),
    rest(
        "vercel_update_env_var",
        "Update an environment variable",
        "PATCH",
        "/v9/projects/{projectId}/env/{envId}",
        properties={**PROJECT, "envId": string(), "value": string(), "target": array(items=TARGET)},
        body_mode="remainder",
    ),
    rest(
        "vercel_delete_env_var",
        "Delete an environment variable",
        "DELETE",
        "/v9/projects/{projectId}/env/{envId}",
        properties={**PROJECT, "envId": string()},
        message="Environment variable deleted successfully",
    ),
    tool(
        "vercel_bulk_create_env_vars",
        "Create multiple environment variables, reporting each outcome",
        bulk_create_env_vars,
        properties={
            **PROJECT,
            "variables": array("Items of {key, value, target, type}", items={"type": "object"}),
        },
        required=["projectId", "variables"],
    ),
    # domains
    rest(
        "vercel_list_domains",
        "List all domains",
        "GET",
        "/v5/domains",
        properties={"limit": number(), "teamId": string()},
        query=("limit", "teamId"),
    ),
    rest("vercel_get_domain", "Get domain information", "GET", "/v5/domains/{domain}", properties=DOMAIN),
    rest(
        "vercel_add_domain",
        "Add a domain to a project",
        "POST",
        "/v10/projects/{projectId}/domains",
        properties={**PROJECT, **DOMAIN, "redirect": string(), "gitBranch": string()},
        required=["domain"],
        body=("domain", "redirect", "gitBranch"),
        renames={"domain": "name"},
    ),
    rest(
        "vercel_remove_domain",
        "Remove a domain",
        "DELETE",
        "/v9/domains/{domain}",
        properties=DOMAIN,
        message="Domain removed successfully",
    ),
    rest(
        "vercel_verify_domain",
        "Verify domain ownership",
        "POST",
        "/v6/domains/{domain}/verify",
        properties=DOMAIN,
    ),
    rest(
        "vercel_list_dns_records",
        "List DNS records for a domain",
        "GET",
        "/v4/domains/{domain}/records",
        properties=DOMAIN,
    ),
    rest(
        "vercel_create_dns_record",
        "Create a DNS record",
        "POST",
        "/v2/domains/{domain}/records",
        properties={
            **DOMAIN,
            "name": string("Subdomain, empty for the apex"),
            "type": string(enum=["A", "AAAA", "ALIAS", "CAA", "CNAME", "MX", "SRV", "TXT", "NS"]),
            "value": string(),
            "ttl": number(),
            "mxPriority": number(),
        },
        required=["type", "value"],
        body_mode="remainder",
    ),
    rest(
        "vercel_delete_dns_record",
        "Delete a DNS record",
        "DELETE",
        "/v2/domains/{domain}/records/{recordId}",
        properties={**DOMAIN, "recordId": string()},
        message="DNS record deleted successfully",
    ),
    # aliases
    rest(
        "vercel_list_aliases",
        "List aliases",
        "GET",
        "/v4/aliases",
        properties={"projectId": string(), "limit": number()},
        query=("projectId", "limit"),
    ),
    rest(
        "vercel_assign_alias",
        "Assign an alias to a deployment",
        "POST",
        "/v2/deployments/{deploymentId}/aliases",
        properties={**DEPLOYMENT, "alias": string()},
        required=["alias"],
        body=("alias",),
    ),
    rest(
        "vercel_delete_alias",
        "Delete an alias",
        "DELETE",
        "/v2/aliases/{aliasId}",
        properties={"aliasId": string()},
        message="Alias deleted successfully",
    ),
    # teams
    rest("vercel_list_teams", "List teams", "GET", "/v2/teams"),
    rest("vercel_get_team", "Get team details", "GET", "/v2/teams/{teamId}", properties={"teamId": string()}),
    rest(
        "vercel_list_team_members",
        "List team members",
        "GET",
        "/v2/teams/{teamId}/members",
        properties={"teamId": string(), "limit": number()},
        query=("limit",),
    ),
    # edge config
    rest("vercel_list_edge_configs", "List edge configs", "GET", "/v1/edge-config"),
    rest(
        "vercel_create_edge_config",
        "Create an edge config",
        "POST",
        "/v1/edge-config",
        properties={"slug": string(), "items": obj()},
        required=["slug"],
        body_mode="remainder",
    ),
    rest(
        "vercel_get_edge_config_items",
        "Get edge config items",
        "GET",
        "/v1/edge-config/{edgeConfigId}/items",
        properties={"edgeConfigId": string()},
    ),
    rest(
        "vercel_update_edge_config_items",
        "Update edge config items",
        "PATCH",
        "/v1/edge-config/{edgeConfigId}/items",
        properties={
            "edgeConfigId": string(),
            "items": array("Items of {operation, key, value}", items={"type": "object"}),
        },
        required=["items"],
        body=("items",),
    ),
    # webhooks
    rest(
        "vercel_list_webhooks",
        "List webhooks",
        "GET",
        "/v1/webhooks",
        properties={"projectId": string()},
        query=("projectId",),
    ),
    rest(
        "vercel_create_webhook",
        "Create a webhook",
        "POST",
        "/v1/webhooks",
        properties={"url": string(), "events": array(), "projectIds": array()},
        required=["url", "events"],
        body_mode="remainder",
    ),
    rest(
        "vercel_delete_webhook",
        "Delete a webhook",
        "DELETE",
        "/v1/webhooks/{webhookId}",
        properties={"webhookId": string()},
        message="Webhook deleted successfully",
    ),
    # secrets
    rest("vercel_list_secrets", "List secrets", "GET", "/v3/secrets"),
    rest(
        "vercel_create_secret",
        "Create a secret",
        "POST",
        "/v3/secrets",
        properties={"name": string(), "value": string()},
        required=["name", "value"],
        body=("name", "value"),
    ),
    rest(
        "vercel_rename_secret",
        "Rename a secret",
        "PATCH",
        "/v2/secrets/{nameOrId}",
        properties={"nameOrId": string(), "newName": string()},
        required=["newName"],
        body=("newName",),
        renames={"newName": "name"},
    ),
    rest(
        "vercel_delete_secret",
        "Delete a secret",
        "DELETE",
        "/v2/secrets/{nameOrId}",
        properties={"nameOrId": string()},
        message="Secret deleted successfully",
    ),
    # checks
    rest(
        "vercel_list_checks",
        "List deployment checks",
        "GET",
        "/v1/deployments/{deploymentId}/checks",
        properties=DEPLOYMENT,
    ),
    rest(
        "vercel_create_check",
        "Create a deployment check",
        "POST",
        "/v1/deployments/{deploymentId}/checks",
        properties={**DEPLOYMENT, "name": string(), "blocking": boolean(), "detailsUrl": string()},
        required=["name", "blocking"],
        body_mode="remainder",
    ),
    rest(
        "vercel_update_check",
        "Update a deployment check",
        "PATCH",
        "/v1/deployments/{deploymentId}/checks/{checkId}",
        properties={
            **DEPLOYMENT,
            "checkId": string(),
            "status": string(enum=["running", "completed"]),
            "conclusion": string(enum=["canceled", "failed", "neutral", "succeeded", "skipped"]),
            "detailsUrl": string(),
        },
        body_mode="remainder",
    ),
    # analytics and monitoring
    rest(
        "vercel_get_project_analytics",
        "Get project analytics",
        "GET",
        "/v1/projects/{projectId}/analytics",
        properties={**PROJECT, **TIME_RANGE},
        query=("from", "to"),
    ),
    rest(
        "vercel_get_bandwidth_usage",
        "Get bandwidth usage",
        "GET",
        "/v1/analytics/{projectId}/bandwidth",
        properties={**PROJECT, **TIME_RANGE},
        query=("from", "to"),
    ),
    rest(
        "vercel_get_function_invocations",
        "Get serverless function invocation metrics",
        "GET",
        "/v1/analytics/{projectId}/functions",
        properties={**PROJECT, **TIME_RANGE},
        query=("from", "to"),
    ),
    rest(
        "vercel_get_cache_metrics",
        "Get edge cache metrics",
        "GET",
        "/v1/analytics/{projectId}/cache",
        properties={**PROJECT, **TIME_RANGE},
        query=("from", "to"),
    ),
    rest(
        "vercel_get_error_rate",
        "Get error rate metrics",
        "GET",
        "/v1/projects/{projectId}/metrics/errors",
        properties={**PROJECT, **TIME_RANGE},
        query=("from", "to"),
    ),
    rest(
        "vercel_get_deployment_health",
        "Get deployment health",
        "GET",
        "/v1/deployments/{deploymentId}/health",
        properties=DEPLOYMENT,
    ),
    # cron jobs
    rest(
        "vercel_list_cron_jobs",
        "List cron jobs",
        "GET",
        "/v1/projects/{projectId}/crons",
        properties=PROJECT,
    ),
    rest(
        "vercel_create_cron_job",
        "Create a cron job",
        "POST",
        "/v1/projects/{projectId}/crons",
        properties={**PROJECT, "path": string("Route invoked by the job"), "schedule": string("Cron expression")},
        required=["path", "schedule"],
        body=("path", "schedule"),
    ),
    rest(
        "vercel_delete_cron_job",
        "Delete a cron job",
        "DELETE",
        "/v1/projects/{projectId}/crons/{cronId}",
        properties={**PROJECT, "cronId": string()},
        message="Cron job deleted successfully",
    ),
    # firewall
    rest(
        "vercel_list_firewall_rules",
        "List firewall rules",
        "GET",
        "/v1/security/firewall/{projectId}/rules",
        properties=PROJECT,
    ),
    rest(
        "vercel_create_firewall_rule",
        "Create a firewall rule",
        "POST",
        "/v1/security/firewall/{projectId}/rules",
        properties={
            **PROJECT,
            "name": string(),
            "action": string(enum=["allow", "deny", "challenge"]),
            "condition": obj(),
            "enabled": boolean(),
        },
        required=["name", "action"],
        body_mode="remainder",
    ),
    rest(
        "vercel_delete_firewall_rule",
        "Delete a firewall rule",
        "DELETE",
        "/v1/security/firewall/{projectId}/rules/{ruleId}",
        properties={**PROJECT, "ruleId": string()},
        message="Firewall rule deleted successfully",
    ),
    rest(
        "vercel_block_ip",
        "Block an IP address",
        "POST",
        "/v1/security/firewall/{projectId}/blocked-ips",
        properties={**PROJECT, "ipAddress": string(), "notes": string()},
        required=["ipAddress"],
        body=("ipAddress", "notes"),
    ),
    rest(
        "vercel_unblock_ip",
        "Unblock an IP address",
        "DELETE",
        "/v1/security/firewall/{projectId}/blocked-ips/{ipAddress}",
        properties={**PROJECT, "ipAddress": string()},
        message="IP address unblocked",
    ),
    rest(
        "vercel_enable_attack_challenge_mode",
        "Toggle attack challenge mode",
        "PATCH",
        "/v1/security/firewall/{projectId}/challenge-mode",
        properties={**PROJECT, "enabled": boolean()},
        required=["enabled"],
        body=("enabled",),
    ),
]


class VercelMCPServer(MCPServer):
    """Vercel integration implemented via MCP."""

    def __init__(self, client: ApiClient):
        super().__init__(SERVER_ID, CATALOGUE, client, version="2.0.0")

    @classmethod
    def from_token(
        cls,
        token: SecretStr | str,
        *,
        team_id: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> "VercelMCPServer":
        client = AuthenticatedApiClient(vercel_profile(base_url, team_id), token, timeout=timeout)
        return cls(client)
