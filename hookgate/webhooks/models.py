"""Webhook delivery models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Header names as sent by GitHub (aiohttp header lookups are case-insensitive)
EVENT_HEADER = "x-github-event"
DELIVERY_HEADER = "x-github-delivery"
SIGNATURE_HEADER = "x-hub-signature"
SIGNATURE_256_HEADER = "x-hub-signature-256"

WILDCARD = "*"

WEBHOOK_EVENT_NAMES: frozenset[str] = frozenset({
    "branch_protection_configuration",
    "branch_protection_rule",
    "check_run",
    "check_suite",
    "code_scanning_alert",
    "commit_comment",
    "create",
    "custom_property",
    "custom_property_values",
    "delete",
    "dependabot_alert",
    "deploy_key",
    "deployment",
    "deployment_protection_rule",
    "deployment_review",
    "deployment_status",
    "discussion",
    "discussion_comment",
    "fork",
    "github_app_authorization",
    "gollum",
    "installation",
    "installation_repositories",
    "installation_target",
    "issue_comment",
    "issues",
    "label",
    "marketplace_purchase",
    "member",
    "membership",
    "merge_group",
    "meta",
    "milestone",
    "org_block",
    "organization",
    "package",
    "page_build",
    "personal_access_token_request",
    "ping",
    "project",
    "project_card",
    "project_column",
    "projects_v2",
    "projects_v2_item",
    "public",
    "pull_request",
    "pull_request_review",
    "pull_request_review_comment",
    "pull_request_review_thread",
    "push",
    "registry_package",
    "release",
    "repository",
    "repository_advisory",
    "repository_dispatch",
    "repository_import",
    "repository_ruleset",
    "repository_vulnerability_alert",
    "secret_scanning_alert",
    "secret_scanning_alert_location",
    "security_advisory",
    "security_and_analysis",
    "sponsorship",
    "star",
    "status",
    "team",
    "team_add",
    "watch",
    "workflow_dispatch",
    "workflow_job",
    "workflow_run",
})


def is_known_event(name: str) -> bool:
    """True for a GitHub event name or an ``<event>.<action>`` of one."""
    return name.split(".", 1)[0] in WEBHOOK_EVENT_NAMES


@dataclass
class WebhookEvent:
    id: str
    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    signature: str = ""
    raw_body: bytes | None = None

    @property
    def action(self) -> str | None:
        action = self.payload.get("action")
        return action if isinstance(action, str) else None


class DeliveryOutcome(str, Enum):
    NOT_A_WEBHOOK = "not_a_webhook"
    DELEGATED = "delegated"
    MISSING_HEADERS = "missing_headers"
    VERIFICATION_FAILED = "verification_failed"
    HANDLED_OK = "handled_ok"
    HANDLED_WITH_ERROR = "handled_with_error"
    TIMED_OUT = "timed_out"
