"""AccessRequest - complete input for policy evaluation.

Follows the standard ABAC model:
- Subject: WHO is making the request
- Action: WHAT operation is being performed
- Resource: ON WHAT (the target)
- Environment: Contextual information

Requests are never persisted. The organization scopes which policies
can participate at all.
"""

from __future__ import annotations

__all__ = [
    "AccessRequest",
    "SubjectContext",
]

from pydantic import BaseModel, ConfigDict, Field

from orgauthz.context.environment import Environment
from orgauthz.context.resource import ResourceDescriptor
from orgauthz.context.subject import Subject


class AccessRequest(BaseModel):
    """A concrete access request.

    Attributes:
        organization_id: Tenant the request is made in.
        subject: Resolved subject attributes.
        resource: Target resource.
        action: Namespaced action id (e.g., "journal_entry:post").
        environment: Request-time facts.
    """

    organization_id: str
    subject: Subject
    resource: ResourceDescriptor
    action: str = Field(min_length=1)
    environment: Environment = Field(default_factory=Environment)

    model_config = ConfigDict(frozen=True)


class SubjectContext(BaseModel):
    """An access request without an action.

    Input to effective-permission computation, which probes every action
    in a catalog with the same subject, resource and environment.

    Attributes:
        subject: Resolved subject attributes.
        resource: Target resource. When None, each probed action targets the
            resource type named by its namespace.
        environment: Request-time facts.
    """

    subject: Subject
    resource: ResourceDescriptor | None = None
    environment: Environment = Field(default_factory=Environment)

    model_config = ConfigDict(frozen=True)

    def to_request(
        self,
        organization_id: str,
        action: str,
        resource: ResourceDescriptor,
    ) -> AccessRequest:
        """Build the request for one probed action."""
        return AccessRequest(
            organization_id=organization_id,
            subject=self.subject,
            resource=resource,
            action=action,
            environment=self.environment,
        )
