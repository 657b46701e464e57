"""Request context for ABAC policy evaluation.

- context/ (this module): Describes the access request
- pdp/: Policy Decision Point - evaluates policies
- store/: Policy storage, write guard and snapshot cache

Structure:
    attributes.py     - Attribute value type aliases
    subject.py        - Subject model (WHO)
    resource.py       - ResourceType + ResourceDescriptor (ON WHAT)
    environment.py    - Environment model (CONTEXT)
    request.py        - AccessRequest + SubjectContext
"""

from orgauthz.context.attributes import AttributeScalar, AttributeValue
from orgauthz.context.environment import Environment
from orgauthz.context.request import AccessRequest, SubjectContext
from orgauthz.context.resource import ResourceDescriptor, ResourceType
from orgauthz.context.subject import Subject

__all__ = [
    "AccessRequest",
    "AttributeScalar",
    "AttributeValue",
    "Environment",
    "ResourceDescriptor",
    "ResourceType",
    "Subject",
    "SubjectContext",
]
