"""Policy Decision Point (PDP) - policy evaluation engine.

This module evaluates organization-scoped policies against AccessRequests:

- context/: Request-side models (subject, resource, environment)
- pdp/ (this module): Decides requests, computes effective permissions
- store/: Policy persistence, write guard and snapshot cache

The PDP is stateless and side-effect free. All I/O (repository access,
audit logging) happens in store/, telemetry/ and the AuthorizationService.

Structure:
    decision.py       - Decision enum (ALLOW/DENY)
    conditions.py     - Condition models (subject/resource/action/environment)
    policy.py         - AuthorizationPolicy and create/update inputs
    decoding.py       - Strict decoding of stored condition JSON
    matcher.py        - Structural matching of conditions
    engine.py         - PolicyEvaluator (priority tiers, deny-override)
    permissions.py    - EffectivePermissionsCalculator
    protocol.py       - PolicyEvaluatorProtocol for pluggable evaluators
"""

from orgauthz.pdp.conditions import (
    ActionCondition,
    EnvironmentCondition,
    InvalidCondition,
    ResourceCondition,
    SubjectCondition,
    TimeRange,
    ValueConstraint,
)
from orgauthz.pdp.decision import Decision
from orgauthz.pdp.engine import EvaluationResult, PolicyEvaluator, evaluate
from orgauthz.pdp.permissions import (
    ALL_ACTIONS,
    EffectivePermissions,
    EffectivePermissionsCalculator,
    expand_permissions,
)
from orgauthz.pdp.policy import (
    AuthorizationPolicy,
    CreatePolicyInput,
    PolicyEffect,
    UpdatePolicyInput,
)
from orgauthz.pdp.protocol import PolicyEvaluatorProtocol

__all__ = [
    # Decision
    "Decision",
    # Engine
    "EvaluationResult",
    "PolicyEvaluator",
    "PolicyEvaluatorProtocol",
    "evaluate",
    # Permissions
    "ALL_ACTIONS",
    "EffectivePermissions",
    "EffectivePermissionsCalculator",
    "expand_permissions",
    # Policy models
    "AuthorizationPolicy",
    "CreatePolicyInput",
    "PolicyEffect",
    "UpdatePolicyInput",
    # Conditions
    "ActionCondition",
    "EnvironmentCondition",
    "InvalidCondition",
    "ResourceCondition",
    "SubjectCondition",
    "TimeRange",
    "ValueConstraint",
]
