"""orgauthz - organization-scoped ABAC policy decision engine.

Decides allow/deny for access requests against per-organization
authorization policies and computes effective permission sets.

Structure:
    context/    - AccessRequest model (subject, resource, environment)
    pdp/        - Policy Decision Point: conditions, matcher, evaluator
    store/      - PolicyRepository protocol, in-memory store, guard, cache
    service.py  - AuthorizationService (evaluation API)
    cli/        - Command-line tooling for policy files
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
