"""Policy command group for orgauthz CLI.

Offline tooling for policy files (see orgauthz.utils.policy for the file
format). Nothing here talks to a live repository.
"""

from __future__ import annotations

__all__ = ["policy"]

import json
import sys
from pathlib import Path

import click

from orgauthz.actions import ACTION_CATALOG
from orgauthz.pdp.engine import PolicyEvaluator
from orgauthz.pdp.matcher import mismatch_reason
from orgauthz.pdp.permissions import ALL_ACTIONS, EffectivePermissionsCalculator, expand_permissions
from orgauthz.pdp.policy import AuthorizationPolicy
from orgauthz.utils.policy import load_permissions_query, load_policy_file, load_request

from ..styling import style_decision, style_dim, style_error, style_header, style_label, style_success, style_warning

# Exit code for a successful evaluation that denied the request
EXIT_DENIED = 2

_PATH_ARG = click.Path(exists=True, dir_okay=False, path_type=Path)


def _load_policies(path: Path) -> list[AuthorizationPolicy]:
    """Load all policies of a file in evaluation order, exiting on error."""
    try:
        repository = load_policy_file(path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)
    return repository.find_all()


def _describe(policy: AuthorizationPolicy) -> str:
    flags = []
    if policy.is_system_policy:
        flags.append("system")
    if not policy.is_active:
        flags.append("inactive")
    suffix = f" ({', '.join(flags)})" if flags else ""
    return f"[{policy.id}] {policy.priority:>4} {style_decision(policy.effect.value)} {policy.name}{suffix}"


@click.group()
def policy() -> None:
    """Policy file commands."""
    pass


@policy.command("validate")
@click.argument("path", type=_PATH_ARG)
def policy_validate(path: Path) -> None:
    """Validate a policy file.

    Checks the file for:
    - Valid JSON syntax and entry structure
    - Unique policy ids
    - Decodable subject/resource/action/environment conditions

    Exit codes:
        0: Policy file is valid
        1: Policy file is invalid
    """
    policies = _load_policies(path)
    broken = [p for p in policies if p.has_invalid_conditions]

    if broken:
        click.echo(style_error(f"{len(broken)} of {len(policies)} policies have invalid conditions"), err=True)
        for p in broken:
            for condition in p.decode_errors():
                click.echo(f"  [{p.id}] {condition.facet}: {condition.error}", err=True)
        sys.exit(1)

    click.echo(style_success(f"Policy file valid: {path}"))
    click.echo(f"  {len(policies)} polic{'ies' if len(policies) != 1 else 'y'} defined")


@policy.command("show")
@click.argument("path", type=_PATH_ARG)
def policy_show(path: Path) -> None:
    """List the policies of a file in evaluation order."""
    policies = _load_policies(path)
    click.echo(style_label("Policies") + f" {len(policies)}")
    if not policies:
        click.echo(style_dim("  (no policies defined)"))
        return
    for p in policies:
        click.echo(f"  {_describe(p)}")
        if p.has_invalid_conditions:
            click.echo("    " + style_warning("invalid conditions, never matches"))


@policy.command("evaluate")
@click.argument("path", type=_PATH_ARG)
@click.option("--request", "request_path", required=True, type=_PATH_ARG, help="AccessRequest JSON file")
@click.option("--explain", is_flag=True, help="Show the deciding policies and why others did not match")
def policy_evaluate(path: Path, request_path: Path, explain: bool) -> None:
    """Evaluate an access request against a policy file.

    Exit codes:
        0: Request allowed
        1: Invalid input
        2: Request denied
    """
    policies = _load_policies(path)
    try:
        request = load_request(request_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    result = PolicyEvaluator().explain(policies, request)
    click.echo(style_decision(result.decision.value))

    if explain:
        click.echo(style_label("Reason") + f" {result.reason}")
        if result.matched_policies:
            click.echo(style_header("Deciding policies"))
            for p in result.matched_policies:
                click.echo(f"  {_describe(p)}")
        click.echo(style_header("Not matching"))
        for p in policies:
            if not p.is_active:
                reason: str | None = "inactive"
            elif p.organization_id != request.organization_id:
                reason = "other organization"
            else:
                reason = mismatch_reason(p, request)
            if reason is not None:
                click.echo(f"  [{p.id}] {style_dim(reason)}")

    if not result.is_allowed:
        sys.exit(EXIT_DENIED)


@policy.command("permissions")
@click.argument("path", type=_PATH_ARG)
@click.option("--subject", "subject_path", required=True, type=_PATH_ARG, help="Subject context JSON file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def policy_permissions(path: Path, subject_path: Path, as_json: bool) -> None:
    """List the effective permissions of a subject."""
    policies = _load_policies(path)
    try:
        query = load_permissions_query(subject_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    result = EffectivePermissionsCalculator().calculate(
        policies,
        query.organization_id,
        query.to_context(),
        ACTION_CATALOG,
    )
    allowed = expand_permissions(result, ACTION_CATALOG)
    ordered = [a for a in ACTION_CATALOG if a in allowed]

    if as_json:
        click.echo(json.dumps({"unrestricted": result == ALL_ACTIONS, "actions": ordered}, indent=2))
        return

    if result == ALL_ACTIONS:
        click.echo(style_success("Unrestricted: all actions allowed"))
    click.echo(style_label("Allowed actions") + f" {len(ordered)} of {len(ACTION_CATALOG)}")
    if not ordered:
        click.echo(style_dim("  (none)"))
    for action in ordered:
        click.echo(f"  {action}")
