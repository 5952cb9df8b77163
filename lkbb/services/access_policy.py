"""
Access scoping policy.

Pure decision logic: nothing here touches the database. Callers resolve the
principal (role, operator focus event, events a judge has scored in) and the
owning event/participant/judge of the target record, then ask ``decide`` or
``scope_listing`` for an explicit ``Decision``. ``enforce`` turns a denial
into the matching HTTP error at the service boundary.

Rules, first matching role wins:

- admin: everything.
- operator: needs a focus event (else a configuration error) and may only
  touch records of that event. Naming another event is rejected, never
  redirected.
- judge: Score/ScoreDetail only where ``judge_id`` is the judge; other
  resources are readable for events the judge has scored in.
- participant: reads only records of its own registrations; never writes
  Score, ScoreDetail, Winner or EventCategory.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from lkbb.core.errors import AuthorizationError, ConfigurationError


class Role(str, Enum):
    ADMIN = "admin"
    OPERATOR = "operator"
    JUDGE = "judge"
    PARTICIPANT = "participant"


class Action(str, Enum):
    READ = "read"
    WRITE = "write"


class Resource(str, Enum):
    SCORE = "score"
    SCORE_DETAIL = "score_detail"
    PARTICIPANT = "participant"
    WINNER = "winner"
    PARTICIPATION = "participation"
    EVENT_CATEGORY = "event_category"


class DenialKind(str, Enum):
    AUTHORIZATION = "authorization"
    CONFIGURATION = "configuration"


JUDGE_OWNED = frozenset({Resource.SCORE, Resource.SCORE_DETAIL})
PARTICIPANT_READ_ONLY = frozenset(
    {Resource.SCORE, Resource.SCORE_DETAIL, Resource.WINNER, Resource.EVENT_CATEGORY}
)

FOCUS_EVENT_REQUIRED = "Operator has not selected a focus event"
ROLE_NOT_PERMITTED = "Role not permitted"


@dataclass(frozen=True)
class Principal:
    id: int
    role: Role
    focus_event_id: Optional[int] = None
    judged_event_ids: FrozenSet[int] = frozenset()


@dataclass(frozen=True)
class Target:
    """Ownership coordinates of the record being read or written."""

    event_id: Optional[int] = None
    participant_user_id: Optional[int] = None
    judge_id: Optional[int] = None


@dataclass(frozen=True)
class ListingFilter:
    event_id: Optional[int] = None
    # Restrict to any of these events; None means unrestricted
    event_ids: Optional[FrozenSet[int]] = None
    judge_id: Optional[int] = None
    participant_user_id: Optional[int] = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    kind: Optional[DenialKind] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason, DenialKind.AUTHORIZATION)

    @classmethod
    def misconfigured(cls, reason: str = FOCUS_EVENT_REQUIRED) -> "Decision":
        return cls(False, reason, DenialKind.CONFIGURATION)


ALLOW = Decision.allow()


def parse_role(value) -> Optional[Role]:
    try:
        return Role(value)
    except ValueError:
        return None


def decide(principal: Principal, action: Action, resource: Resource, target: Target) -> Decision:
    role = principal.role
    if role is Role.ADMIN:
        return ALLOW
    if role is Role.OPERATOR:
        return _decide_operator(principal, resource, target)
    if role is Role.JUDGE:
        return _decide_judge(principal, action, resource, target)
    if role is Role.PARTICIPANT:
        return _decide_participant(principal, action, resource, target)
    return Decision.deny(ROLE_NOT_PERMITTED)


def _decide_operator(principal: Principal, resource: Resource, target: Target) -> Decision:
    if principal.focus_event_id is None:
        return Decision.misconfigured()
    if target.event_id != principal.focus_event_id:
        return Decision.deny(f"Operator may only access {resource.value} records of the focus event")
    return ALLOW


def _decide_judge(principal: Principal, action: Action, resource: Resource, target: Target) -> Decision:
    if resource in JUDGE_OWNED:
        if target.judge_id != principal.id:
            return Decision.deny(f"Judges may only {action.value} their own {resource.value} records")
        return ALLOW
    if action is Action.WRITE:
        return Decision.deny(f"Judges may not modify {resource.value} records")
    if target.event_id not in principal.judged_event_ids:
        return Decision.deny("Judge is not assigned to this event")
    return ALLOW


def _decide_participant(principal: Principal, action: Action, resource: Resource, target: Target) -> Decision:
    if action is Action.WRITE and resource in PARTICIPANT_READ_ONLY:
        return Decision.deny(f"Participants may not modify {resource.value} records")
    if target.participant_user_id != principal.id:
        return Decision.deny(f"Participants may only access their own {resource.value} records")
    return ALLOW


def scope_listing(
    principal: Principal, resource: Resource, requested: ListingFilter
) -> Tuple[Decision, ListingFilter]:
    """Narrow a caller's listing filters to what its role may see."""
    role = principal.role
    if role is Role.ADMIN:
        return ALLOW, requested

    if role is Role.OPERATOR:
        focus = principal.focus_event_id
        if focus is None:
            return Decision.misconfigured(), requested
        if requested.event_id is not None and requested.event_id != focus:
            return Decision.deny(f"Operator may only list {resource.value} records of the focus event"), requested
        return ALLOW, replace(requested, event_id=focus)

    if role is Role.JUDGE:
        if resource in JUDGE_OWNED:
            if requested.judge_id is not None and requested.judge_id != principal.id:
                return Decision.deny(f"Judges may only list their own {resource.value} records"), requested
            return ALLOW, replace(requested, judge_id=principal.id)
        if requested.event_id is not None:
            if requested.event_id not in principal.judged_event_ids:
                return Decision.deny("Judge is not assigned to this event"), requested
            return ALLOW, requested
        return ALLOW, replace(requested, event_ids=principal.judged_event_ids)

    if role is Role.PARTICIPANT:
        if requested.participant_user_id is not None and requested.participant_user_id != principal.id:
            return Decision.deny(f"Participants may only list their own {resource.value} records"), requested
        return ALLOW, replace(requested, participant_user_id=principal.id)

    return Decision.deny(ROLE_NOT_PERMITTED), requested


def enforce(decision: Decision) -> None:
    if decision.allowed:
        return
    if decision.kind is DenialKind.CONFIGURATION:
        raise ConfigurationError(decision.reason)
    raise AuthorizationError(decision.reason)


def authorize(principal: Principal, action: Action, resource: Resource, target: Target) -> None:
    enforce(decide(principal, action, resource, target))
