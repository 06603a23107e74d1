"""
Argument reconciler.

Structured output from the reasoning engine is an instruction, not an
authorization. The caller's student id always wins over whatever id the
engine placed into invocation arguments.

Rules, applied per invocation in order:
1. Engine and caller both name a student and they differ: the caller's id
   replaces the engine's, and the substitution is recorded as a policy event.
   This also covers a stray student id on a capability that takes none.
2. The capability needs a student, and neither side supplied one: ask the
   user for it, without running anything.
3. The capability needs a student, the engine omitted it, the caller
   supplied it: insert the caller's id.
4. Otherwise the invocation passes through unchanged.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from .registry import STUDENT_ID_PARAM, CapabilityRegistry
from .state import ClarificationNeeded, InvocationRequest, PolicyEvent

logger = logging.getLogger(__name__)

CLARIFICATION_MESSAGE = "I need a student ID to answer this question. Please provide it."


class MismatchPolicy(str, Enum):
    """What to do beyond overriding when the engine names a different student."""
    OVERRIDE = "override"  # log only
    REPORT = "report"      # also surface the event to the caller


class ScopeAction(Enum):
    """What reconciliation did to an invocation."""
    PASSED = "passed"
    INSERTED = "inserted"
    OVERRIDDEN = "overridden"


@dataclass(frozen=True)
class ReconcileResult:
    invocation: InvocationRequest
    action: ScopeAction
    event: Optional[PolicyEvent] = None


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def reconcile(
    invocation: InvocationRequest,
    trusted_subject_id: Optional[str],
    registry: CapabilityRegistry
) -> Union[ReconcileResult, ClarificationNeeded]:
    """
    Reconcile one invocation against the caller's trusted student id.

    Args:
        invocation: Invocation as proposed by the engine
        trusted_subject_id: Student id supplied by the caller, if any
        registry: Capability catalog

    Returns:
        ReconcileResult with the invocation to execute, or ClarificationNeeded
    """
    descriptor = registry.get(invocation.capability_name)
    if descriptor is None:
        # Unknown capabilities are rejected by the dispatcher
        return ReconcileResult(invocation, ScopeAction.PASSED)

    # Capabilities without a declared subject still get a stray student id overridden
    param = descriptor.subject_parameter or STUDENT_ID_PARAM
    if not descriptor.subject_parameter and param not in invocation.arguments:
        return ReconcileResult(invocation, ScopeAction.PASSED)

    engine_value = invocation.arguments.get(param)
    trusted = None if _is_missing(trusted_subject_id) else trusted_subject_id

    if not _is_missing(engine_value) and trusted and str(engine_value) != trusted:
        logger.warning(
            "Engine tried to use %s=%s for '%s' but the request is scoped to %s; using the caller's id",
            param, engine_value, invocation.capability_name, trusted,
        )
        event = PolicyEvent(
            capability_name=invocation.capability_name,
            kind="subject_override",
            detail=f"Engine-supplied {param} was replaced with the caller's {param}.",
        )
        return ReconcileResult(invocation.with_argument(param, trusted), ScopeAction.OVERRIDDEN, event)

    if descriptor.requires_subject and _is_missing(engine_value):
        if not trusted:
            return ClarificationNeeded(invocation.capability_name, CLARIFICATION_MESSAGE)
        return ReconcileResult(invocation.with_argument(param, trusted), ScopeAction.INSERTED)

    return ReconcileResult(invocation, ScopeAction.PASSED)


def reconcile_batch(
    invocations: Sequence[InvocationRequest],
    trusted_subject_id: Optional[str],
    registry: CapabilityRegistry,
    policy: MismatchPolicy = MismatchPolicy.OVERRIDE
) -> Union[Tuple[List[InvocationRequest], List[PolicyEvent]], ClarificationNeeded]:
    """
    Reconcile a whole batch before anything runs.

    Returns:
        (reconciled invocations, policy events to surface), or the first
        ClarificationNeeded encountered
    """
    reconciled = []
    events = []
    for invocation in invocations:
        result = reconcile(invocation, trusted_subject_id, registry)
        if isinstance(result, ClarificationNeeded):
            logger.info("Clarification needed for '%s'", result.capability_name)
            return result
        reconciled.append(result.invocation)
        if result.event and policy == MismatchPolicy.REPORT:
            events.append(result.event)
    return reconciled, events
