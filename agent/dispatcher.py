"""
Capability dispatcher.

Runs reconciled invocations against their handlers. A failing, unknown or
slow capability becomes a failed outcome; the rest of the batch carries on.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .exceptions import RegistryMismatchError, UnknownCapabilityError
from .registry import CapabilityRegistry
from .state import InvocationOutcome, InvocationRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapabilityHandler:
    """
    How to run one capability and describe its result.

    Attributes:
        execute: Calls the domain service with the invocation arguments
        render: Turns the domain result into a deterministic text summary
    """
    execute: Callable[[Mapping[str, Any]], Any]
    render: Callable[[Any], str]


class CapabilityDispatcher:
    """
    Dispatch table from capability name to handler.

    The table is checked against the registry on construction, so a
    capability without a handler (or a handler without a capability)
    fails at startup.

    Args:
        registry: Capability catalog
        handlers: Mapping of capability name to handler
        timeout_seconds: Deadline for the whole batch; None waits forever
        max_workers: Upper bound on concurrently running handlers
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        handlers: Mapping[str, CapabilityHandler],
        timeout_seconds: Optional[float] = None,
        max_workers: int = 4
    ):
        missing = [name for name in registry.names if name not in handlers]
        extra = sorted(name for name in handlers if name not in registry)
        if missing or extra:
            raise RegistryMismatchError(
                f"Dispatch table does not match registry (missing: {missing}, unregistered: {extra})"
            )

        self.registry = registry
        self._handlers: Dict[str, CapabilityHandler] = dict(handlers)
        self.timeout_seconds = timeout_seconds
        self.max_workers = max(1, max_workers)

    def dispatch(self, invocations: Sequence[InvocationRequest]) -> List[InvocationOutcome]:
        """
        Execute a batch of invocations.

        Returns:
            One outcome per invocation, in input order
        """
        outcomes: List[Optional[InvocationOutcome]] = [None] * len(invocations)
        runnable = []
        for index, invocation in enumerate(invocations):
            rejection = self._check(invocation)
            if rejection:
                logger.warning("Rejected invocation '%s': %s", invocation.capability_name, rejection)
                outcomes[index] = InvocationOutcome.failure(invocation.capability_name, rejection)
            else:
                runnable.append(index)

        if runnable:
            executor = ThreadPoolExecutor(
                max_workers=min(len(runnable), self.max_workers),
                thread_name_prefix="capability",
            )
            try:
                futures = {i: executor.submit(self._run, invocations[i]) for i in runnable}
                deadline = None
                if self.timeout_seconds is not None:
                    deadline = time.monotonic() + self.timeout_seconds
                for index in runnable:
                    outcomes[index] = self._collect(invocations[index], futures[index], deadline)
            finally:
                # Do not block the request on handlers that overran the deadline
                executor.shutdown(wait=False, cancel_futures=True)

        return outcomes

    def _check(self, invocation: InvocationRequest) -> Optional[str]:
        """Reason an invocation cannot run, or None."""
        descriptor = self.registry.get(invocation.capability_name)
        if descriptor is None:
            return UnknownCapabilityError(invocation.capability_name).message
        missing = [
            name for name in descriptor.required_parameters
            if invocation.arguments.get(name) in (None, "")
        ]
        if missing:
            return f"Missing required argument(s): {', '.join(missing)}"
        return None

    def _run(self, invocation: InvocationRequest) -> str:
        handler = self._handlers[invocation.capability_name]
        result = handler.execute(invocation.arguments)
        return handler.render(result)

    def _collect(self, invocation: InvocationRequest, future, deadline: Optional[float]) -> InvocationOutcome:
        name = invocation.capability_name
        timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
        try:
            summary = future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.error("Capability '%s' timed out after %ss", name, self.timeout_seconds)
            return InvocationOutcome.failure(name, f"Timed out after {self.timeout_seconds:g} seconds")
        except Exception as e:
            logger.error("Error executing capability '%s': %s", name, e)
            return InvocationOutcome.failure(name, str(e) or type(e).__name__)
        return InvocationOutcome.success(name, summary)
