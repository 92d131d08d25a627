"""Drive a workflow's active flag to a desired value.

The n8n API may or may not expose `POST /workflows/{id}/activate|deactivate`,
and may reject the call with 400 when the workflow is already in the
requested state. Reconciliation is a three-state machine:

``direct``        try the dedicated endpoint.
                  404 -> ``full_update``; 400 -> ``check_current``;
                  anything else is terminal.
``full_update``   fetch, set ``active``, ``PUT`` the full workflow.
``check_current`` fetch; already in state -> success, otherwise fall back
                  to ``full_update``. If that fails, the ``direct`` error is
                  raised because it names the root cause.

Errors are never retried here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol, TypeAlias

from n8n_mcp.core.errors import RemoteApiError
from n8n_mcp.core.n8n_client import replacement_body

logger = logging.getLogger(__name__)

STATE_FIELD = "active"


class WorkflowStateApi(Protocol):
    """Remote calls the reconciliation engine depends on."""

    async def toggle_workflow(self, workflow_id: str, *, active: bool) -> dict[str, Any]: ...

    async def get_workflow(self, workflow_id: str) -> dict[str, Any]: ...

    async def replace_workflow(
        self, workflow_id: str, payload: dict[str, Any]
    ) -> dict[str, Any]: ...


class ReconcileState(StrEnum):
    DIRECT = "direct"
    FULL_UPDATE = "full_update"
    CHECK_CURRENT = "check_current"


@dataclass(frozen=True, slots=True)
class Reconciled:
    """Terminal success."""

    resource: Any
    strategy: ReconcileState
    already_in_state: bool = False


@dataclass(frozen=True, slots=True)
class Advance:
    """Move to another state."""

    state: ReconcileState
    cause: RemoteApiError | None = None


@dataclass(frozen=True, slots=True)
class Failed:
    """Terminal failure carrying the error to surface."""

    error: RemoteApiError


Step: TypeAlias = Reconciled | Advance | Failed


def after_direct_failure(error: RemoteApiError) -> Step:
    """Classify a failed dedicated-endpoint call."""
    if error.status_code == 404:
        return Advance(ReconcileState.FULL_UPDATE, cause=error)
    if error.status_code == 400:
        return Advance(ReconcileState.CHECK_CURRENT, cause=error)
    return Failed(error)


def state_label(active: bool) -> str:
    return "active" if active else "inactive"


class ReconciliationEngine:
    """Run the state machine against one workflow."""

    def __init__(self, api: WorkflowStateApi) -> None:
        self._api = api

    async def reconcile(self, workflow_id: str, *, active: bool) -> Reconciled:
        """Return the terminal success step or raise `RemoteApiError`."""
        direct_error: RemoteApiError | None = None
        step: Step = Advance(ReconcileState.DIRECT)

        while isinstance(step, Advance):
            state = step.state
            logger.info("Reconciling workflow %s to %s: %s", workflow_id, state_label(active), state)
            if state is ReconcileState.DIRECT:
                step = await self._direct(workflow_id, active)
                if isinstance(step, Advance):
                    direct_error = step.cause
            elif state is ReconcileState.FULL_UPDATE:
                step = await self._full_update(workflow_id, active)
            else:
                step = await self._check_current(workflow_id, active)
                if isinstance(step, Failed) and direct_error is not None:
                    step = Failed(direct_error)

        if isinstance(step, Failed):
            raise step.error
        return step

    async def _direct(self, workflow_id: str, active: bool) -> Step:
        try:
            resource = await self._api.toggle_workflow(workflow_id, active=active)
        except RemoteApiError as exc:
            return after_direct_failure(exc)
        return Reconciled(resource=resource, strategy=ReconcileState.DIRECT)

    async def _full_update(self, workflow_id: str, active: bool) -> Step:
        try:
            current = await self._api.get_workflow(workflow_id)
            body = replacement_body(current, **{STATE_FIELD: active})
            resource = await self._api.replace_workflow(workflow_id, body)
        except RemoteApiError as exc:
            return Failed(exc)
        return Reconciled(resource=resource, strategy=ReconcileState.FULL_UPDATE)

    async def _check_current(self, workflow_id: str, active: bool) -> Step:
        try:
            current = await self._api.get_workflow(workflow_id)
        except RemoteApiError as exc:
            return Failed(exc)
        if isinstance(current, dict) and current.get(STATE_FIELD) is active:
            return Reconciled(
                resource=current,
                strategy=ReconcileState.CHECK_CURRENT,
                already_in_state=True,
            )
        return await self._full_update(workflow_id, active)
