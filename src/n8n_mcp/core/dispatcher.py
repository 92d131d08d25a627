"""Route operation names to handlers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from n8n_mcp.config import Settings
from n8n_mcp.core.credentials import resolve_credential
from n8n_mcp.core.errors import OperationNotFound
from n8n_mcp.core.n8n_client import N8nClient
from n8n_mcp.core.results import OperationResult
from n8n_mcp.core.sessions import SessionCredentialStore

ClientFactory: TypeAlias = Callable[[str], N8nClient]


@dataclass(slots=True)
class ToolContext:
    """Request-scoped inputs handed to every handler."""

    headers: Mapping[str, str]
    session_id: str | None
    store: SessionCredentialStore
    settings: Settings
    client_factory: ClientFactory
    dispatcher: OperationDispatcher = field(repr=False)

    def credential(self) -> str:
        """Resolve the API key or raise `AuthenticationRequired`."""
        return resolve_credential(
            self.session_id,
            self.headers,
            self.store,
            self.settings.default_credential,
        )

    def client(self) -> N8nClient:
        return self.client_factory(self.credential())


OperationHandler: TypeAlias = Callable[[dict[str, Any], ToolContext], Awaitable[OperationResult]]


@dataclass(frozen=True, slots=True)
class Operation:
    """One registered operation and its handler."""

    name: str
    handler: OperationHandler


class OperationDispatcher:
    """Pure routing table: it neither validates arguments nor catches errors."""

    def __init__(
        self,
        operations: Iterable[Operation],
        *,
        settings: Settings,
        client_factory: ClientFactory,
    ) -> None:
        self._operations: dict[str, Operation] = {}
        self._settings = settings
        self._client_factory = client_factory
        for operation in operations:
            self.register(operation)

    def register(self, operation: Operation) -> None:
        if operation.name in self._operations:
            msg = f"Operation already registered: {operation.name}"
            raise ValueError(msg)
        self._operations[operation.name] = operation

    @property
    def settings(self) -> Settings:
        return self._settings

    def names(self) -> frozenset[str]:
        return frozenset(self._operations)

    def verify_registry(self, declared: Iterable[str]) -> None:
        """Fail unless handler names and declared tool names match exactly."""
        declared_names = frozenset(declared)
        missing = sorted(declared_names - self.names())
        extra = sorted(self.names() - declared_names)
        if missing or extra:
            msg = f"Tool registry mismatch: missing handlers={missing}, undeclared handlers={extra}"
            raise RuntimeError(msg)

    async def dispatch(
        self,
        name: str,
        args: dict[str, Any] | None,
        headers: Mapping[str, str] | None,
        session_id: str | None,
        store: SessionCredentialStore,
    ) -> OperationResult:
        operation = self._operations.get(name)
        if operation is None:
            raise OperationNotFound(name)
        context = ToolContext(
            headers=headers or {},
            session_id=session_id,
            store=store,
            settings=self._settings,
            client_factory=self._client_factory,
            dispatcher=self,
        )
        return await operation.handler(dict(args or {}), context)
