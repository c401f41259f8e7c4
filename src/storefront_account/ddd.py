"""
DDD and CQRS building blocks.

Small base classes for entities, aggregates, domain events, commands and
their handlers, plus a mediator that routes commands and queries to the
registered handler and publishes the events commands raise.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger("storefront_account.ddd")

T = TypeVar("T")


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════
# ENTITIES & EVENTS
# ═══════════════════════════════════════════════════════════════


class Entity:
    """Object with identity, a creation timestamp and a version counter."""

    def __init__(
        self,
        entity_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        version: int = 0,
    ):
        self._id = entity_id or uuid.uuid4().hex
        self._created_at = created_at or utcnow()
        self._version = version

    @property
    def id(self) -> str:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def version(self) -> int:
        return self._version

    def increment_version(self) -> None:
        self._version += 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity) or type(self) is not type(other):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._id))


class AggregateRoot(Entity):
    """Entity that records the domain events raised by its mutations."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._domain_events: list["DomainEvent"] = []

    def add_domain_event(self, event: "DomainEvent") -> None:
        self._domain_events.append(event)

    def collect_events(self) -> list["DomainEvent"]:
        """Return and clear the pending domain events."""
        events, self._domain_events = self._domain_events, []
        return events


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Immutable record of something that happened in the domain."""

    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    occurred_at: datetime = field(default_factory=utcnow)
    correlation_id: Optional[str] = None

    @property
    def event_type(self) -> str:
        return type(self).__name__


# ═══════════════════════════════════════════════════════════════
# COMMANDS & QUERIES
# ═══════════════════════════════════════════════════════════════


@dataclass(kw_only=True)
class Command:
    """Intention to change state."""

    command_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    correlation_id: Optional[str] = None


@dataclass(kw_only=True)
class Query:
    """Request for data without side effects."""

    query_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class CommandResponse(Generic[T]):
    """Handler output: the result plus the events raised while producing it."""

    result: T
    events: list = field(default_factory=list)
    correlation_id: Optional[str] = None
    causation_id: Optional[str] = None


@dataclass
class QueryResponse(Generic[T]):
    result: T


class CommandHandler(Generic[T]):
    """Base class for command handlers."""

    async def handle(self, command: Any) -> CommandResponse[T]:
        raise NotImplementedError


class QueryHandler(Generic[T]):
    """Base class for query handlers."""

    async def handle(self, query: Any) -> QueryResponse[T]:
        raise NotImplementedError


class EventHandler:
    """Base class for domain event handlers."""

    async def handle(self, event: Any) -> None:
        raise NotImplementedError


class Mediator:
    """
    Routes commands and queries to their handlers and delivers the
    events a command raised to the event handlers subscribed to them.

    Handlers are registered as factories so a container can build them
    lazily:

        mediator = Mediator()
        mediator.register(Login, lambda: LoginHandler(...))
        mediator.register_event_handler(DomainEvent, AuditHandler)
        result = await mediator.send(Login(...))

    An event handler registered for a base class receives every subclass.
    Event handlers run after the command has completed, so their failures
    are logged and never change the command's result.
    """

    def __init__(self):
        self._handlers: dict[type, Callable[[], Any]] = {}
        self._event_handlers: dict[type, list[Callable[[], Any]]] = {}

    def register(self, message_type: type, handler_factory: Callable[[], Any]) -> None:
        self._handlers[message_type] = handler_factory

    def register_all(self, handlers: dict[type, Callable[[], Any]]) -> None:
        for message_type, factory in handlers.items():
            self.register(message_type, factory)

    def register_event_handler(
        self, event_type: type, handler_factory: Callable[[], Any]
    ) -> None:
        self._event_handlers.setdefault(event_type, []).append(handler_factory)

    def register_event_handlers(
        self, handlers: dict[type, list[Callable[[], Any]]]
    ) -> None:
        for event_type, factories in handlers.items():
            for factory in factories:
                self.register_event_handler(event_type, factory)

    def _resolve(self, message: Any) -> Any:
        factory = self._handlers.get(type(message))
        if factory is None:
            raise LookupError(f"No handler registered for {type(message).__name__}")
        return factory()

    def _event_handler_factories(self, event: Any) -> list[Callable[[], Any]]:
        factories = []
        for cls in type(event).__mro__:
            factories.extend(self._event_handlers.get(cls, []))
        return factories

    async def publish(self, events: list) -> None:
        """Deliver events to their subscribed handlers, in order."""
        for event in events:
            for factory in self._event_handler_factories(event):
                handler = factory()
                try:
                    await handler.handle(event)
                except Exception as e:
                    logger.error(
                        f"{type(handler).__name__} failed on {event.event_type}: {e}",
                        exc_info=True,
                    )

    async def send(self, command: Command) -> Any:
        """Dispatch a command, publish its events and return its result."""
        handler = self._resolve(command)
        response = await handler.handle(command)
        for event in response.events:
            logger.debug(f"{type(command).__name__} raised {event.event_type}")
        await self.publish(response.events)
        return response.result

    async def query(self, query: Query) -> Any:
        """Dispatch a query and return its result."""
        handler = self._resolve(query)
        response = await handler.handle(query)
        return response.result


__all__ = [
    "utcnow",
    "Entity",
    "AggregateRoot",
    "DomainEvent",
    "Command",
    "Query",
    "CommandResponse",
    "QueryResponse",
    "CommandHandler",
    "QueryHandler",
    "EventHandler",
    "Mediator",
]
