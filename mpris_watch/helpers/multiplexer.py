"""
Merge a dynamic set of async event sources into one ordered event sequence.

Every source gets a small producer task which maps (tags) its items and puts
them on a single asyncio.Queue, the consumer reads from that queue.
Within a single source the order of the items is preserved,
there is no priority between sources.

Closing the multiplexer cancels all producers and closes all sources
before returning, so no item of a closed multiplexer can ever be observed
after a replacement has been built.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, Generic, NamedTuple, Self, TypeVar

from mpris_watch.constants import MPRIS_WATCH_LOGGER_NAME, VERBOSE_LOG_LEVEL
from mpris_watch.errors import MultiplexerClosed, PlayerUnreachable, TransportUnavailable
from mpris_watch.helpers.util import close_async_generator, empty_queue

LOGGER = logging.getLogger(f"{MPRIS_WATCH_LOGGER_NAME}.helpers.multiplexer")

_EventT = TypeVar("_EventT")

TagFunc = Callable[[Any], _EventT | None]
SourceOpener = Callable[[], Awaitable[AsyncIterator[Any]]]

_member_ids = itertools.count(1)


class SourceSpec(NamedTuple, Generic[_EventT]):
    """A source that still needs to be established, as passed to build."""

    opener: SourceOpener
    tag: TagFunc[_EventT]
    essential: bool = False
    name: str | None = None


@dataclass(eq=False)
class _Member(Generic[_EventT]):
    """A source which is part of the merge."""

    source: AsyncIterator[Any]
    tag: TagFunc[_EventT]
    essential: bool
    name: str
    member_id: int = field(default_factory=lambda: next(_member_ids))
    task: asyncio.Task[None] | None = None


_CLOSED = object()


@dataclass(frozen=True)
class _SourceFailure:
    """Queue item signalling the loss of an essential source."""

    name: str
    error: BaseException | None


class EventMultiplexer(Generic[_EventT]):
    """Single consumer view on an arbitrary, mutable collection of async sources."""

    def __init__(self) -> None:
        """Initialize an empty EventMultiplexer (use build to create a populated one)."""
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._members: dict[int, _Member[_EventT]] = {}
        self._closed = False

    def __repr__(self) -> str:
        """Return representation of the multiplexer."""
        state = "closed" if self._closed else f"{len(self._members)} sources"
        return f"<EventMultiplexer ({state})>"

    @classmethod
    async def build(cls, sources: Iterable[SourceSpec[_EventT]]) -> Self:
        """
        Establish all sources and merge them.

        Sources failing to establish with PlayerUnreachable are left out of the
        merge (the player vanished in between), any other error closes the
        sources that were already established and is raised.

        :param sources: The sources to establish and merge.
        """
        specs = list(sources)
        results = await asyncio.gather(*(spec.opener() for spec in specs), return_exceptions=True)
        multiplexer = cls()
        fatal: BaseException | None = None
        for spec, result in zip(specs, results, strict=True):
            name = spec.name or repr(spec.opener)
            if isinstance(result, PlayerUnreachable):
                LOGGER.debug("Omitting source %s: %s", name, result)
                continue
            if isinstance(result, BaseException):
                fatal = fatal or result
                continue
            multiplexer.add(result, spec.tag, essential=spec.essential, name=name)
        if fatal is not None:
            await multiplexer.close()
            raise fatal
        return multiplexer

    @property
    def closed(self) -> bool:
        """Return if the multiplexer was closed."""
        return self._closed

    @property
    def sources(self) -> list[AsyncIterator[Any]]:
        """Return all sources currently part of the merge."""
        return [member.source for member in self._members.values()]

    def add(
        self,
        source: AsyncIterator[Any],
        tag: TagFunc[_EventT],
        essential: bool = False,
        name: str | None = None,
    ) -> int:
        """
        Add an (established) source to the merge and return its member id.

        :param source: The async iterator to read items from, ownership is taken.
        :param tag: Maps an item to an event, returning None drops the item.
        :param essential: Loss of this source is fatal for the consumer.
        :param name: Description used in logging.
        """
        if self._closed:
            msg = "Unable to add a source to a closed multiplexer"
            raise MultiplexerClosed(msg)
        member = _Member(source=source, tag=tag, essential=essential, name=name or repr(source))
        member.task = asyncio.create_task(self._pump(member), name=f"pump {member.name}")
        self._members[member.member_id] = member
        return member.member_id

    async def remove(self, member_id: int) -> None:
        """Remove a source from the merge and release it."""
        if (member := self._members.pop(member_id, None)) is None:
            return
        await self._release(member)

    async def next(self) -> _EventT:
        """Wait for and return the next event of any source."""
        if self._closed:
            msg = "Multiplexer is closed"
            raise MultiplexerClosed(msg)
        item = await self._queue.get()
        if item is _CLOSED:
            msg = "Multiplexer was closed"
            raise MultiplexerClosed(msg)
        if isinstance(item, _SourceFailure):
            msg = f"Essential source {item.name} was lost"
            raise TransportUnavailable(msg) from item.error
        return item

    async def close(self) -> None:
        """Release every source, returns only once all of them are released."""
        if self._closed:
            return
        self._closed = True
        members = list(self._members.values())
        self._members.clear()
        for member in members:
            if member.task is not None:
                member.task.cancel()
        await asyncio.gather(
            *(member.task for member in members if member.task is not None),
            return_exceptions=True,
        )
        for member in members:
            await close_async_generator(member.source)
        empty_queue(self._queue)
        # wake up a consumer waiting in next
        self._queue.put_nowait(_CLOSED)
        LOGGER.log(VERBOSE_LOG_LEVEL, "Closed multiplexer with %s sources", len(members))

    def __aiter__(self) -> Self:
        """Return the async iterator."""
        return self

    async def __anext__(self) -> _EventT:
        """Return the next event."""
        return await self.next()

    async def __aenter__(self) -> Self:
        """Enter context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        """Exit context manager."""
        await self.close()
        return None

    async def _release(self, member: _Member[_EventT]) -> None:
        if member.task is not None and not member.task.done():
            member.task.cancel()
            await asyncio.gather(member.task, return_exceptions=True)
        await close_async_generator(member.source)

    async def _pump(self, member: _Member[_EventT]) -> None:
        """Read all items of a single source and put the tagged events on the queue."""
        error: BaseException | None = None
        try:
            async for item in member.source:
                if (event := member.tag(item)) is None:
                    continue
                LOGGER.log(VERBOSE_LOG_LEVEL, "Source %s produced %s", member.name, event)
                self._queue.put_nowait(event)
        except asyncio.CancelledError:
            raise
        except Exception as err:
            error = err
            LOGGER.debug("Source %s failed: %s", member.name, err)
        else:
            LOGGER.debug("Source %s ended", member.name)
        if self._members.pop(member.member_id, None) is None:
            # already removed (or closing)
            return
        await close_async_generator(member.source)
        if member.essential:
            self._queue.put_nowait(_SourceFailure(member.name, error))
