"""
Strategy Registry
=================

Holds the named disassembly strategies and tracks which one is active.

A strategy converts a byte buffer (a marshalled code object) into text.
Strategies are kept in registration order, which is also the fallback
priority used when no name is given. Lookup by name is first-match, so an
earlier registration shadows a later one with the same name.

Availability is probed on every selection rather than at registration. A
strategy backed by an external tool becomes selectable as soon as the tool
appears on PATH, and a previously selected strategy whose tool has gone away
is noticed the next time the active strategy is read.

Example:

    >>> registry = StrategyRegistry()
    >>> registry.register("length", lambda data: str(len(data)))
    >>> handler = registry.select("length")
    >>> handler(b"abc")
    '3'

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from bytepeek.errors import NoStrategyAvailable, StrategyUnavailable, StrategyUnknown

logger = logging.getLogger(__name__)

Handler = Callable[[bytes], str]


@dataclass(frozen=True)
class Strategy:
    """
    A named byte-buffer-to-text converter.

    Attributes:
        name: Identifier used for selection
        handler: Callable taking bytes and returning text
        probe: Optional availability check, run on every selection
        description: One-line summary for listings
    """
    name: str
    handler: Optional[Handler]
    probe: Optional[Callable[[], bool]] = None
    description: str = ""

    def is_callable(self) -> bool:
        """Return True if the handler can be invoked right now."""
        if not callable(self.handler):
            return False
        if self.probe is None:
            return True
        return bool(self.probe())


class StrategyRegistry:
    """
    Ordered collection of strategies plus the active-strategy cell.

    Each registry owns its own active strategy; there is no process-wide
    selection. The Disassembler service serialises access to it.
    """

    def __init__(self):
        self._entries: list[Strategy] = []
        self._active: Optional[Strategy] = None

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(
        self,
        name: str,
        handler: Optional[Handler],
        probe: Optional[Callable[[], bool]] = None,
        description: str = "",
    ) -> Strategy:
        """
        Add a strategy at the end of the fallback order.

        Duplicate names are accepted; lookups return the earliest entry.
        """
        entry = Strategy(name, handler, probe, description)
        self._entries.append(entry)
        logger.debug(f"Registered strategy '{name}'")
        return entry

    def lookup(self, name: str) -> Optional[Strategy]:
        """Return the first entry registered under ``name``, or None."""
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select(self, name: Optional[str] = None) -> Optional[Handler]:
        """
        Select a strategy and return its handler.

        With a name, that strategy becomes active if it is callable. Without
        a name, a still-callable active strategy is kept; otherwise the
        first callable entry in registration order is adopted. If nothing is
        callable a warning is logged and None is returned.

        Raises:
            StrategyUnknown: ``name`` is not registered
            StrategyUnavailable: ``name`` is registered but not callable
        """
        if name is not None:
            entry = self.lookup(name)
            if entry is None:
                raise StrategyUnknown(name, self.names())
            if not entry.is_callable():
                raise StrategyUnavailable(name)
            self._active = entry
            logger.debug(f"Selected strategy '{name}'")
            return entry.handler

        if self._active is not None:
            if self._active.is_callable():
                return self._active.handler
            logger.warning(
                f"Active strategy '{self._active.name}' is no longer available"
            )

        for entry in self._entries:
            if entry.is_callable():
                self._active = entry
                logger.debug(f"Adopted strategy '{entry.name}'")
                return entry.handler

        logger.warning("No suitable disassembly strategy available")
        return None

    def require(self, name: Optional[str] = None) -> Handler:
        """
        Like select(), but raise if no strategy can be used.

        Raises:
            NoStrategyAvailable: no registered strategy is callable
        """
        handler = self.select(name)
        if handler is None:
            raise NoStrategyAvailable(self.names())
        return handler

    @property
    def active(self) -> Optional[Strategy]:
        """The active strategy if it is still callable, else None."""
        if self._active is not None and self._active.is_callable():
            return self._active
        return None

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def names(self) -> list[str]:
        """Registered names in fallback order (duplicates included)."""
        return [entry.name for entry in self._entries]

    def entries(self) -> list[Strategy]:
        return list(self._entries)

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Strategy]:
        return iter(list(self._entries))
