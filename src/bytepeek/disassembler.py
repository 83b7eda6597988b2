"""
Disassembler Service
====================

Composes the resolver, the strategy registry and the output formatter:

    reference -> Resolver -> bytes -> active strategy -> text -> format_listing

Interpreted callables skip the strategy and have their source text
formatted instead. Each Disassembler owns its registry and therefore its
own active strategy; one lock serialises select-then-invoke so concurrent
callers never see a half-made selection.

Example:

    >>> from bytepeek import Disassembler
    >>> disassembler = Disassembler.from_config()
    >>> print(disassembler.disassemble("json:dumps"))

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
import threading
from typing import Any, Optional

from bytepeek.cache import CodeCache
from bytepeek.config import DisassemblerConfig
from bytepeek.formatter import COMMENT_PREFIX, format_listing
from bytepeek.registry import Strategy, StrategyRegistry
from bytepeek.resolver import InterpretedSource, Resolver
from bytepeek.strategies import default_registry

logger = logging.getLogger(__name__)


class Disassembler:
    """
    Resolves references and renders their bytecode as comment text.

    Args:
        registry: Strategies to choose from (default: built-ins)
        resolver: Code-source resolver (default: CPython introspection)
        prefix: Line prefix for formatted output
    """

    def __init__(
        self,
        registry: Optional[StrategyRegistry] = None,
        resolver: Optional[Resolver] = None,
        prefix: str = COMMENT_PREFIX,
    ):
        self.registry = registry if registry is not None else default_registry()
        self.resolver = resolver if resolver is not None else Resolver()
        self.prefix = prefix
        self._lock = threading.RLock()

    @classmethod
    def from_config(
        cls,
        config: Optional[DisassemblerConfig] = None,
        cache: Optional[CodeCache] = None,
    ) -> "Disassembler":
        """
        Build a Disassembler with the built-in strategies.

        If ``config.strategy`` is set it is selected immediately, so an
        unknown or unavailable name fails here rather than on first use.
        """
        if config is None:
            config = DisassemblerConfig.from_env()
        disassembler = cls(
            registry=default_registry(config),
            resolver=Resolver(cache=cache),
            prefix=config.comment_prefix,
        )
        if config.strategy:
            disassembler.select(config.strategy)
        return disassembler

    # -------------------------------------------------------------------------
    # Strategy Selection
    # -------------------------------------------------------------------------

    def select(self, name: Optional[str] = None):
        """Select a strategy (see StrategyRegistry.select)."""
        with self._lock:
            return self.registry.select(name)

    def strategies(self) -> list[Strategy]:
        return self.registry.entries()

    @property
    def active(self) -> Optional[Strategy]:
        with self._lock:
            return self.registry.active

    # -------------------------------------------------------------------------
    # Disassembly
    # -------------------------------------------------------------------------

    def render(self, reference: Any, strategy: Optional[str] = None) -> Optional[str]:
        """
        Return the unformatted strategy output for ``reference``.

        Returns None if no strategy is available.
        """
        resolved = self.resolver.resolve(reference)
        if isinstance(resolved, InterpretedSource):
            return resolved.text

        with self._lock:
            handler = self.registry.select(strategy)
            if handler is None:
                return None
            return handler(resolved)

    def disassemble(self, reference: Any, strategy: Optional[str] = None) -> Optional[str]:
        """
        Disassemble ``reference`` and return comment-formatted text.

        Args:
            reference: Function, method, class, symbol or raw bytes
            strategy: Strategy name to select for this and later calls

        Returns:
            The formatted listing, or None when no strategy is available

        Raises:
            StrategyUnknown, StrategyUnavailable: for a bad ``strategy``
            SymbolNotFound, CodeUnreadable: if the bytes cannot be found
        """
        text = self.render(reference, strategy)
        if text is None:
            return None
        return format_listing(text, self.prefix)


def disassemble(reference: Any, strategy: Optional[str] = None) -> Optional[str]:
    """Disassemble ``reference`` with a freshly configured Disassembler."""
    return Disassembler.from_config().disassemble(reference, strategy)
