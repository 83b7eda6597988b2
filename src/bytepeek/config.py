"""
bytepeek Configuration
======================

Configuration for a Disassembler service. Values come from:
- Default values (defined here)
- Environment variables (DisassemblerConfig.from_env)
- Command-line options (the bytepeek CLI overrides individual fields)

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from typing import Optional
import os

from bytepeek.formatter import COMMENT_PREFIX


@dataclass
class DisassemblerConfig:
    """
    Configuration for disassembly.

    Attributes:
        strategy: Strategy to select explicitly (None = first available)
        tool: Executable used by the external "pydisasm" strategy
        tool_timeout: Seconds to wait for the external tool
        comment_prefix: Prefix written before every output line
    """

    strategy: Optional[str] = None
    tool: str = "pydisasm"
    tool_timeout: float = 30.0
    comment_prefix: str = COMMENT_PREFIX

    @classmethod
    def from_env(cls) -> "DisassemblerConfig":
        """
        Create DisassemblerConfig from environment variables.

        Environment variables (all optional):
            BYTEPEEK_STRATEGY: Strategy name to select (e.g., "dis")
            BYTEPEEK_TOOL: External disassembler executable
            BYTEPEEK_TOOL_TIMEOUT: Tool timeout in seconds

        Returns:
            DisassemblerConfig with values from environment variables
        """
        config = cls()

        if strategy := os.environ.get("BYTEPEEK_STRATEGY"):
            config.strategy = strategy

        if tool := os.environ.get("BYTEPEEK_TOOL"):
            config.tool = tool

        if timeout := os.environ.get("BYTEPEEK_TOOL_TIMEOUT"):
            try:
                config.tool_timeout = float(timeout)
            except ValueError:
                pass  # Ignore invalid values

        return config
