"""
Built-in Disassembly Strategies
===============================

Three strategies ship with bytepeek, registered in this order:

- **pydisasm**: the external ``pydisasm`` tool (from the ``xdis``
  distribution), run out of process on a temporary ``.pyc`` file. Selected
  by default whenever it is on PATH.
- **dis**: the standard library disassembler, run in process.
- **hex**: a hex/ASCII dump of the raw buffer, for buffers that are not
  valid code for this interpreter.

Every strategy takes a marshalled code object and returns text.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import dis
import io
import logging
import marshal
import os
import shutil
import subprocess
import tempfile
from types import CodeType
from typing import Optional

from bytepeek.config import DisassemblerConfig
from bytepeek.errors import ToolError
from bytepeek.locators import make_pyc
from bytepeek.registry import StrategyRegistry

logger = logging.getLogger(__name__)


# =============================================================================
# In-Process Strategies
# =============================================================================

def dis_strategy(data: bytes) -> str:
    """Disassemble marshalled code with the ``dis`` module."""
    code = marshal.loads(data)
    if not isinstance(code, CodeType):
        raise TypeError(f"buffer holds {type(code).__name__}, not a code object")
    output = io.StringIO()
    dis.dis(code, file=output)
    return output.getvalue()


def hex_strategy(data: bytes, width: int = 16) -> str:
    """
    Dump a buffer as offset, hex bytes and printable ASCII.

    Example line:
        0000: e3 00 00 00 00 00 00 00 00 00 00 00 00 03 00 00  ................
    """
    lines = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        hex_str = " ".join(f"{b:02x}" for b in chunk)
        ascii_str = "".join(
            chr(b) if 0x20 <= b < 0x7F else "."
            for b in chunk
        )
        lines.append(f"{offset:04x}: {hex_str:<{width * 3 - 1}}  {ascii_str}")
    return "\n".join(lines)


# =============================================================================
# External Tool Strategy
# =============================================================================

class ExternalToolStrategy:
    """
    Runs an external disassembler on a temporary ``.pyc`` file.

    The tool is looked up on PATH each time is_available() is called, so a
    tool installed after start-up is picked up on the next selection.

    Args:
        executable: Tool name or path (default: "pydisasm")
        timeout: Seconds to wait for the tool
        extra_args: Arguments placed before the file name
    """

    def __init__(
        self,
        executable: str = "pydisasm",
        timeout: float = 30.0,
        extra_args: Optional[list[str]] = None,
    ):
        self.executable = executable
        self.timeout = timeout
        self.extra_args = list(extra_args or [])

    def locate(self) -> Optional[str]:
        return shutil.which(self.executable)

    def is_available(self) -> bool:
        return self.locate() is not None

    def __call__(self, data: bytes) -> str:
        path = self.locate()
        if path is None:
            raise ToolError(f"{self.executable} not found on PATH", name=self.executable)

        fd, pyc_path = tempfile.mkstemp(suffix=".pyc", prefix="bytepeek-")
        cmd = [path, *self.extra_args, pyc_path]
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(make_pyc(data))

            logger.debug(f"Running {' '.join(cmd)}")
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise ToolError(
                f"{self.executable} timed out after {self.timeout}s",
                name=self.executable,
                command=cmd,
            )
        except FileNotFoundError:
            raise ToolError(
                f"{self.executable} disappeared before it could run",
                name=self.executable,
                command=cmd,
            )
        finally:
            os.unlink(pyc_path)

        if result.returncode != 0:
            raise ToolError(
                f"{self.executable} exited with status {result.returncode}",
                name=self.executable,
                command=cmd,
                stderr=result.stderr,
                return_code=result.returncode,
            )
        return result.stdout

    def __repr__(self) -> str:
        return f"ExternalToolStrategy({self.executable!r})"


# =============================================================================
# Default Registry
# =============================================================================

def default_registry(config: Optional[DisassemblerConfig] = None) -> StrategyRegistry:
    """Create a registry holding the built-in strategies in fallback order."""
    if config is None:
        config = DisassemblerConfig()

    registry = StrategyRegistry()
    tool = ExternalToolStrategy(config.tool, timeout=config.tool_timeout)
    registry.register(
        "pydisasm",
        tool,
        probe=tool.is_available,
        description=f"external disassembler ({config.tool})",
    )
    registry.register("dis", dis_strategy, description="standard library dis module")
    registry.register("hex", hex_strategy, description="hex and ASCII dump")
    return registry
