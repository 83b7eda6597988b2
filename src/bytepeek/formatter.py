"""
Output Formatter
================

Turns disassembler output into a comment block: every line gets a ``"; "``
prefix and a newline terminator.

Only ``\\n``, ``\\r\\n`` and ``\\r`` end a line. Other characters that
``str.splitlines()`` treats as breaks (form feed, ``\\x85``, ``\\u2028``)
stay inside the line they appear in.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import re

COMMENT_PREFIX = "; "

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def format_listing(text: str, prefix: str = COMMENT_PREFIX) -> str:
    """
    Prefix each line of ``text`` and join with newlines.

    A trailing line terminator does not produce an extra empty line:

        >>> format_listing("a\\nb\\n")
        '; a\\n; b\\n'
    """
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return "".join(f"{prefix}{line}\n" for line in lines)
