"""
Source Location (Span)

Every declaration, pattern and diagnostic points back into the .rec source
through one of these.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    Source span: file, line, column, with optional byte offsets and end position.

    Immutable (frozen) so it can sit inside frozen declaration and plan nodes.
    """
    file: str
    line: int
    column: int
    start: int = 0
    end: int = 0
    end_line: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"
