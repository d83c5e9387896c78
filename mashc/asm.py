import random
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import InternalError

LABEL_WIDTH = 10
INSTR_WIDTH = 15

_DEBUG_SUFFIX = re.compile(r' @(\d+),(-?\d+),"(.*)"$')


@dataclass(frozen=True)
class DebugInfo:
    line: int  # 1-based
    column: int  # 0-based
    origin: str

    def suffix(self):
        return f' @{self.line},{self.column},"{self.origin}"'


@dataclass(frozen=True)
class Instruction:
    label: Optional[str]
    operation: Optional[str]
    comment: Optional[str]  # without the leading ';'
    debug: DebugInfo

    def to_text(self, debug=False):
        lbl = f"{self.label}: " if self.label else ""
        cmt = f"; {self.comment}" if self.comment else ""
        if not self.operation:
            return f"{lbl} {cmt}"
        ins = self.operation + (self.debug.suffix() if debug else "")
        return f"{lbl:<{LABEL_WIDTH}} {ins:<{INSTR_WIDTH}} {cmt}"

    @classmethod
    def from_text(cls, text, origin=""):
        """Parse one line produced by `to_text()` back into an instruction."""
        rest = text.lstrip()
        label = None
        head, _, tail = rest.partition(" ")
        if head.endswith(":") and '"' not in head:
            label = head[:-1]
            rest = tail.lstrip()

        comment = None
        idx = find_comment(rest)
        if idx >= 0:
            comment = rest[idx + 1:]
            if comment.startswith(" "):
                comment = comment[1:]
            rest = rest[:idx]

        operation = rest.strip()
        dbg = DebugInfo(0, 0, origin)
        m = _DEBUG_SUFFIX.search(operation)
        if m:
            dbg = DebugInfo(int(m.group(1)), int(m.group(2)), m.group(3))
            operation = operation[:m.start()]

        return cls(label, operation or None, comment or None, dbg)


def find_comment(s):
    """Index of the first ';' outside a quoted string, or -1."""
    quote = None
    i = 0
    while i < len(s):
        c = s[i]
        if quote:
            if c == "\\":
                i += 1
            elif c == quote:
                quote = None
        elif c in "\"'":
            quote = c
        elif c == ";":
            return i
        i += 1
    return -1


@dataclass(frozen=True)
class Module:
    instructions: Tuple[Instruction, ...]
    global_scope: object

    def __post_init__(self):
        if not self.global_scope.is_global():
            raise InternalError("Module requires the global scope", 0, -1, "", "<module>")

    def to_text(self, debug=True):
        return "\n".join(i.to_text(debug) for i in self.instructions)


@dataclass(frozen=True)
class Executable:
    code: str
    origin: str


class LabelGenerator:
    """
    Hands out jump targets `L<base>-<n>`. The base is random per generator,
    so labels are unique within one compiler but not across compilers.
    """

    def __init__(self, base=None):
        self.base = random.randint(0, 2 ** 31 - 1) if base is None else base
        self.count = 0

    def next(self):
        lbl = f"L{self.base}-{self.count}"
        self.count += 1
        return lbl
