from dataclasses import dataclass
from enum import Enum

from .scope import DeclarationKind

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Spellings of non-finite doubles, case-sensitive as in Java's Double.parseDouble.
JAVA_DOUBLE_WORDS = ("NaN", "Infinity")


class StrKind(Enum):
    NUM = "num"
    VAR = "var"
    VAL = "val"
    ALS = "als"
    FUN = "fun"
    NAT = "nat"
    UNDEF = "undef"


_DECL_KINDS = {
    DeclarationKind.VAL: StrKind.VAL,
    DeclarationKind.VAR: StrKind.VAR,
    DeclarationKind.ALS: StrKind.ALS,
    DeclarationKind.FUN: StrKind.FUN,
    DeclarationKind.NAT: StrKind.NAT,
}


@dataclass(frozen=True)
class StrEntity:
    kind: StrKind
    text: str


def is_number(text):
    """True if `text`, with `_` separators removed, is a long or a double."""
    num = text.replace("_", "")
    if num in JAVA_DOUBLE_WORDS:
        return True
    # float() also takes "inf", "nan" in any case; only the words above count.
    if not num or not (num[0].isdigit() or num[0] == "."):
        return False
    try:
        if INT64_MIN <= int(num) <= INT64_MAX:
            return True
    except ValueError:
        pass
    # Out of range longs still read as doubles.
    try:
        float(num)
        return True
    except ValueError:
        return False


def classify(text, scope):
    decl = scope.get_declaration(text)
    if decl is not None:
        return StrEntity(_DECL_KINDS[decl.kind], text)
    if is_number(text):
        return StrEntity(StrKind.NUM, text)
    return StrEntity(StrKind.UNDEF, text)
