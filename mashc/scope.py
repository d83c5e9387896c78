from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class DeclarationKind(Enum):
    VAR = "var"
    FUN = "fun"
    VAL = "val"
    ALS = "als"
    NAT = "nat"


@dataclass(frozen=True)
class Declaration:
    kind: DeclarationKind
    name: str


@dataclass(frozen=True)
class FunctionDeclaration(Declaration):
    """
    A `def` or `native def` declaration. `params` are the declaration-site
    parameter names in order; `label` is the jump target of a `def` body
    (natives have none).
    """

    params: Tuple[str, ...] = ()
    label: Optional[str] = None


class Scope:
    """
    A lexical namespace.

    A child scope starts with a snapshot copy of its parent's declarations
    taken when the child is created. From then on the two maps are
    independent: nothing declared later in either scope is seen by the other.
    """

    def __init__(self, parent=None):
        self.parent = parent
        self._decls = {}
        self._children = []

    def is_global(self):
        return self.parent is None

    def has_declaration(self, name):
        return name in self._decls

    def get_declaration(self, name):
        return self._decls.get(name)

    def add_declaration(self, decl):
        self._decls[decl.name] = decl

    def declarations(self):
        return list(self._decls.values())

    def children(self):
        return list(self._children)

    def create_child(self):
        child = Scope(self)
        child._decls = dict(self._decls)
        self._children.append(child)
        return child

    def __repr__(self):
        where = "global" if self.is_global() else "local"
        return f"<Scope {where} decls={sorted(self._decls)}>"
