import re
from datetime import datetime

from .asm import DebugInfo, Instruction, Module
from .classify import StrKind, classify
from .errors import (
    ArgumentCountError,
    DuplicateDeclarationError,
    DuplicateParameterError,
    ImmutableAssignmentError,
    InternalError,
    ParameterShadowsDeclarationError,
    UndefinedIdentifierError,
    UnexpectedExpressionError,
)
from .scope import Declaration, DeclarationKind, FunctionDeclaration, Scope
from .walker import ParseTreeListener

VERSION = "1.0.1"

BINARY_OPS = {
    "AND": "and",
    "OR": "or",
    "EQ": "eq",
    "NEQ": "neq",
    "LT": "lt",
    "LTEQ": "lte",
    "GT": "gt",
    "GTEQ": "gte",
    "PLUS": "add",
    "MINUS": "sub",
    "MOD": "mod",
    "MULT": "mul",
    "DIV": "div",
}

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)

REESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r", "\0": "\\0"}

_UNSAFE_RE = re.compile(r'["\\\x00-\x1f\x7f]')


def dequote(s):
    """Strip the surrounding quotes of a string literal and resolve escapes."""
    return _ESCAPE_RE.sub(lambda m: ESCAPES.get(m.group(1), m.group(1)), s[1:-1])


def quote(s):
    """Quote `s` as a single line assembly operand."""
    return '"' + _UNSAFE_RE.sub(lambda m: REESCAPES.get(m.group(), f"\\x{ord(m.group()):02x}"), s) + '"'


class CodeGenerator(ParseTreeListener):
    """
    Single pass code generator driven by `walker.walk()`.

    Operands emit their own code before the rule that combines them exits,
    so every exit handler only appends the instruction for its own node.
    One generator compiles one source; it is not reusable.
    """

    def __init__(self, code, origin, labels):
        self.code = code
        self.origin = origin
        self.labels = labels
        self.output = []
        self.scope = Scope()  # Initially the global scope.
        self.fun_params = None
        self.fun_ends = []

    def get_module(self):
        if not self.scope.is_global():
            raise InternalError("Compilation ended outside of the global scope", 0, -1, self.code, self.origin)
        return Module(tuple(self.output), self.scope)

    # -- helpers --

    def position(self, tree):
        meta = tree.meta
        # Empty rules carry no position.
        return getattr(meta, "line", 1), getattr(meta, "column", 1) - 1

    def emit(self, tree, instruction=None, comment=None, label=None):
        line, column = self.position(tree)
        dbg = DebugInfo(line, column, self.origin)
        self.output.append(Instruction(label, instruction, comment, dbg))

    def error(self, cls, tree, msg):
        line, column = self.position(tree)
        return cls(msg, line, column, self.code, self.origin)

    def exit_scope(self, tree):
        if self.scope.parent is None:
            raise self.error(InternalError, tree, "Exit global scope")
        self.scope = self.scope.parent

    def add_var(self, tree, kind):
        ent = classify(tree.children[0].value, self.scope)
        name = ent.text
        if ent.kind is StrKind.UNDEF:
            self.emit(tree, f"pop {name}")
            self.scope.add_declaration(Declaration(kind, name))
        elif ent.kind is StrKind.NUM:
            raise self.error(UnexpectedExpressionError, tree, f"Unexpected expression ({name})")
        else:
            raise self.error(DuplicateDeclarationError, tree, f"Duplicate '{name}' declaration")

    def emit_binary(self, tree):
        self.emit(tree, BINARY_OPS[tree.children[1].type])

    # -- program --

    def enter_mash(self, tree):
        now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self.emit(tree, comment=f"Generated by mash compiler ver. {VERSION} on {now}")

    def exit_mash(self, tree):
        self.emit(tree, "exit")

    # -- expressions --

    def exit_unary_expr(self, tree):
        self.emit(tree, "neg" if tree.children[0].type == "MINUS" else "not")

    exit_and_or_expr = emit_binary
    exit_eq_neq_expr = emit_binary
    exit_comp_expr = emit_binary
    exit_plus_minus_expr = emit_binary
    exit_mult_div_mod_expr = emit_binary

    def exit_atom(self, tree):
        tok = tree.children[0]
        if tok.type == "NULL":
            self.emit(tree, "push null")
        elif tok.type in ("TRUE", "FALSE"):
            self.emit(tree, f"push {1 if tok.type == 'TRUE' else 0}")
        elif tok.type in ("SQSTRING", "DQSTRING"):
            self.emit(tree, f"push {quote(dequote(tok.value))}")
        else:
            ent = classify(tok.value, self.scope)
            if ent.kind in (StrKind.VAL, StrKind.VAR, StrKind.NUM):
                self.emit(tree, f"push {ent.text}")
            else:
                raise self.error(UndefinedIdentifierError, tree, f"Undefined identifier ({ent.text})")

    def enter_compound_expr(self, tree):
        self.scope = self.scope.create_child()

    def exit_compound_expr(self, tree):
        self.exit_scope(tree)

    def exit_call_expr(self, tree):
        ent = classify(tree.children[0].value, self.scope)
        name = ent.text
        nargs = len(tree.children) - 1
        if ent.kind is StrKind.UNDEF:
            raise self.error(UndefinedIdentifierError, tree, f"Undefined function ({name})")
        if ent.kind not in (StrKind.FUN, StrKind.NAT):
            raise self.error(UnexpectedExpressionError, tree, f"'{name}' is not a function")

        decl = self.scope.get_declaration(name)
        if nargs != len(decl.params):
            raise self.error(
                ArgumentCountError,
                tree,
                f"'{name}' expects {len(decl.params)} argument(s), got {nargs}",
            )
        if ent.kind is StrKind.FUN:
            self.emit(tree, f"call {decl.label}", f"{name}()")
        else:
            self.emit(tree, f"calln {name}")

    # -- declarations --

    def exit_val_decl(self, tree):
        self.add_var(tree, DeclarationKind.VAL)

    def exit_var_decl(self, tree):
        self.add_var(tree, DeclarationKind.VAR)

    def exit_assign_decl(self, tree):
        ent = classify(tree.children[0].value, self.scope)
        name = ent.text
        if ent.kind is StrKind.VAR:
            self.emit(tree, f"pop {name}")
        elif ent.kind is StrKind.UNDEF:
            raise self.error(UndefinedIdentifierError, tree, f"Undefined identifier ({name})")
        elif ent.kind is StrKind.NUM:
            raise self.error(UnexpectedExpressionError, tree, f"Unexpected expression ({name})")
        else:
            raise self.error(ImmutableAssignmentError, tree, f"Cannot assign to '{name}'")

    def enter_def_header(self, tree):
        self.fun_params = []

    def enter_nat_def_decl(self, tree):
        self.fun_params = []

    def exit_fun_param_list(self, tree):
        ent = classify(tree.children[-1].value, self.scope)
        param = ent.text
        if ent.kind is not StrKind.UNDEF:
            raise self.error(
                ParameterShadowsDeclarationError,
                tree,
                f"Function parameter ({param}) overrides existing identifier",
            )
        if param in self.fun_params:
            raise self.error(DuplicateParameterError, tree, f"Duplicate function parameter ({param})")
        self.fun_params.append(param)

    def exit_nat_def_decl(self, tree):
        ent = classify(tree.children[0].value, self.scope)
        if ent.kind is not StrKind.UNDEF:
            raise self.error(DuplicateDeclarationError, tree, f"Non-unique native function name ({ent.text})")
        self.scope.add_declaration(FunctionDeclaration(DeclarationKind.NAT, ent.text, tuple(self.fun_params)))

    def exit_def_header(self, tree):
        ent = classify(tree.children[0].value, self.scope)
        name = ent.text
        if ent.kind is not StrKind.UNDEF:
            raise self.error(DuplicateDeclarationError, tree, f"Non-unique function name ({name})")

        params = tuple(self.fun_params)
        start = self.labels.next()
        end = self.labels.next()
        # Registered before the body so it can call itself.
        self.scope.add_declaration(FunctionDeclaration(DeclarationKind.FUN, name, params, start))

        self.emit(tree, f"jmp {end}")
        self.emit(tree, label=start, comment=f"def {name}({', '.join(params)})")
        # Arguments are pushed left to right.
        for param in reversed(params):
            self.emit(tree, f"pop {param}")

        self.scope = self.scope.create_child()
        for param in params:
            self.scope.add_declaration(Declaration(DeclarationKind.VAL, param))
        self.fun_ends.append(end)

    def exit_def_decl(self, tree):
        self.emit(tree, "ret")
        self.emit(tree, label=self.fun_ends.pop())
        self.exit_scope(tree)
