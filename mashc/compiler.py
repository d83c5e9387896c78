import logging

from lark import Lark
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from .asm import Executable, LabelGenerator
from .codegen import CodeGenerator
from .errors import MashError, MashSyntaxError
from .walker import walk

logger = logging.getLogger(__name__)

parser = Lark.open(
    "mash.lark",
    rel_to=__file__,
    start="mash",
    parser="lalr",
    lexer="basic",
    propagate_positions=True,
)


class CompilerErrorListener:
    """Turns parser errors into `MashSyntaxError`s for one source."""

    def __init__(self, code, origin):
        self.code = code
        self.origin = origin

    def syntax_error(self, line, column, msg):
        # line: 1, 2, ...; column: 0, 1, 2, ...
        raise MashSyntaxError(msg, line, column, self.code, self.origin)


def end_position(code):
    """Line and column just past the last non-blank character."""
    lines = code.rstrip().split("\n")
    return len(lines), len(lines[-1])


def report_syntax_error(listener, code, e):
    if isinstance(e, UnexpectedCharacters):
        listener.syntax_error(e.line, e.column - 1, f"Unexpected character '{e.char}'")
    elif isinstance(e, UnexpectedToken) and e.token.type != "$END":
        expected = ", ".join(sorted(e.expected))
        listener.syntax_error(e.line, e.column - 1, f"Unexpected input '{e.token}' expecting {expected}")
    elif isinstance(e, (UnexpectedToken, UnexpectedEOF)):
        line, column = end_position(code)
        listener.syntax_error(line, column, "Unexpected end of input")
    else:
        listener.syntax_error(e.line, e.column - 1, str(e))


class MashCompiler:
    """
    Compiles mash source into stack machine assembly.

    Labels come from a generator owned by the compiler, so they stay unique
    across every module one compiler produces. Not thread safe.
    """

    def __init__(self, label_base=None):
        self.labels = LabelGenerator(label_base)

    def compile_to_asm(self, code, origin):
        logger.debug("compiling '%s' (%d chars)", origin, len(code))
        listener = CompilerErrorListener(code, origin)
        try:
            try:
                tree = parser.parse(code)
            except UnexpectedInput as e:
                report_syntax_error(listener, code, e)

            gen = CodeGenerator(code, origin, self.labels)
            walk(gen, tree)
            module = gen.get_module()
        except MashError as e:
            logger.info("compilation of '%s' failed [%s]: %s", origin, e.code, e.msg)
            raise

        logger.debug("compiled '%s' into %d instruction(s)", origin, len(module.instructions))
        return module

    def compile(self, code, origin, debug=True):
        """Compile to the assembly text executed by the VM."""
        module = self.compile_to_asm(code, origin)
        return Executable(module.to_text(debug), origin)
