class MashError(Exception):
    """
    Base class for every compile error. `str(err)` is the fully formatted,
    source-pointing diagnostic; the raw pieces stay available as attributes.
    """

    code = "E000"

    def __init__(self, msg, line, column, source, origin):
        self.msg = msg
        self.line = line
        self.column = column
        self.origin = origin
        super().__init__(format_error(msg, line, column, source, origin))


class MashSyntaxError(MashError):
    code = "E001"


class DuplicateDeclarationError(MashError):
    code = "E002"


class UndefinedIdentifierError(MashError):
    code = "E003"


class UnexpectedExpressionError(MashError):
    code = "E004"


class DuplicateParameterError(MashError):
    code = "E005"


class ParameterShadowsDeclarationError(MashError):
    code = "E006"


class ImmutableAssignmentError(MashError):
    code = "E007"


class ArgumentCountError(MashError):
    code = "E008"


class InternalError(MashError):
    code = "E100"


EMPTY = "<empty>"

# Markers of parser messages whose reported column is one off.
OFF_BY_ONE_MARKERS = ("extraneous input", "mismatched input")


def decapitalize(s):
    return s[:1].lower() + s[1:]


def error_pointer(msg, src_line, column):
    """Return `(pointer, trimmed_line)` for a 0-based column in `src_line`."""
    trimmed = src_line.strip()
    if not trimmed or column < 0:
        return EMPTY, EMPTY

    pos = column - (len(src_line) - len(src_line.lstrip()))
    if any(m in msg for m in OFF_BY_ONE_MARKERS):
        pos += 1

    n = len(trimmed)
    pos = min(max(0, pos), n)
    dash = "-" * n
    if pos == n:
        return dash + "^", trimmed
    return dash[:pos] + "^" + dash[pos + 1:], trimmed


def format_message(msg):
    text = decapitalize(msg.strip())
    # Cut the long "expecting ..." tail off syntax errors.
    idx = text.find("expecting")
    if idx >= 0:
        text = text[:idx].strip()
    return text if text.endswith(".") else f"{text}."


def format_error(msg, line, column, source, origin):
    """
    Render an error as a three line diagnostic:

        Mash error in 'origin' at line 3 - undefined identifier (y).
          |-- Line:  val x = y + 1
          +-- Error: --------^----

    `line` is 1-based and `column` 0-based, both relative to `source`.
    """
    lines = source.split("\n")
    src_line = lines[line - 1] if 1 <= line <= len(lines) else ""
    ptr, shown = error_pointer(msg, src_line, column)

    return (
        f"Mash error in '{origin}' at line {line} - {format_message(msg)}\n"
        f"  |-- Line:  {shown}\n"
        f"  +-- Error: {ptr}"
    )
