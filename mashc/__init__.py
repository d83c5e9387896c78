from .asm import DebugInfo, Executable, Instruction, LabelGenerator, Module
from .classify import StrEntity, StrKind, classify
from .codegen import VERSION as __version__
from .compiler import CompilerErrorListener, MashCompiler
from .errors import (
    ArgumentCountError,
    DuplicateDeclarationError,
    DuplicateParameterError,
    ImmutableAssignmentError,
    InternalError,
    MashError,
    MashSyntaxError,
    ParameterShadowsDeclarationError,
    UndefinedIdentifierError,
    UnexpectedExpressionError,
    format_error,
)
from .scope import Declaration, DeclarationKind, FunctionDeclaration, Scope
