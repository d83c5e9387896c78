import pytest

from mashc import MashCompiler


@pytest.fixture
def compiler():
    return MashCompiler(label_base=7)


@pytest.fixture
def ops(compiler):
    """Compile a snippet and return its operations, comments and labels dropped."""

    def run(code):
        module = compiler.compile_to_asm(code, "test.mash")
        return [i.operation for i in module.instructions if i.operation]

    return run
