from pathlib import Path

import pytest

from plusplus import run

EXAMPLES = Path(__file__).parent.parent / "exemplos"


@pytest.fixture
def tree_src():
    return (EXAMPLES / "tree.pp").read_text(encoding="utf-8")


@pytest.fixture
def run_lines():
    """
    Executa um programa e retorna as linhas impressas.
    """

    def runner(src):
        lines = []
        run(src, output=lines.append)
        return lines

    return runner
