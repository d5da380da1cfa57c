"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local reportgen package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))


SAMPLE_TRACEFILE = """\
TN:
SF:src/calc/ops.c
FN:2,add
FN:10,divide
FNDA:4,add
FNDA:1,divide
DA:2,4
DA:3,4
DA:4,0
DA:10,1
DA:11,1
DA:12,0
BRDA:11,0,0,1
BRDA:11,0,1,0
LF:6
LH:4
end_of_record
SF:src/calc/main.c
FN:1,main
DA:1,1
DA:2,1
DA:3,1
end_of_record
"""


@pytest.fixture
def sample_text() -> str:
    """A two-file tracefile with functions and branches, as one string."""
    return SAMPLE_TRACEFILE


@pytest.fixture
def sample_lines() -> list[str]:
    """A two-file tracefile with functions and branches."""
    return SAMPLE_TRACEFILE.splitlines()


@pytest.fixture
def write_tracefile(tmp_path: Path) -> Callable[[str], Path]:
    """Write tracefile content to tmp_path/lcov.info and return the path."""

    def _write(content: str, name: str = "lcov.info") -> Path:
        path = tmp_path / name
        path.write_text(content)
        return path

    return _write
