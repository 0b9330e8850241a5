from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import vox_audio  # noqa: F401


def test_import_leaves_root_logger_alone() -> None:
    script = (
        "import logging, os\n"
        "os.environ['LOG_LEVEL'] = 'DEBUG'\n"
        "import vox_audio\n"
        "root = logging.getLogger()\n"
        "print(len(root.handlers), root.level)\n"
    )
    result = subprocess.run(
        [sys.executable, "-c", script],
        cwd=ROOT,
        capture_output=True,
        text=True,
        check=True,
    )

    assert result.stdout.split() == ["0", str(logging.WARNING)]


def test_package_logger_has_only_a_null_handler() -> None:
    package_logger = logging.getLogger("vox_audio")

    assert package_logger.handlers
    assert all(isinstance(handler, logging.NullHandler) for handler in package_logger.handlers)
    assert logging.getLogger("vox_audio.mixer").handlers == []
