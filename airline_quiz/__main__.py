from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    # Running airline_quiz/__main__.py as a file needs the checkout root importable.
    repo_root_str = str(Path(__file__).resolve().parent.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    from .app import configure_logging, run  # type: ignore[attr-defined]
except ImportError:
    _ensure_repo_root_on_path()
    from airline_quiz.app import configure_logging, run  # type: ignore[attr-defined]


def main() -> int:
    configure_logging()
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
