from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    If this module is executed as a script (``python lights_out/__main__.py``),
    the package may not be discoverable by Python. This helper inserts the
    parent directory of the package into ``sys.path`` so that imports resolve.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m lights_out
    from .app import run  # type: ignore[attr-defined]
    from .reaction_core import LightsOutConfig  # type: ignore[attr-defined]
    from .recorder import BestTimePolicy  # type: ignore[attr-defined]
except ImportError:
    # Works when executed as a script (IDE "Run Python File", absolute path, etc.)
    _ensure_repo_root_on_path()
    from lights_out.app import run  # type: ignore[attr-defined]
    from lights_out.reaction_core import LightsOutConfig  # type: ignore[attr-defined]
    from lights_out.recorder import BestTimePolicy  # type: ignore[attr-defined]


def main(argv: list[str] | None = None) -> int:
    """Entry point for running the trainer from the command line."""
    parser = argparse.ArgumentParser(description="Lights Out reaction trainer")
    parser.add_argument("--verbose", action="store_true", help="Log timer and game events at DEBUG level")
    parser.add_argument(
        "--best-time-policy",
        choices=[p.value for p in BestTimePolicy],
        default=BestTimePolicy.KEEP.value,
        help="Keep the best time until quit, or reset it each time the test is opened",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = LightsOutConfig(best_time_policy=BestTimePolicy(args.best_time_policy))
    return run(config=config)


if __name__ == "__main__":
    raise SystemExit(main())
