from __future__ import annotations

import logging
import sys

from .config import load_config
from .demo import DemoApi
from .handler import Handler
from .server import run_server


def main() -> None:
    cfg = load_config()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    handler = Handler(DemoApi(), cfg.default_settings(), max_args=cfg.max_args)
    print(f"[httpize] serving {', '.join(sorted(handler.methods))} on {cfg.host}:{cfg.port}")
    run_server(handler, cfg.port, host=cfg.host)


if __name__ == "__main__":  # pragma: no cover - cli entry point
    try:
        main()
    except Exception as exc:  # noqa: BLE001
        print(f"[httpize] fatal error: {exc}", file=sys.stderr)
        sys.exit(1)
