from __future__ import annotations

import argparse
import logging
import signal
import threading
from typing import List, Optional

from rplat.core.errors import RouterError
from rplat.platforms.registry import supported_platforms
from rplat.runtime.config import load_agent_config
from rplat.runtime.lifecycle import Router
from rplat.utils.io import dumps_json


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rplat", description="Router platform detection and lifecycle tool")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("detect", help="Print the detected router platform")
    sub.add_parser("platforms", help="List supported router platforms")
    sub.add_parser("listen-address", help="Print the address the agent listens on")
    sub.add_parser("pre-run", help="Block until the router is ready to run the agent")

    p_watch = sub.add_parser("watch", help="Watch lease files and print the client table")
    p_watch.add_argument("--config", required=True, help="YAML agent config path.")
    p_watch.add_argument("--interval", type=float, default=10.0, help="Seconds between table dumps.")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    log = logging.getLogger("rplat.cli")

    if args.cmd == "platforms":
        print(dumps_json(supported_platforms()))
        return 0

    router = Router.detect()
    if args.cmd == "detect":
        print(router.name or "unknown")
        return 0 if router.platform is not None else 1

    if args.cmd == "listen-address":
        print(router.listen_address())
        return 0

    stop = threading.Event()
    _install_signal_handlers(stop, log)
    try:
        if args.cmd == "pre-run":
            router.pre_run(stop)
            return 0

        if args.cmd == "watch":
            cfg = load_agent_config(args.config)
            router.configure(cfg)
            while not stop.wait(args.interval):
                rows = [vars(record) for record in router.state.client_info.snapshot()]
                print(dumps_json(rows), flush=True)
            return 0
    except RouterError as exc:
        log.error("%s failed: %s", args.cmd, exc)
        return 1
    return 2


def _install_signal_handlers(stop: threading.Event, log: logging.Logger) -> None:
    def _handle_signal(signum, _frame) -> None:  # type: ignore[no-untyped-def]
        log.info("received signal %s, stopping", signum)
        stop.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)


if __name__ == "__main__":
    raise SystemExit(main())
