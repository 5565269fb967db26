from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from activebody.core.logger import setup_logging
from activebody.core.offline import OfflineProcessor
from activebody.services.config_store import ConfigStore


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("activebody")
    sub = p.add_subparsers(dest="command", required=True)
    replay = sub.add_parser("replay", help="Replay a recorded body-frame file through the selector")
    replay.add_argument("recording", type=Path)
    replay.add_argument("--config", type=Path, default=Path("configs/default.yaml"))
    replay.add_argument("--mode", choices=["closest", "wave_last_raised"], default=None)
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = ConfigStore(args.config).config
    setup_logging(cfg.logging.level)
    if args.mode is not None:
        cfg = cfg.model_copy(
            update={"session": cfg.session.model_copy(update={"selection_mode": args.mode})}
        )
    result = OfflineProcessor(cfg).run(args.recording)
    print(json.dumps(result, indent=2))
    return 0 if result.get("ok") else 1


if __name__ == "__main__":
    sys.exit(main())
