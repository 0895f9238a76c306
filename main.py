"""TTS Script Bridge — launcher. Mirrors game scripts to disk and serves the command API."""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from tts_bridge.app import create_app
from tts_bridge.codec import Framing
from tts_bridge.config import Settings

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")


def main():
    parser = argparse.ArgumentParser(description="TTS Script Bridge")
    parser.add_argument("--scripts-dir", type=Path, default=None,
                        help="Where to mirror scripts (default: ./scripts)")
    parser.add_argument("--host", default=None, help="Interface for all sockets")
    parser.add_argument("--ide-port", type=int, default=None,
                        help="Port the game connects to")
    parser.add_argument("--game-port", type=int, default=None,
                        help="Port commands are sent to")
    parser.add_argument("--api-port", type=int, default=None,
                        help="Port for the HTTP command API")
    parser.add_argument("--framing", choices=["structural", "newline"], default=None,
                        help="How inbound messages are delimited")
    parser.add_argument("--idle-timeout", type=float, default=None,
                        help="Close game connections idle for this many seconds")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env().override(
            scripts_dir=args.scripts_dir,
            host=args.host,
            ide_port=args.ide_port,
            game_port=args.game_port,
            api_port=args.api_port,
            framing=Framing(args.framing) if args.framing else None,
            idle_timeout=args.idle_timeout,
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    print(f"Mirroring scripts into {settings.scripts_dir.resolve()}")
    print(f"Command API on http://{settings.host}:{settings.api_port}/api ...")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.api_port,
                log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
