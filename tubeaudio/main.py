import argparse
import asyncio
import json
import sys

from colorama import Fore, Style, init as colorama_init

from tubeaudio import __version__
from tubeaudio.bootstrap import configure_logging, create_container
from tubeaudio.core.config import Settings
from tubeaudio.core.errors import InvalidReference, ResolutionFailure
from tubeaudio.web.server import AudioServer


def _print_banner(info: dict):
    print(f"{Fore.GREEN}{Style.BRIGHT}tubeaudio {__version__}{Style.RESET_ALL} running on port {info['port']}")
    print(f"  Local:   {Fore.CYAN}{info['local_url']}{Style.RESET_ALL}")
    print(f"  Network: {Fore.CYAN}{info['lan_url']}{Style.RESET_ALL}")


def cmd_serve(settings: Settings) -> int:
    container = create_container(settings)
    server = AudioServer(container["media_service"], settings)
    info = server.prepare()
    _print_banner(info)
    try:
        server.run_server()
    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
    return 0


def cmd_info(settings: Settings, url: str) -> int:
    container = create_container(settings)
    service = container["media_service"]
    try:
        summary = asyncio.run(service.get_summary(url))
    except InvalidReference as e:
        print(f"{Fore.RED}{e.message}: {url}{Style.RESET_ALL}", file=sys.stderr)
        return 2
    except ResolutionFailure as e:
        print(f"{Fore.RED}{e.message}{Style.RESET_ALL}", file=sys.stderr)
        return 1
    finally:
        service.close()
    print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="tubeaudio", description="YouTube to audio web service")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    serve_parser = subparsers.add_parser("serve", help="Run the web service (default)")
    serve_parser.add_argument("--host", help="Bind address (env HOST)")
    serve_parser.add_argument("--port", type=int, help="Listen port (env PORT)")
    serve_parser.add_argument("--log-level", help="Log level (env TUBEAUDIO_LOG_LEVEL)")

    info_parser = subparsers.add_parser("info", help="Print video info as JSON")
    info_parser.add_argument("url", help="YouTube video URL")

    args = parser.parse_args(argv)
    colorama_init()

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"{Fore.RED}Configuration error: {e}{Style.RESET_ALL}", file=sys.stderr)
        return 2

    if getattr(args, "host", None):
        settings.host = args.host
    if getattr(args, "port", None) is not None:
        settings.port = args.port
    if getattr(args, "log_level", None):
        settings.log_level = args.log_level.upper()

    configure_logging(settings)

    if args.command == "info":
        return cmd_info(settings, args.url)
    return cmd_serve(settings)


if __name__ == "__main__":
    sys.exit(main())
