# __main__.py

import sys
import argparse
from pathlib import Path

from rich.console import Console

from .config import ClientConfig, find_config_file, load_config, write_default_config
from .errors import ConfigError
from .interface import Interface


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='routerline', description='Streaming terminal chat client')
    parser.add_argument('-c', '--config',
        help='Path to config.yaml (default: ./config.yaml, then ~/.openrouter/config.yaml)')
    parser.add_argument('-m', '--model',
        help='Model identifier, e.g. openai/gpt-3.5-turbo')
    parser.add_argument('-e', '--endpoint',
        help='Chat completions endpoint URL')
    parser.add_argument('--max-tokens', type=int,
        help='Maximum tokens to generate (0 to omit)')
    parser.add_argument('--timeout', type=float,
        help='Overall request timeout in seconds')
    parser.add_argument('--system',
        help='System prompt sent before the conversation')
    parser.add_argument('--enable-logging',
        action='store_true',
        help='Enable debug logging')
    parser.add_argument('--log-file',
        help='Log file path (use "-" for stdout)')
    return parser


def resolve_config(args, console: Console) -> ClientConfig:
    """
    Load, overlay and validate configuration.

    Raises:
        ConfigError: If the configuration is unusable.
        SystemExit(0): After writing a template config file.
    """
    path = find_config_file(args.config)
    if path is None:
        target = Path(args.config).expanduser() if args.config else Path.cwd() / "config.yaml"
        write_default_config(target)
        console.print(f"Created {target}. Please update it with your API key.")
        console.print("You can get your API key at: https://openrouter.ai/keys")
        console.print("Rerun the application after setup.")
        raise SystemExit(0)

    config = ClientConfig.from_args(args, base=load_config(path))
    return config.validate()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    console = Console(stderr=True, highlight=False)

    try:
        config = resolve_config(args, console)
    except ConfigError as e:
        console.print(f"[red]Config error:[/red] {e}")
        return 1

    chat = Interface(config, logging_enabled=args.enable_logging, log_file=args.log_file)
    chat.start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
