import argparse
import getpass
import logging
import os
import sys
from typing import IO, List, Optional
from urllib.parse import unquote, urlparse

from remotefs.bridge import Bridge, is_error
from remotefs.config import (
    Config,
    ConfigError,
    RemoteConfig,
    RemoteNotFoundError,
    ValidationError,
)
from remotefs.session import SessionManager

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.remotefs.toml")

COMMANDS = {
    "ls": 1,
    "get": 2,
    "put": 2,
    "rm": 1,
    "mv": 2,
}


class Exit(Exception):
    pass


def config_file_type(path: str) -> Optional[IO[bytes]]:
    """Custom FileType that doesn't error if default file doesn't exist."""
    if path == DEFAULT_CONFIG_PATH and not os.path.exists(path):
        return None
    return open(path, "rb")


def resolve_remote(config: Config, remote: str) -> RemoteConfig:
    """Look up a named remote, or parse '[sftp://][user@]host[:port]'."""
    if remote in config.remotes:
        return config.get_remote(remote)

    if "@" not in remote and ":" not in remote and "." not in remote:
        # Looks like a name, not an address.
        return config.get_remote(remote)

    url = remote if remote.startswith("sftp://") else f"sftp://{remote}"
    try:
        parsed = urlparse(url)
        port = parsed.port or 22
    except ValueError as e:
        raise ValidationError(f"Invalid remote '{remote}': {e}")
    if not parsed.hostname:
        raise ValidationError(f"Invalid remote '{remote}': missing host")

    remote_config = RemoteConfig(
        name=remote,
        host=parsed.hostname,
        port=port,
        username=unquote(parsed.username) if parsed.username else "",
    )
    remote_config.validate()
    return remote_config


def run_command(bridge: Bridge, command: str, args: List[str]) -> str:
    match command:
        case "ls":
            return bridge.list(args[0])
        case "get":
            return bridge.download(args[0], args[1])
        case "put":
            return bridge.upload(args[0], args[1])
        case "rm":
            return bridge.delete(args[0])
        case "mv":
            return bridge.rename(args[0], args[1])
        case _:
            raise Exit(f"fatal error: unknown command '{command}'.")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the remotefs command line."""
    parser = argparse.ArgumentParser(
        prog="remotefs", description="browse and transfer files over SFTP"
    )
    parser.add_argument("--config", type=config_file_type, default=DEFAULT_CONFIG_PATH)
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("remote")
    parser.add_argument("command", choices=sorted(COMMANDS))
    parser.add_argument("args", nargs="*")

    args = parser.parse_args(argv)

    try:
        if args.config is None:
            config = Config()
        else:
            try:
                config = Config.from_file(args.config)
            except (ConfigError, ValidationError) as e:
                raise Exit(f"Configuration error: {e}")

        level = config.settings.log_level_number
        if args.verbose:
            level = logging.DEBUG if args.verbose > 1 else logging.INFO
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

        for warning in config.get_warnings():
            print(f"Warning: {warning}", file=sys.stderr)

        if len(args.args) != COMMANDS[args.command]:
            raise Exit(
                f"fatal error: '{args.command}' takes {COMMANDS[args.command]} argument(s)."
            )

        try:
            remote = resolve_remote(config, args.remote)
        except (RemoteNotFoundError, ValidationError) as e:
            raise Exit(str(e))

        username = remote.username or input("Username: ")
        password = getpass.getpass(f"{username}@{remote.host}'s password: ")

        bridge = Bridge(SessionManager(settings=config.settings))
        result = bridge.login(remote.host, remote.port, username, password)
        if is_error(result):
            print(result)
            return 1

        try:
            result = run_command(bridge, args.command, args.args)
        finally:
            bridge.disconnect()

        print(result)
        return 1 if is_error(result) else 0

    except Exit as e:
        print(e, file=sys.stderr)
        return 2
    finally:
        if args.config is not None:
            args.config.close()


if __name__ == "__main__":
    sys.exit(main())
