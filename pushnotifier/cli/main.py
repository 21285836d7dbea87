"""
Command-line interface for pushnotifier.

Usage:
    pushnotifier register
    pushnotifier login
    pushnotifier getdevices [--details]
    pushnotifier send [TEXT] [-u URL] [-i IMAGE] [-d DEVICES] [-n] [-s]
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from pushnotifier.client import PushNotifier
from pushnotifier.config import ConfigError, ConfigLoader, PushNotifierConfig
from pushnotifier.errors import PushNotifierError
from pushnotifier.logging_config import setup_logging

logger = logging.getLogger(__name__)

DOCS_URL = "https://api.pushnotifier.de/v2/doc/"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class CommandError(Exception):
    """Invalid command usage; reported to the user without a traceback."""


def _client_from(config: PushNotifierConfig) -> PushNotifier:
    if not config.is_registered:
        raise CommandError(
            "no package name or api token can be found. "
            "please use `register` command to register"
        )
    return PushNotifier.from_config(config)


def _parse_devices(values: Optional[List[str]]) -> List[str]:
    """Flatten repeated and comma-separated ``-d`` values."""
    devices: List[str] = []
    for value in values or []:
        devices.extend(part.strip() for part in value.split(",") if part.strip())
    return devices


def cmd_register(args: argparse.Namespace, loader: ConfigLoader) -> int:
    """Prompt for API credentials and write them to the config file."""
    print(f"Please register your API authentication details. For more info: {DOCS_URL}\n")
    package_name = input("Enter your application package name: ").strip()
    app_token = getpass.getpass("APP Token: ").strip()
    api_token = getpass.getpass("API Token: ").strip()

    if not package_name or not api_token:
        raise CommandError("package name and API token are required")

    path = loader.update(
        {
            "PACKAGE_NAME": package_name,
            "API_TOKEN": api_token,
            "APP_TOKEN": app_token or None,
        }
    )
    print(f"writing authentication details to config: {path}")
    return 0


def cmd_login(args: argparse.Namespace, loader: ConfigLoader) -> int:
    """Log in as a user and store the obtained app token."""
    config = loader.load()
    username = args.username or input("Username: ").strip()
    password = getpass.getpass("Password: ")

    with _client_from(config.model_copy(update={"app_token": None})) as client:
        client.login(username, password)
        app_token = client.app_token

    path = loader.update({"APP_TOKEN": app_token})
    print(f"app token for {username} stored in config: {path}")
    return 0


def cmd_getdevices(args: argparse.Namespace, loader: ConfigLoader) -> int:
    """Print the devices registered on the account."""
    with _client_from(loader.load()) as client:
        devices = client.list_devices()

    for device in devices:
        if args.details:
            print("\t".join([device.id, device.title or "", device.model or ""]))
        else:
            print(device.id)
    return 0


def cmd_send(args: argparse.Namespace, loader: ConfigLoader) -> int:
    """Send text, URL, text with URL and/or image notifications."""
    text = args.text or ""
    url = args.url or ""
    image = args.image or ""
    devices = _parse_devices(args.devices)

    if not (text or url or image):
        raise CommandError("nothing to send: give text, --url and/or --image")
    if args.notify and not (text or url):
        raise CommandError(
            "notify send option was selected however text and or url content not provided"
        )

    with _client_from(loader.load()) as client:
        if args.notify or (text and url):
            logger.info("Sending notification with both text and url")
            client.send_text_and_url(text, url, devices, args.silent)
        elif text:
            logger.info("Sending text notification")
            client.send_text(text, devices, args.silent)
        elif url:
            logger.info("Sending URL notification")
            client.send_url(url, devices, args.silent)

        if image:
            logger.info("Sending image notification")
            client.send_image(image, devices, args.silent)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pushnotifier",
        description="Send push notifications to your devices via pushnotifier.de",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to the YAML config file")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines")

    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="Registers API authentication details")
    register.set_defaults(func=cmd_register)

    login = subparsers.add_parser("login", help="Obtain and store an app token for a user")
    login.add_argument("username", nargs="?", default=None, help="PushNotifier user name")
    login.set_defaults(func=cmd_login)

    getdevices = subparsers.add_parser("getdevices", help="Get connected devices")
    getdevices.add_argument(
        "--details", action="store_true", help="Also print device title and model"
    )
    getdevices.set_defaults(func=cmd_getdevices)

    send = subparsers.add_parser(
        "send", help="Sends different types of content to registered devices"
    )
    send.add_argument("text", nargs="?", default="", help="Text content to send")
    send.add_argument("-u", "--url", default="", help="The URL to include in the notification")
    send.add_argument("-i", "--image", default="", help="The path to an image to send")
    send.add_argument(
        "-d",
        "--devices",
        action="append",
        help="Device IDs to notify, comma-separated; defaults to all devices",
    )
    send.add_argument(
        "-n",
        "--notify",
        action="store_true",
        help="Send one notification with both text and url; tapping opens the URL",
    )
    send.add_argument("-s", "--silent", action="store_true", help="Send in silent mode")
    send.set_defaults(func=cmd_send)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run the selected command."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, json_format=args.log_json)

    try:
        loader = ConfigLoader(args.config)
        return args.func(args, loader)
    except (CommandError, ConfigError, PushNotifierError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Aborted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
