"""
Slack Emoji Upload - Sync a local directory of images with a Slack workspace's custom emojis

This tool allows you to:
1. List all custom emojis of a workspace
2. Upload every image in a directory as a custom emoji
3. Download all custom emoji images
4. Delete custom emojis

Authentication is handled via the session cookie of a logged-in browser. The
API token is scraped from the workspace's customize/emoji page.
"""

import argparse
import json
import logging
import sys

from .config import load_configuration
from .download import download_emojis
from .errors import ErrorKind, SlackEmojiError
from .remove import delete_emojis
from .upload import post_emojis
from .workspace import connect, open_workspace

logger = logging.getLogger("slack_emoji_upload.cli")

# Exit codes
EXIT_CONFIGURATION = 1
EXIT_CONNECTION = 2
EXIT_COMMAND = 3


def setup_argparse():
    """Configure command-line argument parsing"""
    parser = argparse.ArgumentParser(description="Sync a directory of images with Slack custom emojis")

    # Common arguments
    parser.add_argument("--configuration-file-path",
                        help="Path to a JSON configuration file")
    parser.add_argument("--team-name", "-t",
                        help="Slack team name, the <team> of <team>.slack.com (default: $SLACK_TEAM)")
    parser.add_argument("--cookie", "-c",
                        help="Session cookie from the Slack web interface (default: $SLACK_COOKIE)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log request details")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # List command
    list_parser = subparsers.add_parser("list", help="List all custom emojis in the workspace")
    list_parser.add_argument("--output-file",
                             help="JSON file to save the emoji name to URL mapping")

    # Upload command
    upload_parser = subparsers.add_parser("upload", help="Upload every image in a directory as an emoji")
    upload_parser.add_argument("--directory", "-d",
                               help="Directory with emoji files to upload")
    upload_parser.add_argument("--prefix", "-p",
                               help="Prefix added to generated emoji names (default: $EMOJI_NAME_PREFIX)")
    upload_parser.add_argument("--suffix", "-s",
                               help="Suffix added to generated emoji names (default: $EMOJI_NAME_SUFFIX)")
    upload_parser.add_argument("--taken-prefix",
                               help="Prefix added when the name is taken by a built-in emoji")
    upload_parser.add_argument("--taken-suffix",
                               help="Suffix added when the name is taken by a built-in emoji (required)")

    # Download command
    download_parser = subparsers.add_parser("download", help="Download all custom emoji images")
    download_parser.add_argument("--output-dir", default="emoji_downloads",
                                 help="Directory to save emoji files (default: emoji_downloads)")

    # Delete command
    delete_parser = subparsers.add_parser("delete", help="Delete custom emojis")
    delete_parser.add_argument("names", nargs="*",
                               help="Emoji names to delete; every custom emoji when omitted")

    return parser


def list_command(context, args, configuration):
    """Print the existing custom emojis and optionally save them"""
    for name in sorted(context.emojis):
        print(f":{name}:")
    print(f"Found {len(context.emojis)} custom emojis (excluding aliases)")

    if args.output_file:
        with open(args.output_file, "w") as f:
            json.dump({name: emoji.url for name, emoji in sorted(context.emojis.items())}, f, indent=2)
        print(f"Emoji list saved to {args.output_file}")


def upload_command(context, args, configuration):
    progress = post_emojis(
        context,
        configuration.directory,
        configuration.prefix,
        configuration.suffix,
        configuration.taken_prefix,
        configuration.taken_suffix,
    )
    print(f"Uploaded {progress.uploaded} emojis, skipped {progress.skipped} existing emojis")


def download_command(context, args, configuration):
    downloaded = download_emojis(context, args.output_dir)
    print(f"Downloaded {len(downloaded)} emojis to {args.output_dir}")


def delete_command(context, args, configuration):
    deleted = delete_emojis(context, args.names)
    print(f"Deleted {deleted} emojis")


COMMANDS = {
    "list": list_command,
    "upload": upload_command,
    "download": download_command,
    "delete": delete_command,
}


def main(argv=None):
    """Main entry point for the script"""
    parser = setup_argparse()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_CONFIGURATION

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        configuration = load_configuration(
            args.configuration_file_path,
            team_name=args.team_name,
            cookie=args.cookie,
            directory=getattr(args, "directory", None),
            prefix=getattr(args, "prefix", None),
            suffix=getattr(args, "suffix", None),
            taken_prefix=getattr(args, "taken_prefix", None),
            taken_suffix=getattr(args, "taken_suffix", None),
        ).require("team_name", "cookie")
        if args.command == "upload":
            configuration.require("directory", "taken_suffix")
        workspace = open_workspace(configuration.team_name, configuration.cookie)
    except SlackEmojiError as exc:
        logger.error("loading configuration failed: %s", exc)
        return EXIT_CONFIGURATION

    try:
        context = connect(workspace)
    except SlackEmojiError as exc:
        logger.error("connecting to %s failed: %s", workspace.host, exc)
        if exc.kind is ErrorKind.TOKEN_NOT_FOUND:
            logger.error("Search the page source of %s for \"api_token\" to check the cookie",
                         workspace.customize_emoji_url)
        return EXIT_CONNECTION

    try:
        COMMANDS[args.command](context, args, configuration)
    except SlackEmojiError as exc:
        logger.error("%s failed: %s", args.command, exc)
        logger.error("Aborting on fatal error")
        return EXIT_COMMAND

    return 0


if __name__ == "__main__":
    sys.exit(main())
