"""Generate pre-signed URLs for S3 compatible object stores using Signature Version 2 query-string authentication."""
import os
import sys
import json
import pprint
import logging
import argparse
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, NamedTuple, Optional

from jsonschema import validate

from s3sign import default_duration, default_method, presign
from s3sign.url import UnparsableURL
from s3sign.utils import expires_at, parse_duration


logging.basicConfig()
logger = logging.getLogger(__name__)

class CLI:
    exit_code = 0

    @classmethod
    def exit(cls, code: Optional[int]=None):
        sys.exit(code or cls.exit_code)

    @classmethod
    def log_debug(cls, **kwargs):
        logger.debug(json.dumps(kwargs))

    @classmethod
    def log_info(cls, **kwargs):
        logger.info(json.dumps(kwargs))

    @classmethod
    def log_warning(cls, **kwargs):
        logger.warning(json.dumps(kwargs))

    @classmethod
    def log_error(cls, **kwargs):
        cls.exit_code = 1
        logger.error(json.dumps(kwargs))

class SignedURL(NamedTuple):
    url: str
    signed_url: Optional[str] = None
    error: Optional[str] = None

def _sign(info: dict, access_key_id: str, secret_key: str, method: str, expires: int) -> SignedURL:
    url = info['url']
    try:
        signed_url = presign(url, access_key_id, secret_key, method, expires)
    except UnparsableURL as e:
        CLI.log_error(message="unparsable url", url=url, error=str(e))
        return SignedURL(url, error=str(e))
    CLI.log_debug(message="signed url", url=url, method=method, expires=expires)
    return SignedURL(url, signed_url=signed_url)

def sign_urls(manifest: List[dict],
              access_key_id: str,
              secret_key: str,
              method: str=default_method,
              duration: str=default_duration,
              concurrency: Optional[int]=None,
              now: Optional[float]=None) -> List[SignedURL]:
    """Sign each entry of 'manifest', returning results in the same order.

    An unparsable URL is logged and reported in its result without interrupting the rest of the batch. Entries
    sharing a duration share an expiration, computed once before signing begins.
    """
    expirations: Dict[str, int] = dict()
    for d in {info.get('duration', duration) for info in manifest}:
        expirations[d] = expires_at(parse_duration(d), now)
    CLI.log_info(message="signing urls", count=len(manifest), expirations=expirations)

    def _sign_entry(info: dict) -> SignedURL:
        return _sign(info,
                     access_key_id,
                     secret_key,
                     info.get('method', method),
                     expirations[info.get('duration', duration)])

    if concurrency is not None and 1 < concurrency:
        with ThreadPoolExecutor(max_workers=concurrency) as executor:
            return list(executor.map(_sign_entry, manifest))
    return [_sign_entry(info) for info in manifest]

manifest_schema = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "url": {"type": "string"},
            "method": {"type": "string"},
            "duration": {"type": "string"},
        },
        "required": ["url"],
    },
}

def _validate_manifest(manifest: List[dict]):
    CLI.log_debug(message="validating manifest", manifest=manifest, schema=manifest_schema)
    validate(instance=manifest, schema=manifest_schema)
    for info in manifest:
        if 'duration' in info:
            parse_duration(info['duration'])

manifest_arg_help = f"""Sign URLs as specified in a local json FILE
FILE must conform to the following schema

{pprint.pformat(manifest_schema, width=72)}

'method' and 'duration' override the command line values for that entry.
"""

class HelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    def _split_lines(self, text, width):
        return text.splitlines()

def parse_args(cli_args: Optional[List[str]]=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=HelpFormatter)
    parser.add_argument("url",
                        nargs="*",
                        metavar="url",
                        type=str,
                        help="URLs to sign.")
    parser.add_argument("--manifest",
                        "-m",
                        "-i",
                        help=manifest_arg_help)
    parser.add_argument("--id",
                        help="Access key id. Defaults to the 'AWS_ACCESS_KEY_ID' environment variable.")
    parser.add_argument("--key",
                        help="Secret key. Defaults to the 'AWS_SECRET_ACCESS_KEY' environment variable.")
    parser.add_argument("--duration",
                        "-d",
                        default=default_duration,
                        help="Duration to expiration, e.g. '1h', '90m', '1h30m'")
    parser.add_argument("--method",
                        default=default_method,
                        help="HTTP method to sign for")
    parser.add_argument("--concurrency",
                        type=int,
                        default=1,
                        help="Number of URLs to sign concurrently")
    parser.add_argument("-v",
                        action="store_true",
                        help="Verbose mode")
    parser.add_argument("-vv",
                        action="store_true",
                        help="Very verbose mode")
    args = parser.parse_args(args=cli_args)
    args.id = args.id or os.environ.get("AWS_ACCESS_KEY_ID")
    args.key = args.key or os.environ.get("AWS_SECRET_ACCESS_KEY")
    if not (args.url or args.manifest) or (args.url and args.manifest):
        parser.print_usage()
        CLI.log_error(message="One of 'url' or '--manifest' must be specified, but not both.")
        CLI.exit()
    if not (args.id and args.key):
        parser.print_usage()
        CLI.log_error(message="Both '--id' and '--key' must be provided, or set in the environment.")
        CLI.exit()
    if not (1 <= args.concurrency):
        parser.print_usage()
        CLI.log_error(message="'--concurrency' must be '1' or larger.")
        CLI.exit()
    try:
        parse_duration(args.duration)
    except ValueError:
        parser.print_usage()
        CLI.log_error(message="Invalid '--duration'.", duration=args.duration)
        CLI.exit()
    return args

def config_cli(args: argparse.Namespace):
    if args.vv:
        logger.setLevel(logging.DEBUG)
    elif args.v:
        logger.setLevel(logging.INFO)

def main():
    """This is the main CLI entry point."""
    args = parse_args()
    config_cli(args)

    if args.manifest:
        with open(args.manifest) as fh:
            manifest = json.loads(fh.read())
    else:
        manifest = [dict(url=url) for url in args.url]

    _validate_manifest(manifest)
    for res in sign_urls(manifest, args.id, args.key, args.method, args.duration, args.concurrency):
        if res.signed_url is not None:
            print(res.signed_url)
    if CLI.exit_code:
        CLI.exit()
