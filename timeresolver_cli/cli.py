import argparse
import logging
import sys

from timeresolver import __version__, resolve
from timeresolver.conf import Settings
from timeresolver.date import local_now
from timeresolver.normalizer import normalize


def entrance(argv=None):
    timeresolver_argparse = argparse.ArgumentParser(
        prog="timeresolver",
        description="Resolve a natural language time expression to a date and time.",
    )
    timeresolver_argparse.add_argument(
        "text",
        type=str,
        help='The expression to resolve, e.g. "next monday at 9am"',
    )
    timeresolver_argparse.add_argument(
        "--reference",
        "-r",
        type=str,
        help="The instant to resolve against, itself an expression or an ISO date. Defaults to now",
    )
    timeresolver_argparse.add_argument(
        "--format",
        "-f",
        type=str,
        default=None,
        help="strftime format of the output. Defaults to ISO 8601",
    )
    timeresolver_argparse.add_argument(
        "--explain",
        help="Print the normalized text and the extracted normal forms instead",
        action="store_true",
    )
    timeresolver_argparse.add_argument(
        "--verbose",
        "-v",
        help="Log every step of the resolution",
        action="store_true",
    )
    timeresolver_argparse.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = timeresolver_argparse.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    reference = resolve(args.reference) if args.reference else None

    if args.explain:
        normalized = normalize(args.text, reference or local_now(), Settings())
        print(f"text: {normalized.text}")
        for normal in normalized.normals:
            print(f"normal: {normal}")
        return 0

    result = resolve(args.text, reference)
    print(result.strftime(args.format) if args.format else result.isoformat(sep=" "))
    return 0


if __name__ == "__main__":
    sys.exit(entrance())
