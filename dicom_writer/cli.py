# SPDX-License-Identifier: GPL-2.0-only
"""
dicom-writer command line interface.

Usage:
    python -m dicom_writer INPUT OUTPUT --set TAG=VALUE [--set TAG=VALUE ...]

Tags are given as ggggeeee, gggg,eeee or (gggg,eeee).

Examples:
    # Replace patient name and ID
    python -m dicom_writer ct.dcm ct_anon.dcm \\
        --set 00100010=ANON^PATIENT --set "(0010,0020)=ANON0001"

    # Pad odd-length values to even length, with debug output
    python -m dicom_writer ct.dcm out.dcm --set 00080080=HOSPITAL --pad --debug

Exit status:
    0  all edits applied
    1  at least one tag was absent, empty or not a string VR
    2  error (unreadable input, value too long, ...)
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from .exceptions import DicomWriterError
from .reader import read_file
from .tag import format_tag

__all__ = ['main', 'parse_assignment']

log = logging.getLogger("dicom_writer")


def parse_assignment(text: str) -> Tuple[str, str]:
    """Split ``TAG=VALUE`` into canonical tag and value."""
    tag, sep, value = text.partition('=')
    if not sep:
        raise argparse.ArgumentTypeError(f"expected TAG=VALUE, got {text!r}")

    tag = tag.strip().strip('()').replace(',', '')
    try:
        return format_tag(tag), value
    except DicomWriterError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog='dicom_writer',
        description='Edit string values of a DICOM file in place',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument('input', help='DICOM file to read')
    parser.add_argument('output', help='Where to write the edited file')

    parser.add_argument(
        '-s', '--set',
        dest='assignments',
        metavar='TAG=VALUE',
        type=parse_assignment,
        action='append',
        required=True,
        help='Value to write (repeatable)'
    )

    parser.add_argument(
        '--pad',
        action='store_true',
        help='Pad values to even length (space, NUL for UI)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    try:
        view = read_file(args.input)

        skipped = []
        for tag, value in args.assignments:
            if tag.startswith('0002'):
                log.warning("%s is in the File Meta group; its group length is not updated", tag)
            if view.change_string(tag, value, pad=args.pad):
                log.info("%s <- %r", tag, value)
            else:
                log.warning("%s not changed: absent, empty or not a string VR", tag)
                skipped.append(tag)

        view.finish_changes()

        with open(args.output, 'wb') as f:
            f.write(view.buffer)
    except (OSError, DicomWriterError) as e:
        log.error("Fatal error: %s", e)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 2

    log.info("Wrote %s (%d of %d edits applied)",
             args.output, len(args.assignments) - len(skipped), len(args.assignments))
    return 1 if skipped else 0


if __name__ == '__main__':
    sys.exit(main())
