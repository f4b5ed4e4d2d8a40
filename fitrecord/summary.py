'''summary.py: Contains the fitrecord-summary command, which prints what a FIT file contains.'''

import argparse
import logging
import os
import sys

from .decoder import Decoder
from .stream import Stream


def decode_fit_file(input_path: str, **options):
    '''
    Decodes a FIT file into a message data structure.

    Returns:
        tuple: (messages, errors), or (None, [reason]) when the file cannot be read.
    '''
    if not os.path.exists(input_path):
        return None, [f"Input file does not exist: {input_path}"]

    stream = Stream.from_file(input_path)
    decoder = Decoder(stream)

    if not decoder.is_fit():
        return None, ["File is not a valid FIT file"]

    return decoder.read(**options)


def summarize(messages: dict) -> list:
    '''Returns one "<name>: <count>" line per message type, in first-seen order.'''
    return [f"{mesg_type}: {len(mesgs)}" for mesg_type, mesgs in messages.items()]


def main(argv=None):
    parser = argparse.ArgumentParser(description='Print the message counts of a FIT file.')
    parser.add_argument('input_file')
    parser.add_argument('--strict', action='store_true', help='stop at the first malformed record')
    parser.add_argument('--no-crc', action='store_true', help='skip header and file CRC checks')
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    messages, errors = decode_fit_file(args.input_file, force=not args.strict,
                                       enable_crc_check=not args.no_crc)
    if messages is None:
        print(errors[0], file=sys.stderr)
        return 1

    for line in summarize(messages):
        print(line)

    for error in errors:
        print(f"Error: {error}", file=sys.stderr)

    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
