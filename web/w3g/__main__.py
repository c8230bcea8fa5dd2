"""
Print a summary of one or more .w3g replays.

Usage:
    python -m w3g replays/game.w3g [more.w3g ...] [--json] [--events] [-v]
"""
import argparse
import json
import logging
import sys
import time

from .errors import W3GError
from .replay import load_w3g, replay_summary, result_to_dict

log = logging.getLogger('w3g')


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog='w3g', description=__doc__.strip().splitlines()[0])
    ap.add_argument('files', nargs='+', help='replay file(s)')
    ap.add_argument('--json', action='store_true', help='dump the full result as JSON')
    ap.add_argument('--events', action='store_true', help='include every event in --json output')
    ap.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    failed = 0
    for path in args.files:
        start = time.perf_counter()
        try:
            result = load_w3g(path, keep_events=args.events)
        except (OSError, W3GError) as e:
            log.error('%s: %s', path, e)
            failed += 1
            continue
        took = (time.perf_counter() - start) * 1000.0
        if args.json:
            print(json.dumps(result_to_dict(result), indent=2))
        else:
            print(replay_summary(result, path))
        log.info('Took %.0f ms', took)

    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
