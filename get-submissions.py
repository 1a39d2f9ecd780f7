#!/usr/bin/env python

import sys

from Harvester import Harvester
from roster import load_roster
from utils import HarvesterError, print_error, self_check


def main() -> None:
    args = Harvester.default_parser.parse_args()

    self_check()
    try:
        # get config
        conf = Harvester.load_config(args)
        if conf.verbose:
            conf.pretty_print()
        students = load_roster(conf.roster)

        # clone/update, enforce the deadline, squash
        summary = Harvester(conf).run(students)
    except HarvesterError as e:
        print_error(str(e))
        sys.exit(1)

    print(f"Processed {len(summary.processed)} of {len(students)} "
          f"students.")
    for student in summary.skipped:
        print(f"  skipped: {student.name} ({student.id})")


if __name__ == "__main__":
    main()
