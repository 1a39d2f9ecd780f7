#!/usr/bin/env python3

import os.path
import sys
from typing import Dict, List

from Harvester import Harvester
from roster import load_roster
from utils import HarvesterError, print_error

if __name__ == "__main__":

    parser = Harvester.default_parser
    parser.description = ('List every student on the roster with the local '
                          'directory their repository goes to; identify '
                          'missing directories and names that collide')

    args = parser.parse_args()

    try:
        conf = Harvester.load_config(args)
        students = load_roster(conf.roster)
        dirs: Dict[str, List[str]] = {}
        for student in students:
            dirs.setdefault(conf.target_directory(student), []) \
                .append(student.name)
    except HarvesterError as e:
        print_error(str(e))
        sys.exit(1)

    print(f"There are {len(students)} students in {conf.roster}:")
    missing: List[str] = []
    for student in students:
        target = conf.target_directory(student)
        print(f"  {student.id} {student.name} -> {target}")
        if not os.path.isdir(target):
            missing.append(target)

    print("missing local repositories: ")
    for target in missing:
        print(target)
    print("directories shared by more than one student:")
    for target, names in dirs.items():
        if len(names) > 1:
            print(f"{target}: {', '.join(names)}")
