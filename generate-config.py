#!/usr/bin/env python

import json
from typing import Any, Dict

import argparse


def main() -> None:
    parser = argparse.ArgumentParser(
        description="prints the contents of a config file to standard out.")
    parser.add_argument("url", type=str,
                        help="remote URL template with slots for username, "
                             "password and student id, e.g. "
                             "https://{}:{}@bitbucket.org/course/hw1-{}.git")
    parser.add_argument("deadline", type=str,
                        help="cutoff timestamp, e.g. 2024-01-01T00:00:00")
    parser.add_argument("squash_after", type=str,
                        help="revision after which commits are squashed")
    parser.add_argument("-u", "--username", type=str, default="",
                        help="username for the remote")
    parser.add_argument("-p", "--password", type=str, default="",
                        help="password or app token for the remote")
    parser.add_argument("-b", "--default-branch", type=str,
                        help="remote branch to synchronize to "
                             "(default: the remote's HEAD)")
    parser.add_argument("-d", "--dest", type=str, default=".",
                        help="directory to clone repositories into")
    parser.add_argument("-r", "--roster", type=str, default="students.csv",
                        help="roster CSV file")

    args = parser.parse_args()

    conf: Dict[str, Any] = {
        "url": args.url,
        "username": args.username,
        "password": args.password,
        "deadline": args.deadline,
        "squash_after": args.squash_after,
        "dest_path": args.dest,
        "roster": args.roster,
    }
    if args.default_branch:
        conf["default_branch"] = args.default_branch

    # print config
    print(json.dumps(conf, indent=4, sort_keys=True))


if __name__ == "__main__":
    main()
