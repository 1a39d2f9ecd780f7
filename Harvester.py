import os.path
from typing import List, NamedTuple, Optional, Sequence

import argparse
from colorama import Fore

from config import Config
from operations import Operation, OperationResult, Runner, \
    default_operations
from roster import Student
from utils import PipelineAborted, commander, print_color, print_warning


class RunSummary(NamedTuple):
    processed: List[Student]
    skipped: List[Student]


class Harvester(object):
    """The main class for Harvester

    Holds the ordered list of operations and drives them over every
    student's repository, one student at a time.
    """

    default_parser = argparse.ArgumentParser(
        description="Clones or updates every student's repository, drops "
                    "commits made after the deadline and squashes the "
                    "remaining work into a single commit.")
    """The default parser with the minimum required arguments

    ```python
    args = Harvester.default_parser.parse_args()
    conf = Harvester.load_config(args)
    ```
    """
    default_parser.add_argument('config', type=str, nargs='?',
                                default='config.json',
                                help='config file for the assignment '
                                     '(default: config.json)')
    default_parser.add_argument('-r', '--roster', type=str,
                                help='roster CSV file with id,name columns '
                                     '(overrides the config)')
    default_parser.add_argument('-d', '--dest', type=str,
                                help='directory to clone repositories into '
                                     '(overrides the config)')
    default_parser.add_argument('-v', '--verbose',
                                action='store_true',
                                help='enable verbose output')

    def __init__(self, config: Config,
                 operations: Optional[Sequence[Operation]] = None,
                 runner: Runner = commander):
        """
        :param config: The Config object for the assignment
        :param operations: The stages to apply, in order. Defaults to sync, deadline, squash.
        :param runner: Runs external commands; used by the default operations
        """
        self.config = config
        self.operations: List[Operation] = list(operations) \
            if operations is not None else default_operations(runner)

    @staticmethod
    def load_config(args: argparse.Namespace) -> Config:
        """Builds the Config from parsed command-line arguments"""
        conf = Config.load(args.config, args.verbose)
        if args.roster:
            conf.roster = args.roster
        if args.dest:
            conf.dest_path = args.dest
        return conf

    def operate(self, operation: Operation, repo: str,
                student: Student) -> OperationResult:
        """Runs one operation on one repository, announcing it first

        :param operation: The operation to run
        :param repo: Path to the student's local repository
        :param student: The student who owns the repository
        """
        print_color(Fore.CYAN, "-" * 62)
        print_color(Fore.CYAN,
                    f"Execute {operation.name} for {student.name}")
        print_color(Fore.CYAN, "-" * 62)
        return operation.run(repo, student, self.config)

    def run(self, students: Sequence[Student]) -> RunSummary:
        """Applies every operation to every student's repository

        Students are processed in roster order. A student whose repository
        directory is missing once an operation needs it is skipped. Any
        other failure stops the run.

        :param students: The roster
        :raises PipelineAborted: on the first error that isn't benign
        :return: The students processed and the students skipped
        """
        summary = RunSummary([], [])
        for student in students:
            repo = self.config.target_directory(student)
            if self.process(student, repo):
                summary.processed.append(student)
            else:
                summary.skipped.append(student)
        return summary

    def process(self, student: Student, repo: str) -> bool:
        """Runs the operations for one student

        :return: False if the student was skipped
        """
        for operation in self.operations:
            if operation.needs_local_repo and not os.path.isdir(repo):
                print_warning(f"Student: {student.name} - No local "
                              f"repository: {repo}")
                if self.config.verbose:
                    print(f"  skipping {operation.name} and later "
                          f"operations for {student.id}")
                return False

            result = self.operate(operation, repo, student)
            if result.error is not None:
                raise PipelineAborted(student.name, operation.name,
                                      result.error)
        return True
