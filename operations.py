import os.path
import re
from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence, \
    Tuple

from config import Config
from roster import Student
from utils import DeadlineError, GitError, HarvesterError, commander, \
    print_warning

Runner = Callable[[Sequence[str], Iterable[str]],
                  Tuple[str, Optional[GitError]]]

_SHA = re.compile(r"^[0-9a-f]{40,64}$")

SQUASH_SUBJECT = "Squashed commit of the following:"
"First line of the message git prepares for `merge --squash`"


class OperationResult(NamedTuple):
    """What an operation hands back to the pipeline

    Attributes:
        log (str): Raw output of every command the operation ran.
        error (Optional[HarvesterError]): The fatal error that stopped the operation, or None. Benign conditions never show up here.
    """
    log: str
    error: Optional[HarvesterError] = None


class Operation(object):
    """A stage of the pipeline, applied to one student's repository

    Subclasses implement `run()`. Operations keep no state between calls.
    """

    name: str = "Operation"
    needs_local_repo: bool = True
    "Whether the repository directory must exist before `run()` is called"

    def __init__(self, runner: Runner = commander):
        self.runner = runner

    def run(self, repo: str, student: Student,
            config: Config) -> OperationResult:
        raise NotImplementedError

    def git(self, config: Config, log: List[str],
            *args: str) -> Optional[HarvesterError]:
        """Runs one git command, appending its output to `log`

        :return: The error if the command failed in a way we don't tolerate
        """
        output, error = self.runner(["git", *args], [config.password])
        print(output)
        log.append(output)
        if error is not None and error.benign:
            print_warning(
                f"Ignored: git exited with status {error.returncode}")
            return None
        return error


class SyncOperation(Operation):
    """Makes the local repository match the remote's default branch

    Clones the repository if there is no local copy yet. Otherwise fetches
    and hard-resets, throwing away anything that only exists locally.
    """

    name = "Sync"
    needs_local_repo = False

    def run(self, repo: str, student: Student,
            config: Config) -> OperationResult:
        log: List[str] = []
        if not os.path.isdir(repo):
            print(f"Cloning repository for {student.name} to {repo}")
            error = self.git(config, log,
                             "clone", config.repo_url(student), repo)
            return OperationResult("".join(log), error)

        error = self.git(config, log, "-C", repo, "fetch", "--all")
        if error is None:
            error = self.git(config, log, "-C", repo,
                             "reset", "--hard", config.remote_head)
        return OperationResult("".join(log), error)


class DeadlineOperation(Operation):
    """Drops every commit made after the deadline from the local branch

    Remote hosts don't enforce deadlines, so the branch is reset to the
    newest commit at or before `config.deadline`. Running it again selects
    the same commit.
    """

    name = "Deadline"

    def run(self, repo: str, student: Student,
            config: Config) -> OperationResult:
        log: List[str] = []
        error = self.git(config, log, "-C", repo, "log", "-n1",
                         "--pretty=format:%H", f"--before={config.deadline}")
        if error is not None:
            return OperationResult("".join(log), error)

        shas = [line.strip() for line in log[-1].splitlines()
                if _SHA.match(line.strip())]
        if not shas:
            return OperationResult("".join(log),
                                   DeadlineError(repo, config.deadline))

        error = self.git(config, log, "-C", repo, "reset", "--hard", shas[-1])
        return OperationResult("".join(log), error)


class SquashOperation(Operation):
    """Squashes all commits after `config.squash_after` into one

    The squash commit's parent is the base revision, and its tree is the
    tree the branch had before squashing. A branch that is already a single
    squash commit on top of the base (or that has nothing after the base)
    is left as it is; the commit attempt then reports "nothing to commit",
    which is benign.
    """

    name = "Squash"

    def run(self, repo: str, student: Student,
            config: Config) -> OperationResult:
        log: List[str] = []
        error = self.git(config, log, "-C", repo, "rev-list", "--count",
                         f"{config.squash_after}..HEAD")
        if error is not None:
            return OperationResult("".join(log), error)

        lines = log[-1].split()
        try:
            ahead = int(lines[-1])
        except (IndexError, ValueError):
            return OperationResult("".join(log), HarvesterError(
                f"cannot count commits after {config.squash_after} in {repo}"))

        squashed = False
        if ahead == 1:
            error = self.git(config, log, "-C", repo, "log", "-1",
                             "--pretty=format:%s")
            if error is not None:
                return OperationResult("".join(log), error)
            squashed = SQUASH_SUBJECT in log[-1]

        if ahead > 1 or (ahead == 1 and not squashed):
            error = self.git(config, log, "-C", repo,
                             "reset", "--hard", config.squash_after)
            if error is not None:
                return OperationResult("".join(log), error)
            # HEAD@{1} is where the branch was before the reset
            error = self.git(config, log, "-C", repo,
                             "merge", "--squash", "HEAD@{1}")
            if error is not None:
                return OperationResult("".join(log), error)

        error = self.git(config, log, "-C", repo, "commit", "--no-edit")
        return OperationResult("".join(log), error)


def default_operations(runner: Runner = commander) -> List[Operation]:
    """The stages every repository goes through, in order"""
    return [SyncOperation(runner),
            DeadlineOperation(runner),
            SquashOperation(runner)]
