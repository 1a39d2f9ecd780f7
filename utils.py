import os
import re
import shutil
import sys
from subprocess import Popen, PIPE, STDOUT
from typing import Iterable, List, Optional, Sequence, Tuple

from colorama import Fore, Style, init

init()  # starts colorama

BENIGN_MESSAGES: Tuple[str, ...] = (
    "already exists",
    "does not exist",
    "nothing to commit, working tree clean",
)
"""Substrings of git output that mark a failure we tolerate.

This is matched against git's human-readable messages, so it breaks if git
rewords them. Keep every such check behind `is_benign()`.
"""

MASK = "****"


class HarvesterError(Exception):
    """Base class for every error reported by the command-line scripts"""

    benign: bool = False


class ConfigError(HarvesterError):
    pass


class RosterError(HarvesterError):
    pass


class GitError(HarvesterError):
    """A git command exited with a non-zero status

    :param args: The (masked) command line
    :param output: Combined stdout and stderr of the command
    :param returncode: The exit status
    """

    def __init__(self, args: Sequence[str], output: str, returncode: int):
        self.args_list: List[str] = list(args)
        self.output: str = output
        self.returncode: int = returncode
        super().__init__(f"'{' '.join(self.args_list)}' exited with status "
                         f"{returncode}: {output.strip()}")

    @property
    def benign(self) -> bool:
        return is_benign(self.output)


class DeadlineError(HarvesterError):
    """No commit exists at or before the deadline"""

    def __init__(self, repo: str, deadline: str):
        self.repo = repo
        self.deadline = deadline
        super().__init__(f"no commit at or before {deadline} in {repo}")


class PipelineAborted(HarvesterError):
    """An operation failed for a student; the whole run stops

    :param student_name: Display name of the student being processed
    :param operation: Name of the failed operation
    :param error: The underlying error
    """

    def __init__(self, student_name: str, operation: str,
                 error: HarvesterError):
        self.student_name = student_name
        self.operation = operation
        self.error = error
        super().__init__(f"{operation} failed for {student_name}: {error}")


def is_benign(output: str) -> bool:
    """Checks whether git output describes a condition we tolerate

    :param output: Combined output of a git command
    :return: True if the output contains one of BENIGN_MESSAGES
    """
    return any(message in output for message in BENIGN_MESSAGES)


def mask(text: str, secrets: Iterable[str]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text


def commander(args: Sequence[str], secrets: Iterable[str] = ()) \
        -> Tuple[str, Optional[GitError]]:
    """Runs an external command and waits for it

    :param args: The executable followed by its arguments
    :param secrets: Strings to mask in anything printed or returned
    :return: The combined output, and a GitError if the command failed
    """
    secrets = list(secrets)
    shown = [mask(a, secrets) for a in args]
    print(f"Execute: {' '.join(shown)}")

    # git messages are matched in English, see BENIGN_MESSAGES
    env = dict(os.environ, LC_ALL="C")
    proc = Popen(list(args), stdout=PIPE, stderr=STDOUT, env=env)
    stdout, _ = proc.communicate()  # note: blocking
    output = mask(stdout.decode("utf-8", errors="replace"), secrets)

    if proc.returncode != 0:
        return output, GitError(shown, output, proc.returncode)
    return output, None


def snake_case(name: str) -> str:
    """Converts a display name into a snake_case directory component

    Acronyms and digit runs become words of their own, so existing
    directories keep their names.

    >>> snake_case("Ada Lovelace")
    'ada_lovelace'
    >>> snake_case("JSONParser")
    'json_parser'
    """
    s = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name.strip())
    s = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s)
    s = re.sub(r"([A-Za-z])([0-9])", r"\1_\2", s)
    s = re.sub(r"([0-9])([A-Za-z])", r"\1_\2", s)
    s = re.sub(r"[\W_]+", "_", s)
    return s.strip("_").lower()


def print_color(color: str, msg: str, file=None) -> None:
    print(color + Style.BRIGHT + msg + Style.RESET_ALL, file=file)


def print_error(msg: str) -> None:
    print_color(Fore.RED, "ERROR: " + msg, file=sys.stderr)


def print_warning(msg: str) -> None:
    print_color(Fore.YELLOW, msg)


def self_check() -> None:
    """
    Checks if `git` is in the PATH
    """
    if shutil.which("git") is None:
        print_error("Cannot find git.")
        sys.exit(1)
