import json
import os.path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from roster import Student
from utils import ConfigError, MASK, snake_case


class Config(object):
    """
    A data-only class storing the parsed Harvester configuration for an
    assignment

    config JSON should be in the following format
    ```json
    {
     "url" : "https://{}:{}@bitbucket.org/course/hw1-{}.git",
     "username" : "grader",
     "password" : "app-password",
     "deadline" : "2024-01-01T00:00:00",
     "squash_after" : "starter",
     "default_branch" : "master",   # optional
     "dest_path" : "submissions",   # optional
     "roster" : "students.csv"      # optional
    }
    ```

    Keys are case-insensitive.

    Attributes:
        url (str): Remote URL template. Its three positional slots are filled with username, password and student id, in that order. Either `{}` or `%s` slots are accepted.
        username (str): Username substituted into the URL.
        password (str): Password (or app token) substituted into the URL. Masked in all output.
        deadline (str): Cutoff timestamp, in any format `git log --before` accepts.
        squash_after (str): Revision after which all commits are squashed into one.
        default_branch (Optional[str]): Remote branch to synchronize to. Defaults to the remote's HEAD.
        dest_path (str): Directory where student repositories are cloned. Defaults to the current directory.
        roster (str): Path to the roster CSV file. Defaults to `students.csv`.
    """

    REQUIRED = ("url", "username", "password", "deadline", "squash_after")

    def __init__(self, conf: Dict[str, Any], verbosity: bool = False):
        conf = {k.lower(): v for k, v in conf.items()}
        missing = [k for k in Config.REQUIRED if k not in conf]
        if missing:
            raise ConfigError(f"missing config keys: {', '.join(missing)}")

        self.verbose: bool = verbosity
        "Flag to enable verbose output"

        self.url: str = str(conf["url"])
        self.username: str = str(conf["username"])
        self.password: str = str(conf["password"])
        self.deadline: str = str(conf["deadline"])
        self.squash_after: str = str(conf["squash_after"])

        self.default_branch: Optional[str] = conf.get("default_branch")
        "Remote branch to reset to. `None` means the remote's HEAD."

        self.dest_path: str = conf.get("dest_path", ".")
        self.roster: str = conf.get("roster", "students.csv")

    @staticmethod
    def load(json_conf_file: str, verbosity: bool = False) -> "Config":
        """Reads a config file

        :param json_conf_file: Path to the JSON config file
        :param verbosity: Flag to enable verbose output
        """
        try:
            with open(json_conf_file, 'r') as f:
                conf = json.loads(f.read())
        except FileNotFoundError:
            raise ConfigError(f"config file {json_conf_file} not found")
        except json.JSONDecodeError as e:
            raise ConfigError(f"{json_conf_file} is not valid JSON: {e}")

        if not isinstance(conf, dict):
            raise ConfigError(f"{json_conf_file} must hold a JSON object")
        return Config(conf, verbosity)

    @property
    def remote_head(self) -> str:
        """The remote-tracking ref that synchronization resets to"""
        if self.default_branch:
            return f"origin/{self.default_branch}"
        return "origin/HEAD"

    def repo_url(self, student: Student) -> str:
        """Renders the remote URL of a student's repository

        :param student: The student
        :return: The URL, with credentials filled in
        """
        values = (self.username, self.password, student.id)
        try:
            if "%s" in self.url:
                return self.url % values
            return self.url.format(*values)
        except (TypeError, IndexError, ValueError) as e:
            raise ConfigError(f"bad url template {self.masked_url}: {e}")

    @property
    def masked_url(self) -> str:
        return self.url.replace(self.password, MASK) \
            if self.password else self.url

    def target_directory(self, student: Student) -> str:
        """Finds out the local path for a student's repository

        The directory name depends only on the rendered URL and the
        student's display name, so repeated runs find the same directory.

        :param student: The student
        :return: `<dest_path>/<repo basename>_<snake_case name>`
        """
        return os.path.join(self.dest_path,
                            repo_dirname(self.repo_url(student), student.name))

    def pretty_print(self) -> None:
        """Prints out a human-readable representation of the configuration"""
        print(f"url: {self.masked_url}")
        print(f"username: {self.username}")
        print(f"password: {MASK if self.password else ''}")
        print(f"deadline: {self.deadline}")
        print(f"squash after: {self.squash_after}")
        print(f"synchronize to: {self.remote_head}")
        print(f"destination: {os.path.abspath(self.dest_path)}")
        print(f"roster: {self.roster}")


def repo_dirname(repo_url: str, student_name: str) -> str:
    """Derives a student's local directory name

    >>> repo_dirname("https://u:p@bitbucket.org/c/hw1-42.git", "Ada Lovelace")
    'hw1-42_ada_lovelace'

    :param repo_url: The rendered remote URL
    :param student_name: The student's display name
    """
    # scp-like URLs (git@host:team/repo.git) parse as a bare path
    path = urlparse(repo_url).path
    base = os.path.basename(path.rstrip("/"))
    base = os.path.splitext(base)[0]
    return base + "_" + snake_case(student_name)
