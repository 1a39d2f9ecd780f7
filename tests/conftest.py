"""
Shared fixtures: a scripted stand-in for `utils.commander`, and helpers
that build real git repositories with chosen commit dates.
"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from config import Config
from utils import GitError

requires_git = pytest.mark.skipif(shutil.which("git") is None,
                                  reason="git is not installed")


def subcommand(args: Sequence[str]) -> str:
    """`git -C repo reset --hard x` -> `reset`"""
    return args[3] if len(args) > 3 and args[1] == "-C" else args[1]


class FakeRunner:
    """Records git invocations and answers them from a script

    `responses` maps a git subcommand to `(output, returncode)`. A
    subcommand may map to a list of such pairs, consumed one per call.
    Successful clones create the target directory.
    """

    def __init__(self, responses: Optional[Dict[str, object]] = None):
        self.calls: List[List[str]] = []
        self.responses = dict(responses or {})

    def __call__(self, args: Sequence[str], secrets=()) \
            -> Tuple[str, Optional[GitError]]:
        self.calls.append(list(args))
        sub = subcommand(args)
        answer = self.responses.get(sub, ("", 0))
        if isinstance(answer, list):
            answer = answer.pop(0) if answer else ("", 0)
        output, code = answer
        if code:
            return output, GitError(args, output, code)
        if sub == "clone":
            os.makedirs(args[-1], exist_ok=True)
        return output, None

    def subcommands(self) -> List[str]:
        return [subcommand(c) for c in self.calls]


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides) -> Config:
        conf = {
            "url": "https://{}:{}@bitbucket.org/course/hw1-{}.git",
            "username": "grader",
            "password": "s3cret",
            "deadline": "2024-01-01T00:00:00",
            "squash_after": "base",
            "dest_path": str(tmp_path / "submissions"),
        }
        conf.update(overrides)
        return Config(conf)

    return _make


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolates git from the user's configuration"""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("TZ", "UTC")
    for who in ("AUTHOR", "COMMITTER"):
        monkeypatch.setenv(f"GIT_{who}_NAME", "Grader")
        monkeypatch.setenv(f"GIT_{who}_EMAIL", "grader@example.edu")
    return home


def git(repo: Path, *args: str, date: Optional[str] = None) -> str:
    env = dict(os.environ)
    if date is not None:
        env["GIT_AUTHOR_DATE"] = date
        env["GIT_COMMITTER_DATE"] = date
    proc = subprocess.run(["git", "-C", str(repo), *args], env=env,
                          check=True, stdout=subprocess.PIPE,
                          stderr=subprocess.STDOUT)
    return proc.stdout.decode().strip()


def commit(repo: Path, filename: str, content: str, date: str) -> str:
    """Writes a file and commits it at `date`; returns the commit SHA"""
    (repo / filename).write_text(content)
    git(repo, "add", filename)
    git(repo, "commit", "-m", f"add {filename}", date=date)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def make_remote(tmp_path, git_env):
    """Builds a bare remote repository from (filename, content, date)
    triples; returns its path and the SHA of each commit"""

    def _make(name: str, commits: Sequence[Tuple[str, str, str]],
              tags: Optional[Dict[str, int]] = None):
        work = tmp_path / "work" / name
        work.mkdir(parents=True)
        git(work, "init")
        shas = [commit(work, f, c, d) for f, c, d in commits]
        for tag, index in (tags or {}).items():
            git(work, "tag", tag, shas[index])
        remote = tmp_path / "remotes" / f"{name}.git"
        remote.parent.mkdir(exist_ok=True)
        subprocess.run(["git", "clone", "--bare", str(work), str(remote)],
                       check=True, stdout=subprocess.PIPE,
                       stderr=subprocess.STDOUT)
        return remote, shas

    return _make
