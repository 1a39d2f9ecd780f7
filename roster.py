import csv
import os.path
from typing import Dict, List, NamedTuple

from utils import RosterError, print_warning


class Student(NamedTuple):
    """One row of the roster

    Attributes:
        id (str): Opaque identifier, substituted into the remote URL. Unique within a roster.
        name (str): Display name, used to name the local directory.
    """
    id: str
    name: str


def load_roster(path: str) -> List[Student]:
    """Reads the roster CSV file

    The file needs a header row with (at least) the columns `id` and
    `name`, e.g.

    ```
    id,name
    42,Ada Lovelace
    ```

    :param path: Path to the roster file
    :return: Students in file order; empty if the file does not exist
    """
    if not os.path.exists(path):
        print_warning(f"Roster {path} does not exist; no students to process.")
        return []

    students: List[Student] = []
    seen: Dict[str, int] = {}
    with open(path, "r", newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return []

        columns = {c.strip().lower(): c for c in reader.fieldnames if c}
        if "id" not in columns or "name" not in columns:
            raise RosterError(f"{path} needs 'id' and 'name' columns, "
                              f"found {reader.fieldnames}")

        # line 1 is the header
        for lineno, row in enumerate(reader, start=2):
            sid = (row[columns["id"]] or "").strip()
            name = (row[columns["name"]] or "").strip()
            if not sid and not name:
                continue
            if not sid:
                raise RosterError(f"{path}:{lineno}: missing student id")
            if sid in seen:
                raise RosterError(f"{path}:{lineno}: duplicate student id "
                                  f"{sid} (first seen on line {seen[sid]})")
            seen[sid] = lineno
            students.append(Student(sid, name))

    return students
