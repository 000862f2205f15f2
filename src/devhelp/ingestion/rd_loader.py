"""Topic alias extraction for Rd documentation files.

Only the ``\\name{}`` and ``\\alias{}`` header lines are read; the rest of the
file is left to the rendering engine.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List

from devhelp.utils.files import iter_rd_paths

LOGGER = logging.getLogger(__name__)

_HEADER = re.compile(r"^\s*\\(name|alias)\{(?P<topic>(?:[^{}\\]|\\.)*)\}", re.MULTILINE)
_ESCAPE = re.compile(r"\\([%{}\\])")


@dataclass(slots=True)
class TopicRecord:
    """A topic alias and the Rd file that documents it."""

    topic: str
    path: Path


def unescape_topic(raw: str) -> str:
    return _ESCAPE.sub(r"\1", raw.strip())


def read_topics(path: Path) -> List[str]:
    """Return the distinct topics declared by one Rd file, in declaration order."""
    text = path.read_text(encoding="utf-8", errors="replace")
    topics: List[str] = []
    for match in _HEADER.finditer(text):
        topic = unescape_topic(match.group("topic"))
        if topic and topic not in topics:
            topics.append(topic)
    return topics


def build_topic_records(man_dir: Path) -> Iterator[TopicRecord]:
    """Produce topic records for every Rd file under ``man_dir``."""
    if not man_dir.is_dir():
        LOGGER.warning("No man/ directory in %s", man_dir.parent)
        return

    for path in iter_rd_paths([man_dir]):
        try:
            topics = read_topics(path)
        except OSError as exc:
            LOGGER.error("Failed to read %s: %s", path, exc)
            continue
        if not topics:
            LOGGER.debug("No topics declared in %s", path)
        for topic in topics:
            yield TopicRecord(topic=topic, path=path)


def read_package_name(package_dir: Path) -> str:
    """Read the ``Package:`` field from a package's DESCRIPTION file."""
    description = package_dir / "DESCRIPTION"
    if not description.is_file():
        raise ValueError(f"No DESCRIPTION file in {package_dir}")

    for line in _description_fields(description.read_text(encoding="utf-8").splitlines()):
        key, _, value = line.partition(":")
        if key.strip() == "Package" and value.strip():
            return value.strip()
    raise ValueError(f"DESCRIPTION in {package_dir} has no Package field")


def _description_fields(lines: Iterable[str]) -> Iterator[str]:
    # Continuation lines start with whitespace and never hold a field name
    for line in lines:
        if line and not line[0].isspace():
            yield line
