"""Parsing of conventional commit messages into structured commit records."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

FIXUP_PREFIX: Final[str] = "fixup! "
SQUASH_PREFIX: Final[str] = "squash! "
REVERT_PREFIX: Final[str] = 'Revert "'

# Separator placed after each message body by `git log --format=%B%x00`.
GIT_LOG_RECORD_SEPARATOR: Final[str] = "\x00"
GIT_LOG_FORMAT: Final[str] = "%B%x00"

_HEADER_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(\w+)(?:\(([^)]+)\))?: (.+)$")


class NoteSection(StrEnum):
    """Footer sections recognized in commit messages."""

    BREAKING_CHANGE = "BREAKING CHANGE"
    DEPRECATION = "DEPRECATED"


_NOTE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(BREAKING[ -]CHANGES?|DEPRECATED):[ \t]*(.*)$"
)


@dataclass(frozen=True)
class CommitNote:
    """A breaking change or deprecation note from a commit footer."""

    title: NoteSection
    text: str


@dataclass(frozen=True)
class Commit:
    """Parsed commit message."""

    full_text: str
    header: str
    body: str
    type: str
    scope: str
    subject: str
    breaking_changes: tuple[CommitNote, ...] = ()
    deprecations: tuple[CommitNote, ...] = ()
    is_fixup: bool = False
    is_squash: bool = False
    is_revert: bool = False


def _strip_comments(text: str) -> str:
    return "\n".join(line for line in text.splitlines() if not line.startswith("#"))


def parse_commit_message(full_text: str) -> Commit:
    """Parse a raw commit message into a `Commit`."""
    text = _strip_comments(full_text).strip()
    lines = text.splitlines()
    header = lines[0].strip() if lines else ""
    remaining = lines[1:]

    is_fixup = header.startswith(FIXUP_PREFIX)
    is_squash = header.startswith(SQUASH_PREFIX)
    if is_fixup:
        header = header[len(FIXUP_PREFIX) :]
    elif is_squash:
        header = header[len(SQUASH_PREFIX) :]

    commit_type = ""
    scope = ""
    subject = ""
    match = _HEADER_PATTERN.match(header)
    if match is not None:
        commit_type, scope, subject = match.group(1), match.group(2) or "", match.group(3)
    is_revert = commit_type == "revert" or header.startswith(REVERT_PREFIX)

    body_lines: list[str] = []
    notes: list[tuple[NoteSection, list[str]]] = []
    for line in remaining:
        note_match = _NOTE_PATTERN.match(line.strip())
        if note_match is not None:
            section = (
                NoteSection.DEPRECATION
                if note_match.group(1) == "DEPRECATED"
                else NoteSection.BREAKING_CHANGE
            )
            notes.append((section, [note_match.group(2)]))
        elif notes:
            notes[-1][1].append(line)
        else:
            body_lines.append(line)

    parsed_notes = [
        CommitNote(title=section, text="\n".join(note_lines).strip())
        for section, note_lines in notes
    ]
    return Commit(
        full_text=full_text,
        header=header,
        body="\n".join(body_lines).strip(),
        type=commit_type,
        scope=scope,
        subject=subject,
        breaking_changes=tuple(
            note for note in parsed_notes if note.title is NoteSection.BREAKING_CHANGE
        ),
        deprecations=tuple(note for note in parsed_notes if note.title is NoteSection.DEPRECATION),
        is_fixup=is_fixup,
        is_squash=is_squash,
        is_revert=is_revert,
    )


def parse_commits_from_git_log(raw_output: str) -> list[Commit]:
    """Parse the NUL-separated output of `git log --format=%B%x00`."""
    return [
        parse_commit_message(record)
        for record in raw_output.split(GIT_LOG_RECORD_SEPARATOR)
        if record.strip()
    ]
