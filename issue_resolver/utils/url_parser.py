"""GitHub issue and repository reference parsing"""

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RepoReference:
    owner: str
    repo: str


@dataclass(frozen=True)
class IssueReference:
    owner: str
    repo: str
    issue_number: int


_ISSUE_PATTERNS = [
    re.compile(r"^https?://github\.com/([^/]+)/([^/]+)/issues/(\d+)/?$"),
    re.compile(r"^github\.com/([^/]+)/([^/]+)/issues/(\d+)/?$"),
    re.compile(r"^([^/]+)/([^/]+)/issues/(\d+)$"),
    re.compile(r"^([^/]+)/([^/#]+)#(\d+)$"),
]

_REPO_PATTERNS = [
    re.compile(r"^https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$"),
    re.compile(r"^github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$"),
    re.compile(r"^([^/:\s]+)/([^/#\s]+)$"),
]


def parse_issue_url(value: str) -> Optional[IssueReference]:
    """Parse ``https://github.com/o/r/issues/1``, ``o/r/issues/1`` or ``o/r#1``"""
    value = value.strip()
    for pattern in _ISSUE_PATTERNS:
        match = pattern.match(value)
        if match:
            return IssueReference(match.group(1), match.group(2), int(match.group(3)))
    return None


def parse_repo_url(value: str) -> Optional[RepoReference]:
    """Parse ``https://github.com/o/r``, ``github.com/o/r`` or ``o/r``"""
    value = value.strip()
    for pattern in _REPO_PATTERNS:
        match = pattern.match(value)
        if match:
            return RepoReference(match.group(1), match.group(2))
    return None


def is_issue_url(value: str) -> bool:
    return parse_issue_url(value) is not None


def is_repo_url(value: str) -> bool:
    return parse_repo_url(value) is not None
