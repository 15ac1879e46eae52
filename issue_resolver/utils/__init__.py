"""Parsing helpers shared by tasks and the CLI"""

from .json_parser import extract_json, parse_json_response
from .url_parser import (
    IssueReference,
    RepoReference,
    parse_issue_url,
    parse_repo_url,
    is_issue_url,
    is_repo_url,
)

__all__ = [
    "extract_json",
    "parse_json_response",
    "IssueReference",
    "RepoReference",
    "parse_issue_url",
    "parse_repo_url",
    "is_issue_url",
    "is_repo_url",
]
