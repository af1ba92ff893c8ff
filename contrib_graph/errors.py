"""
contrib_graph/errors.py - Exception hierarchy.

Network and API failures propagate unchanged from the client through the
scanners, the scan service and the expansion controller. Nothing in the
pipeline retries.
"""

from typing import Optional


class ContribGraphError(Exception):
    """Base class for all contrib_graph errors."""


class GitHubAPIError(ContribGraphError):
    """
    A GitHub REST call failed.

    Attributes:
        status_code: HTTP status of the failed response, or 0 when the request
                     never produced a response (DNS, timeout, connection reset).
        message:     GitHub's error message when the body carried one,
                     otherwise the transport error text.
        url:         The requested URL.
    """

    def __init__(self, status_code: int, message: str, url: Optional[str] = None) -> None:
        self.status_code = status_code
        self.message = message
        self.url = url
        super().__init__(self._format())

    def _format(self) -> str:
        prefix = f"GitHub API error {self.status_code}" if self.status_code else "GitHub API request failed"
        text = f"{prefix}: {self.message}"
        if self.url:
            text += f" ({self.url})"
        return text

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class UnexpectedPayloadError(ContribGraphError):
    """An endpoint that always returns a JSON list returned something else."""


class PaginationLimitError(ContribGraphError):
    """Pagination hit the configured max_pages ceiling without seeing a short page."""

    def __init__(self, max_pages: int) -> None:
        self.max_pages = max_pages
        super().__init__(
            f"Pagination exceeded {max_pages} pages without a short page; "
            "raise max_pages or leave it unset for unbounded pagination."
        )
