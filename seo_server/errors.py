"""
SEO Edge Server - Errors

Exceptions raised across the analysis pipeline and its collaborators.
"""


class AnalyzerError(Exception):
    """Content analyzer call failed (network, empty or malformed response)."""


class AnalyzerNotConfiguredError(AnalyzerError):
    """Active provider has no credentials."""


class InvalidSchemaError(AnalyzerError):
    """Provider returned JSON without @context or @type."""


class DomainNotFoundError(Exception):
    """URL's hostname does not belong to a registered domain."""

    def __init__(self, url: str):
        super().__init__(f"Domain not found for URL: {url}")
        self.url = url


class JobNotFoundError(Exception):
    """No analysis job with the given id."""

    def __init__(self, job_id: int):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id
