"""Error taxonomy for aggregation and expert analysis."""


class KennelError(Exception):
    """Base class for KennelTrack errors."""


class RepositoryReadFailure(KennelError):
    """A record set could not be read after all retry attempts."""

    def __init__(self, entity: str, attempts: int, cause: Exception):
        self.entity = entity
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Failed to read {entity} after {attempts} attempts: {cause}")


class MalformedResponseError(KennelError):
    """The LLM response did not contain a narrative text block."""


class ExternalServiceFailure(KennelError):
    """One expert role exhausted its attempts against the LLM service."""

    def __init__(self, role: str, attempts: int, cause: Exception | None = None):
        self.role = role
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"{role} analysis failed after {attempts} attempts: {cause}")


class AllRolesFailed(KennelError):
    """Every requested expert role failed."""

    def __init__(self, failures: dict[str, ExternalServiceFailure]):
        self.failures = failures
        roles = ", ".join(sorted(failures))
        super().__init__(f"AI analysis service unavailable (failed roles: {roles})")
