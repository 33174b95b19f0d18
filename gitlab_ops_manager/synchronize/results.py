"""Contains results of application execution."""

from collections import Counter

from gitlab_ops_manager.synchronize.models import ErrorKind, OutcomeKind


class ProjectSynchronizationResult:
    """Contains the outcome of synchronizing a single desired project."""

    def __init__(
        self,
        name: str,
        outcome: OutcomeKind,
        detail: str = "",
        error_kind: ErrorKind | None = None,
        remote_id: int | None = None,
        warnings: list[str] | None = None,
    ) -> None:
        """Initialize the result with the project name, outcome and details."""
        self.name = name
        self.outcome = outcome
        self.detail = detail
        self.error_kind = error_kind
        self.remote_id = remote_id
        self.warnings = warnings or []

    @property
    def failed(self) -> bool:
        """Whether the project reached the failed state."""
        return self.outcome == OutcomeKind.FAILED

    def __repr__(self) -> str:
        return f"ProjectSynchronizationResult(name={self.name!r}, outcome={self.outcome.value!r}, detail={self.detail!r})"


class AllProjectSynchronizationResults:
    """Contains results of the project synchronization workflow for all projects, in input order."""

    def __init__(self, results: list[ProjectSynchronizationResult]) -> None:
        """Initialize the run report with a list of project synchronization results."""
        self.results = results

    @property
    def counts(self) -> dict[OutcomeKind, int]:
        """Number of results per outcome kind."""
        counter = Counter(result.outcome for result in self.results)
        return {kind: counter.get(kind, 0) for kind in OutcomeKind}

    @property
    def has_failures(self) -> bool:
        """Whether any project failed."""
        return any(result.failed for result in self.results)

    @property
    def exit_code(self) -> int:
        """Process exit status for the run."""
        return 1 if self.has_failures else 0
