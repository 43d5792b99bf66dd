"""Pydantic models for the Jest ``--json`` watch output."""

from collections.abc import Sequence

from pydantic import Field

from jest_watch.models.base import Model


class AssertionLocation(Model):
    """Declaration position reported with ``--testLocationInResults``."""

    line: int = Field(..., description="1-based line of the test declaration")
    column: int | None = Field(default=None, description="1-based column")


class AssertionResult(Model):
    """Outcome of a single test within a test file."""

    status: str = Field(..., description="passed, failed, pending, todo, ...")
    title: str = Field(default="", description="Test title")
    location: AssertionLocation | None = Field(
        default=None, description="Declaration location, when Jest reports one"
    )
    failure_messages: Sequence[str] = Field(
        default_factory=list, alias="failureMessages"
    )

    @property
    def declared_line(self) -> int | None:
        """The 1-based declared line, if any."""
        if self.location is None:
            return None
        return self.location.line


class TestFileResult(Model):
    """Results for one test file."""

    __test__ = False

    name: str = Field(default="", description="Absolute path of the test file")
    message: str = Field(default="", description="Suite-level failure output")
    assertion_results: Sequence[AssertionResult] = Field(
        default_factory=list, alias="assertionResults"
    )


class JestOutput(Model):
    """One complete results payload emitted per watch run."""

    num_total_tests: int = Field(default=0, alias="numTotalTests")
    success: bool | None = None
    test_results: Sequence[TestFileResult] = Field(
        default_factory=list, alias="testResults"
    )
