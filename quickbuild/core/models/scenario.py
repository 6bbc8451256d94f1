"""
Integration test scenario models.

Scenario definitions are loaded from TOML as well as built in, so they use
the relaxed config base; the reports produced by the harness are immutable.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated

from pydantic import Field, computed_field, field_validator

from .base import ImmutableModel
from .config import ConfigBaseModel

SignalValue = float | int | bool | str


class SignalInjection(ConfigBaseModel):
    """One write of one or more signal values, followed by a settle delay."""

    values: Annotated[dict[str, SignalValue], Field(min_length=1)]
    settle: Annotated[float, Field(ge=0)] = 2.0
    label: str | None = None

    @property
    def description(self) -> str:
        if self.label:
            return self.label
        return ", ".join(f"{k}={v}" for k, v in self.values.items())


class LogAssertion(ConfigBaseModel):
    """An expected pattern in the application log."""

    name: Annotated[str, Field(min_length=1)]
    pattern: Annotated[str, Field(min_length=1)]
    ignore_case: bool = False

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid assertion pattern {v!r}: {e}") from e
        return v

    def compile(self) -> re.Pattern[str]:
        return re.compile(self.pattern, re.IGNORECASE if self.ignore_case else 0)


class TestScenario(ConfigBaseModel):
    """A named integration test."""

    __test__ = False

    name: Annotated[str, Field(min_length=1, pattern=r"^[a-z0-9][a-z0-9_.-]*$")]
    description: str = ""
    requires_environment: bool = True
    injections: list[SignalInjection] = Field(default_factory=list)
    assertions: list[LogAssertion] = Field(default_factory=list)
    final_settle: Annotated[float, Field(ge=0)] = 5.0
    includes: list[str] = Field(default_factory=list)


class ScenarioStage(str, Enum):
    NETWORK_CREATE = "network_create"
    BROKER_START = "broker_start"
    CLIENT_START = "client_start"
    APP_BUILD = "app_build"
    APP_LAUNCH = "app_launch"
    INJECT_SEQUENCE = "inject_sequence"
    SETTLE_WAIT = "settle_wait"
    LOG_INSPECT = "log_inspect"
    TEARDOWN = "teardown"


class AssertionResult(ImmutableModel):
    name: str
    pattern: str
    passed: bool
    matched_line: str | None = None


class ScenarioReport(ImmutableModel):
    """Outcome of one scenario run."""

    scenario: str
    stages: list[ScenarioStage] = Field(default_factory=list)
    assertions: list[AssertionResult] = Field(default_factory=list)
    failed_stage: ScenarioStage | None = None
    error: str | None = None
    error_kind: str | None = None
    teardown_errors: list[str] = Field(default_factory=list)
    app_log: str = ""
    duration: Annotated[float, Field(ge=0)] = 0.0
    interrupted: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed_count(self) -> int:
        return sum(1 for a in self.assertions if a.passed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return len(self.assertions)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        return self.error is None and not self.interrupted and self.passed_count == self.total

    @property
    def failed_assertions(self) -> list[AssertionResult]:
        return [a for a in self.assertions if not a.passed]
