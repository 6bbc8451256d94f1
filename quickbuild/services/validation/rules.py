"""
Static validation rules.

Each rule is a pure function over the source text registered under a stable
id; it returns zero or more findings. Rules run in registration order.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from ...core.models.validation import Severity, ValidationFinding
from ..input.resolver import APP_CLASS_PATTERN

RuleCheck = Callable[[str], list[ValidationFinding]]


@dataclass(frozen=True)
class Rule:
    rule_id: str
    check: RuleCheck

    def __call__(self, text: str) -> list[ValidationFinding]:
        return self.check(text)


# Registry of available rules
_RULES: list[Rule] = []


def register(rule_id: str) -> Callable[[RuleCheck], RuleCheck]:
    """Decorator to register a rule under ``rule_id``."""

    def decorator(check: RuleCheck) -> RuleCheck:
        if any(r.rule_id == rule_id for r in _RULES):
            raise ValueError(f"Duplicate validation rule: {rule_id}")
        _RULES.append(Rule(rule_id, check))
        return check

    return decorator


def get_rules() -> list[Rule]:
    """Get all registered rules in evaluation order."""
    return _RULES.copy()


def _error(rule_id: str, message: str, tip: str | None = None) -> ValidationFinding:
    return ValidationFinding(rule_id=rule_id, severity=Severity.ERROR, message=message, tip=tip)


def _warning(
    rule_id: str, message: str, tip: str | None = None, line: int | None = None
) -> ValidationFinding:
    return ValidationFinding(
        rule_id=rule_id, severity=Severity.WARNING, message=message, tip=tip, line=line
    )


def _require(
    rule_id: str, pattern: re.Pattern[str], message: str, tip: str
) -> RuleCheck:
    """Build a recommended-construct check: absence is one warning."""

    def check(text: str) -> list[ValidationFinding]:
        if pattern.search(text):
            return []
        return [_warning(rule_id, message, tip)]

    check.__name__ = f"check_{rule_id.replace('-', '_')}"
    return check


# =============================================================================
# Required structure
# =============================================================================


@register("app-class")
def check_app_class(text: str) -> list[ValidationFinding]:
    if APP_CLASS_PATTERN.search(text):
        return []
    return [
        _error(
            "app-class",
            "No class extending VehicleApp found",
            "Declare: class MyApp : public velocitas::VehicleApp",
        )
    ]


def _balance(rule_id: str, opening: str, closing: str, label: str) -> RuleCheck:
    def check(text: str) -> list[ValidationFinding]:
        opened, closed = text.count(opening), text.count(closing)
        if opened == closed:
            return []
        return [
            _error(
                rule_id,
                f"Unbalanced {label}: {opened} opening, {closed} closing",
                f"Check for a missing '{closing if opened > closed else opening}'",
            )
        ]

    return check


register("brace-balance")(_balance("brace-balance", "{", "}", "braces"))
register("paren-balance")(_balance("paren-balance", "(", ")", "parentheses"))


# =============================================================================
# Recommended constructs
# =============================================================================

for _rule_id, _pattern, _message, _tip in (
    (
        "include-vehicle-app",
        r"#include\s*[<\"][^>\"]*VehicleApp\.h[>\"]",
        "Missing VehicleApp.h include",
        'Add: #include "sdk/VehicleApp.h"',
    ),
    (
        "include-logger",
        r"#include\s*[<\"][^>\"]*Logger\.h[>\"]",
        "Missing Logger.h include",
        'Add: #include "sdk/Logger.h"',
    ),
    (
        "include-vehicle-model",
        r"#include\s*[<\"][^>\"]*Vehicle\.hpp[>\"]",
        "Missing Vehicle.hpp include",
        'Add: #include "vehicle/Vehicle.hpp"',
    ),
    (
        "access-specifiers",
        r"\b(public|private|protected)\s*:",
        "No access specifiers found in class",
        "Separate the class interface with public: and private: sections",
    ),
    (
        "logging-usage",
        r"logger\s*\(\s*\)|Logger::",
        "No logging statements found",
        "Use velocitas::logger().info(...) to report application activity",
    ),
    (
        "lifecycle-start",
        r"\bonStart\s*\(",
        "No onStart() method found",
        "Override onStart() to subscribe to vehicle signals",
    ),
    (
        "signal-subscription",
        r"\bsubscribe\w*\s*\(",
        "No signal subscriptions found",
        "Call subscribeDataPoints(...) in onStart()",
    ),
    (
        "signal-reaction",
        r"\bonDataPointUpdate\b|\bonSignal\w*(Update|Changed)\b",
        "No signal update handler found",
        "Handle updates with onDataPointUpdate(...)",
    ),
    (
        "template-areas",
        r"TEMPLATE AREA",
        "No template area markers found",
        "Mark the customised sections with '// TEMPLATE AREA' comments",
    ),
    (
        "vehicle-signal-access",
        r"\bVehicle\.\w+",
        "No vehicle signal access found",
        "Reference signals through the generated model, e.g. Vehicle.Speed",
    ),
):
    register(_rule_id)(_require(_rule_id, re.compile(_pattern), _message, _tip))


# =============================================================================
# Code smells
# =============================================================================

_ALLOCATION = re.compile(r"\bnew\s+\w|\bmalloc\s*\(")
_RELEASE = re.compile(
    r"\bdelete\b|\bfree\s*\(|unique_ptr|shared_ptr|make_unique|make_shared"
)
_ERROR_HANDLING = re.compile(r"\btry\b|\bcatch\b|exception", re.IGNORECASE)
_WORK_MARKER = re.compile(r"\b(TODO|FIXME|XXX)\b")
# dotted literals such as hosts, addresses or versions, and integers of three or more digits
_HARDCODED = re.compile(r'"[\w-]+(?:\.[\w-]+)+(?::\d+)?"|(?<![\w.])\d{3,}(?![\w.])')
_CLASS_HEAD_SEMICOLON = re.compile(r"^\s*class\s+\w+[^{;]*;")


@register("manual-allocation")
def check_manual_allocation(text: str) -> list[ValidationFinding]:
    if _ALLOCATION.search(text) and not _RELEASE.search(text):
        return [
            _warning(
                "manual-allocation",
                "Dynamic allocation without matching release",
                "Prefer std::make_unique or std::make_shared",
            )
        ]
    return []


@register("error-handling")
def check_error_handling(text: str) -> list[ValidationFinding]:
    if _ERROR_HANDLING.search(text):
        return []
    return [
        _warning(
            "error-handling",
            "No error handling found",
            "Wrap signal access in try/catch and log failures",
        )
    ]


def _code_lines(text: str):
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.lstrip()
        if stripped.startswith(("#", "//", "*", "/*")):
            continue
        yield lineno, line


@register("hardcoded-values")
def check_hardcoded_values(text: str) -> list[ValidationFinding]:
    for lineno, line in _code_lines(text):
        match = _HARDCODED.search(line)
        if match:
            return [
                _warning(
                    "hardcoded-values",
                    f"Hardcoded value {match.group(0)} on line {lineno}",
                    "Move addresses and magic numbers into named constants or configuration",
                    line=lineno,
                )
            ]
    return []


@register("class-semicolon")
def check_class_semicolon(text: str) -> list[ValidationFinding]:
    return [
        _warning(
            "class-semicolon",
            f"Semicolon after class head on line {lineno}",
            "A class definition opens with 'class Name {'",
            line=lineno,
        )
        for lineno, line in _code_lines(text)
        if _CLASS_HEAD_SEMICOLON.search(line)
    ]


@register("work-marker")
def check_work_markers(text: str) -> list[ValidationFinding]:
    findings = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        match = _WORK_MARKER.search(line)
        if match:
            findings.append(
                _warning(
                    "work-marker",
                    f"{match.group(1)} comment on line {lineno}",
                    "Resolve or track leftover work markers before release",
                    line=lineno,
                )
            )
    return findings
