"""Static source validation."""

from .rules import Rule, get_rules, register
from .validator import StaticValidator

__all__ = ["Rule", "StaticValidator", "get_rules", "register"]
