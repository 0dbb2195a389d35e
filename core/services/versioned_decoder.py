from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from core.domain.exceptions import EventSchemaViolation, UnknownSpecVersion

T = TypeVar("T")

DecodeFn = Callable[[Any], T]


class DecodingRule(BaseModel):
    """
    Decodes payloads of one logical name for spec versions in [since, until).

    until=None leaves the range open: later runtimes that kept the same
    encoding keep decoding with this rule.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    since: int
    until: Optional[int] = None
    decode: Callable[[Any], Any]

    def matches(self, spec_version: int) -> bool:
        if spec_version < self.since:
            return False
        return self.until is None or spec_version < self.until

    def overlaps(self, other: DecodingRule) -> bool:
        self_end = self.until if self.until is not None else float("inf")
        other_end = other.until if other.until is not None else float("inf")
        return self.since < other_end and other.since < self_end


class VersionedDecoderRegistry(Generic[T]):
    """
    Maps (logical name, spec version) to the decode function of that encoding.

    Adding support for a runtime upgrade is purely additive: register a new rule
    and close the previous open range with `until`.
    """

    def __init__(self, label: str, *, logger: logging.Logger | None = None) -> None:
        self._label = label
        self._rules: Dict[str, List[DecodingRule]] = {}
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def register(self, name: str, *, since: int, until: Optional[int] = None) -> Callable[[DecodeFn], DecodeFn]:
        """
        Decorator registering `fn` as the decoder of `name` for [since, until).
        """

        def _wrap(fn: DecodeFn) -> DecodeFn:
            self.add_rule(DecodingRule(name=name, since=int(since), until=until, decode=fn))
            return fn

        return _wrap

    def add_rule(self, rule: DecodingRule) -> None:
        rules = self._rules.setdefault(rule.name, [])
        for existing in rules:
            if existing.overlaps(rule):
                raise ValueError(
                    f"{self._label} rule for {rule.name} [{rule.since}, {rule.until}) overlaps "
                    f"[{existing.since}, {existing.until})"
                )
        rules.append(rule)
        rules.sort(key=lambda r: r.since)

    def names(self) -> List[str]:
        return sorted(self._rules)

    def find_rule(self, name: str, spec_version: int) -> Optional[DecodingRule]:
        for rule in self._rules.get(name, []):
            if rule.matches(spec_version):
                return rule
        return None

    def decode(self, name: str, spec_version: int, payload: Any, *, strict: bool = False) -> Optional[T]:
        """
        Decode `payload` with the rule matching `spec_version`.

        Returns None (and logs a warning) when no rule matches, unless strict.

        Raises:
            UnknownSpecVersion: no rule matches and strict is set.
            EventSchemaViolation: the matching rule rejected the payload shape.
        """
        rule = self.find_rule(name, spec_version)
        if rule is None:
            if strict:
                raise UnknownSpecVersion(name, spec_version)
            self._logger.warning("UNKNOWN %s VERSION: %s spec_version=%s", self._label.upper(), name, spec_version)
            return None

        try:
            return rule.decode(payload)
        except (ValidationError, AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
            raise EventSchemaViolation(
                f"{self._label} {name} payload does not match the spec_version={rule.since} encoding: {exc}"
            ) from exc
