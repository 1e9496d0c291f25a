"""Recording report callbacks for tracing tests."""

from dataclasses import dataclass, field
from typing import Any

from call_tracer.tracing import get_current_advised, get_trace_level


@dataclass
class ReportRecorder:
    """Collects report events as ``(kind, level, name, payload)`` tuples."""

    events: list[tuple[str, int, str | None, Any]] = field(default_factory=list)

    def _name(self) -> str | None:
        slot = get_current_advised()
        return slot.name if slot is not None else None

    def before(self, *args: Any, **kwargs: Any) -> None:
        payload = (args, kwargs) if kwargs else args
        self.events.append(("before", get_trace_level(), self._name(), payload))

    def after(self, retval: Any) -> None:
        self.events.append(("after", get_trace_level(), self._name(), retval))

    @property
    def options(self) -> dict[str, Any]:
        return {"report_before": self.before, "report_after": self.after}

    @property
    def levels(self) -> list[int]:
        return [level for _, level, _, _ in self.events]

    @property
    def kinds(self) -> list[tuple[str, str | None]]:
        return [(kind, name) for kind, _, name, _ in self.events]
