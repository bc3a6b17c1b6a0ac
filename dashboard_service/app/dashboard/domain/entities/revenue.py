from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class Revenue:
    month: str
    revenue: int

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Revenue":
        return cls(month=record["month"], revenue=int(record["revenue"]))
