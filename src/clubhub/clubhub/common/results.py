from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    key: str
    value: T


@dataclass(frozen=True)
class Err:
    key: str
    reason: str


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class Partition:
    success: list[str] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"success": list(self.success), "failed": list(self.failed)}


def capture(key: str, fn: Callable[[], T], *, describe: Callable[[Exception], str]) -> Result:
    """Run ``fn`` and wrap its outcome; ``describe`` turns an exception into a reason."""
    try:
        return Ok(key, fn())
    except Exception as e:
        return Err(key, describe(e))


def partition_results(results: Iterable[Result], *, key_name: str = "user_id") -> Partition:
    success: list[str] = []
    failed: list[dict] = []
    for r in results:
        if isinstance(r, Ok):
            success.append(r.key)
        else:
            failed.append({key_name: r.key, "reason": r.reason})
    return Partition(success=success, failed=failed)
