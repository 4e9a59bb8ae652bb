"""Verdict returned by every record check."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from recordcheck.models.snapshot import ChangeRecord


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    passed: bool
    message: Optional[str] = None
    # Update checks fill these in; destroy and identity checks leave them empty
    changes: List[ChangeRecord] = Field(default_factory=list)
    unattributed: List[str] = Field(default_factory=list)

    def __bool__(self) -> bool:
        return self.passed

    @classmethod
    def success(cls, **kwargs) -> "Verdict":
        return cls(passed=True, message=None, **kwargs)

    @classmethod
    def failure(cls, message: str, **kwargs) -> "Verdict":
        return cls(passed=False, message=message, **kwargs)


__all__ = ["Verdict"]
