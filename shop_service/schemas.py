from typing import List, Optional
from pydantic import BaseModel, Field


class OperationResult(BaseModel):
    """Outcome of one role operation"""
    operation: str = Field(..., examples=["add_product"])
    role: str = Field(..., examples=["admin"])
    ok: bool = True
    rows: List[List[str]] = Field(default_factory=list)
    rowcount: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, operation: str, role: str, error: Exception) -> "OperationResult":
        return cls(operation=operation, role=role, ok=False, error=str(error))

    def __bool__(self) -> bool:
        return self.ok
