"""
Check Failure Model
===================
Pydantic model recording one failed check.

Fields:
    check_name  — name the check was registered under
    message     — human-readable failure text (tool output, got/want values)
    error_type  — exception class name that caused the failure
"""
from pydantic import BaseModel


class CheckFailure(BaseModel):
    check_name: str
    message: str
    error_type: str = ""

    @classmethod
    def from_exception(cls, check_name: str, exc: BaseException) -> "CheckFailure":
        return cls(check_name=check_name, message=str(exc), error_type=type(exc).__name__)

    def __str__(self) -> str:
        return f"[{self.check_name}] {self.message}"
