"""
Command Spec Model
Pydantic model for a shell command plus the substring its output must contain.
An empty expected_output matches any output.
"""
from pydantic import BaseModel, ConfigDict, Field

from imagetest.core.constants import SHELL_PREFIX


class CommandSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str = Field(..., min_length=1)
    expected_output: str

    @property
    def argv(self) -> list[str]:
        """The command wrapped for execution through bash."""
        return [*SHELL_PREFIX, self.command]
