"""Compile request and response models.

These models define the interface between the editor and the compile
endpoint. The editor sends CompileRequest with its saved workspace and
receives CompileResponse with the program descriptor and generated code.
"""

from typing import Any

from pydantic import BaseModel, Field


class CompileRequest(BaseModel):
    """Request body for the compile endpoint."""

    workspace: dict[str, Any] = Field(..., description="Saved editor workspace (Blockly JSON)")
    include_code: bool = Field(
        default=True, description="Also return the rendered JavaScript program"
    )


class CompileResponse(BaseModel):
    """Compiled program returned to the editor."""

    program: dict[str, Any] = Field(..., description="ProgramDescriptor, camelCase keys")
    code: str | None = Field(default=None, description="JavaScript function body for the runtime")
    duration_ms: float = Field(default=0.0, description="Compile time in milliseconds")


class CompileErrorDetail(BaseModel):
    """Error payload identifying the offending block."""

    message: str
    node_id: str | None = None
    kind: str | None = None


class BlockKindsResponse(BaseModel):
    """Block kinds the compiler has rules for."""

    values: list[str]
    statements: list[str]
    program: list[str]
