"""Lint request and response schemas."""

from pydantic import BaseModel, Field


class LintRequest(BaseModel):
    """Source submitted for linting."""

    source: str = Field(..., max_length=2_000_000)
    file_path: str = Field("<string>", min_length=1, max_length=1024)
    sensitive_patterns: list[str] = Field(default_factory=list)
    fix: bool = False


class TextEditResponse(BaseModel):
    """Byte-range replacement in the submitted source."""

    start: int
    end: int
    new_text: str


class SuggestedFixResponse(BaseModel):
    message: str
    edits: list[TextEditResponse]


class DiagnosticResponse(BaseModel):
    """Single log message diagnostic."""

    code: str
    message: str
    file_path: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int
    fix: SuggestedFixResponse | None = None


class LintResponse(BaseModel):
    """Lint response."""

    file_path: str
    diagnostics: list[DiagnosticResponse]
    errors: list[str]
    fixed_source: str | None = None
    fixes_applied: int = 0


class RuleResponse(BaseModel):
    code: str
    name: str
    message: str


class RuleListResponse(BaseModel):
    rules: list[RuleResponse]
    total: int
