"""Lint routes."""

import logging

from fastapi import APIRouter, HTTPException, status

from logmsglint.analyzers.base import Diagnostic, Rule
from logmsglint.config import LintConfig, get_settings
from logmsglint.errors import LogMsgLintError
from logmsglint.schemas.lint import (
    DiagnosticResponse,
    LintRequest,
    LintResponse,
    RuleListResponse,
    RuleResponse,
)
from logmsglint.services.lint_service import LintService

logger = logging.getLogger(__name__)

router = APIRouter()


def _diagnostic_response(diagnostic: Diagnostic) -> DiagnosticResponse:
    return DiagnosticResponse.model_validate(diagnostic.to_dict())


@router.post("", response_model=LintResponse)
def lint_source(request: LintRequest):
    """Lint a single Python source.

    Patterns from the request are appended to the configured ones. With
    ``fix`` set, the response also carries the rewritten source.
    """
    settings = get_settings()
    try:
        service = LintService(
            config=LintConfig(
                sensitive_patterns=[*settings.sensitive_patterns, *request.sensitive_patterns]
            )
        )
    except LogMsgLintError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    fixed_source = None
    if request.fix:
        fixed_source, result = service.fix_source(request.source, request.file_path)
    else:
        result = service.lint_source(request.source, request.file_path)

    logger.info(f"Linted {request.file_path}: {len(result.diagnostics)} diagnostics")

    return LintResponse(
        file_path=result.file_path,
        diagnostics=[_diagnostic_response(d) for d in result.diagnostics],
        errors=result.errors,
        fixed_source=fixed_source,
        fixes_applied=result.fixes_applied,
    )


@router.get("/rules", response_model=RuleListResponse)
def list_rules():
    """List the rules the analyzer checks."""
    rules = [
        RuleResponse(code=rule.value, name=rule.name.lower(), message=rule.message)
        for rule in Rule
    ]
    return RuleListResponse(rules=rules, total=len(rules))
