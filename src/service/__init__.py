"""Compile service API."""

from src.service.compile_service import CompileResult, CompileService

__all__ = ["CompileService", "CompileResult"]
