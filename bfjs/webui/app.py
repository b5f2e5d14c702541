from __future__ import annotations

import io
import logging
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from bfjs.codegen import DEFAULT_TAPE_LENGTH
from bfjs.compiler import Compiler
from bfjs.interpreter import LoopMode, StepLimitExceeded, TreeInterpreter
from bfjs.nodes import count_instructions, tree_to_dict

logger = logging.getLogger(__name__)


class CompileRequest(BaseModel):
    source: str
    tape_length: int = Field(default=DEFAULT_TAPE_LENGTH, ge=1)


class CompileResponse(BaseModel):
    source: str
    ast: List[Dict[str, Any]]
    optimized: List[Dict[str, Any]]
    javascript: str
    instruction_count: int
    optimized_instruction_count: int


class RunRequest(BaseModel):
    source: str
    input: str = ""
    max_steps: int = Field(default=100_000, ge=1)
    loop_mode: str = LoopMode.RESET.value

    @field_validator("loop_mode")
    @classmethod
    def validate_loop_mode(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {mode.value for mode in LoopMode}:
            raise ValueError("loop_mode must be either 'reset' or 'conventional'")
        return normalized


class RunResponse(BaseModel):
    output: str
    steps: int
    pointer: int


def create_app() -> FastAPI:
    app = FastAPI(title="bfjs API", version="0.1.0")

    @app.post("/api/compile", response_model=CompileResponse)
    def compile_program(payload: CompileRequest) -> CompileResponse:
        result = Compiler(tape_length=payload.tape_length).compile(payload.source)
        return CompileResponse(
            source=result.source,
            ast=tree_to_dict(result.tree),
            optimized=tree_to_dict(result.optimized),
            javascript=result.javascript,
            instruction_count=count_instructions(result.tree),
            optimized_instruction_count=count_instructions(result.optimized),
        )

    @app.post("/api/run", response_model=RunResponse)
    def run_program(payload: RunRequest) -> RunResponse:
        optimized = Compiler().compile(payload.source).optimized
        interpreter = TreeInterpreter(loop_mode=LoopMode(payload.loop_mode), max_steps=payload.max_steps)
        try:
            output = interpreter.run(optimized, input_stream=io.StringIO(payload.input))
        except StepLimitExceeded as exc:
            logger.debug("Run aborted after %d steps", interpreter.steps)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=str(exc),
            ) from exc
        return RunResponse(output=output, steps=interpreter.steps, pointer=interpreter.pointer)

    return app


__all__ = ["create_app"]
