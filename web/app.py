"""HTTP front end for the CHIP-8 runner.

POST /api/run takes a program as hex text and returns the run report;
GET /api/glyphs serves the built-in font.
"""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from chip8 import KeyEvent, RunOptions, run_program
from chip8.memory import GLYPH_BYTES, GLYPHS

MAX_PROGRAM_TEXT = 8 * 1024  # hex characters
STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


class KeyEventModel(BaseModel):
    step: int = Field(ge=1)
    key: int = Field(ge=0, le=15)
    pressed: bool = True


class RunOptionsModel(BaseModel):
    max_steps: int = Field(default=1000, ge=1, le=1000000)
    steps_per_tick: int = Field(default=10, ge=0, le=10000)
    seed: Optional[int] = None
    strict: bool = True
    trace: bool = True
    trace_include_registers: bool = False
    trace_include_i: bool = False
    key_events: list[KeyEventModel] = Field(default_factory=list)
    stop_on_self_jump: bool = True

    def to_run_options(self) -> RunOptions:
        fields = self.model_dump(exclude={"key_events"})
        events = [KeyEvent(e.step, e.key, e.pressed) for e in self.key_events]
        return RunOptions(key_events=events, **fields)


class RunRequest(BaseModel):
    program: str
    options: RunOptionsModel = Field(default_factory=RunOptionsModel)


class ErrorReport(BaseModel):
    type: str
    message: str
    step: int
    addr: int
    word: Optional[int] = None


class MachineState(BaseModel):
    pc: int
    i: int
    sp: int
    v: list[int]
    stack: list[int]
    delay_timer: int
    sound_timer: int
    keys: list[bool]


class RunReport(BaseModel):
    status: str
    steps_executed: int
    halted: bool
    final_state: MachineState
    framebuffer: list[str]
    lit_pixels: int
    trace: list[dict]
    error: Optional[ErrorReport] = None


app = FastAPI(title="CHIP-8 Interpreter", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.post("/api/run", response_model=RunReport)
async def run(request: RunRequest):
    """Run a hex-encoded program and report its final state."""
    if len(request.program) > MAX_PROGRAM_TEXT:
        raise HTTPException(400, f"Program text is longer than {MAX_PROGRAM_TEXT} characters")
    return run_program(request.program, options=request.options.to_run_options()).to_dict()


@app.get("/api/glyphs")
async def glyphs():
    rows = [GLYPHS[d * GLYPH_BYTES:(d + 1) * GLYPH_BYTES] for d in range(16)]
    return {"glyphs": [list(row) for row in rows]}


if STATIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
