"""FastAPI app evaluating lazy sequence pipelines to a bounded prefix."""

from datetime import datetime

from fastapi import FastAPI, HTTPException, Request, Query
from fastapi.responses import JSONResponse

from utils import (
    SOURCES,
    TRANSFORMS,
    PREDICATES,
    SIDE_EFFECTS,
    SUPPORTED_OPERATIONS,
    DEFAULT_EVALUATION_LIMIT,
    MAX_EVALUATION_LIMIT,
    PipelineError,
    evaluate_pipeline,
    measure_performance,
    get_performance_summary,
    logger
)

from models import (
    PipelineRequest, PipelineResponse, GeneratorPrefixResponse,
    RegistryResponse, StatusResponse, ErrorResponse
)

app = FastAPI(
    title="Lazy Sequence Service",
    description="Composable lazy pull sequences: filtering, boundaries, weaving, diagonalization and replay",
    version="1.0.0"
)


@app.get("/", response_model=StatusResponse)
async def root():
    """Basic service banner."""
    return StatusResponse(
        ok=True,
        message="Lazy Sequence Service operational - pipelines are evaluated to a bounded prefix",
        timestamp=datetime.now()
    )


@app.get("/generators", response_model=RegistryResponse)
async def list_registry():
    """List every name a pipeline may refer to."""
    return RegistryResponse(
        generators=sorted(SOURCES),
        transforms=sorted(TRANSFORMS),
        predicates=sorted(PREDICATES),
        side_effects=sorted(SIDE_EFFECTS),
        operations=SUPPORTED_OPERATIONS
    )


@app.get("/generators/{name}", response_model=GeneratorPrefixResponse)
async def generator_prefix(
    name: str,
    limit: int = Query(DEFAULT_EVALUATION_LIMIT, ge=0, le=MAX_EVALUATION_LIMIT, description="Elements to pull")
):
    """Return the first elements of a named generator."""
    factory = SOURCES.get(name)
    if factory is None:
        raise HTTPException(status_code=404, detail=f"Unknown generator: {name}")

    perf = measure_performance(f"generator:{name}", factory().grab, limit)
    return GeneratorPrefixResponse(
        name=name,
        items=perf["result"],
        count=len(perf["result"]),
        execution_time_ms=perf["execution_time_ms"]
    )


@app.post("/pipeline", response_model=PipelineResponse)
def run_pipeline(request: PipelineRequest):
    """Build the pipeline described in the request and pull at most `limit` elements."""
    result = evaluate_pipeline(
        request.source.resolve(),
        [op.to_operation() for op in request.operations],
        limit=request.limit
    )
    return PipelineResponse(**result)


@app.get("/metrics")
async def metrics():
    """Aggregate timings of generator requests."""
    return {
        "ok": True,
        "performance": get_performance_summary(),
        "timestamp": datetime.now().isoformat()
    }


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    logger.warning(f"Rejected pipeline on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=str(exc),
            error_type="PipelineError",
            timestamp=datetime.now()
        ).model_dump(mode="json")
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
