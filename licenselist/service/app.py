"""FastAPI application exposing license resolution and manifest builds."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

try:  # pragma: no cover - optional dependency
    from fastapi import FastAPI, HTTPException
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    HTTPException = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..config import ConfigError, LicenseListConfig
from ..database import LicenseDatabase
from ..errors import LicenseListError
from ..licenses import LicenseResolver
from ..logging import get_logger
from ..orchestrator import Orchestrator, RunResult

_MISSING_STACK = (
    "Service mode needs the optional web stack. Install it with `pip install licenselist[service]`."
)

OrchestratorFactory = Callable[[LicenseListConfig], Orchestrator]

log = get_logger("service")


class ResolveRequest(BaseModel):
    expression: str


class LabelModel(BaseModel):
    name: str
    url: str


class ResolveResponse(BaseModel):
    labels: List[LabelModel]
    warnings: List[str]


class LicenseModel(BaseModel):
    license_id: str
    name: str
    reference: str
    is_fsf_libre: bool
    is_osi_approved: bool
    is_deprecated: bool


class GenerateRequest(BaseModel):
    stats: Dict[str, Any]
    project_root: str
    config: Dict[str, Any] = {}
    output_path: Optional[str] = None


class GenerateResponse(BaseModel):
    manifest_path: str
    modules_processed: int
    files_copied: int
    warnings: List[str]


class HealthResponse(BaseModel):
    status: str
    licenses: int


def _generate_response(result: RunResult) -> GenerateResponse:
    return GenerateResponse(
        manifest_path=str(result.manifest_path),
        modules_processed=result.modules_processed,
        files_copied=result.files_copied,
        warnings=[warning.message for warning in result.diagnostics],
    )


def create_app(
    orchestrator_factory: OrchestratorFactory = Orchestrator,
    *,
    database: LicenseDatabase | None = None,
) -> FastAPI:
    """Build the service app; ``orchestrator_factory`` creates one orchestrator per build."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(_MISSING_STACK)

    app = FastAPI(title="licenselist", version="0.1.0")
    database = database or LicenseDatabase.load()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", licenses=len(database))

    @app.get("/licenses/{license_id}", response_model=LicenseModel)
    async def license_info(license_id: str) -> LicenseModel:
        info = database.get(license_id)
        if info is None:
            raise HTTPException(status_code=404, detail=f"Unknown license {license_id!r}")
        return LicenseModel(
            license_id=info.license_id,
            name=info.name,
            reference=info.reference,
            is_fsf_libre=info.is_fsf_libre,
            is_osi_approved=info.is_osi_approved,
            is_deprecated=info.is_deprecated,
        )

    @app.post("/resolve", response_model=ResolveResponse)
    async def resolve(payload: ResolveRequest) -> ResolveResponse:
        resolver = LicenseResolver(database)
        labels = resolver.resolve(payload.expression, "service request")
        return ResolveResponse(
            labels=[LabelModel(name=label.name, url=label.url) for label in labels],
            warnings=[warning.message for warning in resolver.diagnostics],
        )

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(payload: GenerateRequest) -> GenerateResponse:
        root = Path(payload.project_root).expanduser().resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Project root {root} does not exist")
        output_path = Path(payload.output_path) if payload.output_path else None

        def _build() -> RunResult:
            config = LicenseListConfig.from_mapping(payload.config, root)
            return orchestrator_factory(config).run(payload.stats, output_path=output_path)

        log.info("Building license manifest for %s", root)
        result = await asyncio.get_running_loop().run_in_executor(None, _build)
        return _generate_response(result)

    @app.exception_handler(FileNotFoundError)
    async def missing_root_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(LicenseListError)
    async def run_failure_handler(_: Any, exc: LicenseListError) -> JSONResponse:
        # Bad configuration payloads are 422, build failures 400.
        status = 422 if isinstance(exc, ConfigError) else 400
        log.warning("Request failed: %s", exc)
        return JSONResponse(
            status_code=status,
            content={"detail": str(exc), "error": type(exc).__name__},
        )

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, *, log_level: str = "info"
) -> None:  # pragma: no cover - integration path
    """Serve :func:`create_app` with uvicorn."""
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(_MISSING_STACK)

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(_MISSING_STACK) from exc

    uvicorn.run(create_app(), host=host, port=port, log_level=log_level)
