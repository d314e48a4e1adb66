"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pathlib import Path
from dotenv import load_dotenv
import tomllib
import logging
import os
from time import perf_counter

# Load environment variables from .env file
load_dotenv()


def _find_pyproject(start_path: Path) -> Path | None:
  for parent in [start_path, *start_path.parents]:
    candidate = parent / "pyproject.toml"
    if candidate.is_file():
      return candidate
  return None


def _read_project_version() -> str:
  pyproject = _find_pyproject(Path(__file__).resolve())
  if not pyproject:
    return "0.0.0"
  try:
    with pyproject.open("rb") as handle:
      data = tomllib.load(handle)
    return data.get("project", {}).get("version", "0.0.0")
  except (OSError, tomllib.TOMLDecodeError):
    return "0.0.0"


PROJECT_VERSION = _read_project_version()


from .errors import PipelineError
from .pipeline import CredentialPipeline
from .routes import fusion, layout
from .services.runtime_metrics import RuntimeMetrics
from .settings import load_settings
from .startup_config import validate_startup_configuration

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
  """Lifespan event handler for startup/shutdown"""
  for warning in validate_startup_configuration():
    log.warning("Startup config: %s", warning)

  settings = load_settings()
  app.state.settings = settings
  app.state.pipeline = CredentialPipeline(settings)
  log.info(
    "Credential fusion API ready (tolerance=%d, fetch_timeout=%ss, max_body=%d bytes)",
    settings.white_tolerance, settings.fetch_timeout_seconds, settings.max_body_bytes
  )

  yield


app = FastAPI(
  title="Credential Fusion API",
  description="Fuses overlay images onto credential templates and lays them out for print",
  version=PROJECT_VERSION,
  docs_url="/api/docs",
  redoc_url="/api/redoc",
  lifespan=lifespan,
)

_startup_settings = load_settings()
_runtime_metrics = RuntimeMetrics()


@app.middleware("http")
async def request_metrics_middleware(request: Request, call_next):
  start = perf_counter()
  route = request.url.path

  settings = getattr(request.app.state, "settings", _startup_settings)
  declared_length = request.headers.get("content-length", "")
  if declared_length.isdigit() and int(declared_length) > settings.max_body_bytes:
    _runtime_metrics.record(route, 413)
    log.warning("request_too_large method=%s route=%s content_length=%s limit=%d",
                request.method, route, declared_length, settings.max_body_bytes)
    return JSONResponse(
      status_code=413,
      content={
        "detail": f"Request body exceeds {settings.max_body_bytes} bytes",
        "error": "payload_too_large",
      },
    )

  try:
    response = await call_next(request)
    route_obj = request.scope.get("route")
    if route_obj and getattr(route_obj, "path", None):
      route = route_obj.path
    _runtime_metrics.record(route, response.status_code)
    if response.status_code >= 500:
      log.error(
        "request_error method=%s route=%s status=%s duration_ms=%.2f",
        request.method,
        route,
        response.status_code,
        (perf_counter() - start) * 1000.0,
      )
    return response
  except Exception:
    route_obj = request.scope.get("route")
    if route_obj and getattr(route_obj, "path", None):
      route = route_obj.path
    _runtime_metrics.record(route, 500)
    log.exception(
      "request_exception method=%s route=%s duration_ms=%.2f",
      request.method,
      route,
      (perf_counter() - start) * 1000.0,
    )
    raise


# CORSMiddleware must stay outermost so 413 responses carry CORS headers.
# Origins are fixed when the app is built.
app.add_middleware(
  CORSMiddleware,
  allow_origins=list(_startup_settings.cors_origins),
  allow_methods=["GET", "POST", "OPTIONS"],
  allow_headers=["Content-Type"],
)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
  """Render pipeline failures as JSON with the error's own status code."""
  _runtime_metrics.record_error(exc.kind)
  log_method = log.error if exc.status_code >= 500 else log.warning
  log_method("pipeline_error kind=%s method=%s path=%s detail=%s",
             exc.kind, request.method, request.url.path, exc.message)
  return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/", response_class=PlainTextResponse)
async def root():
  return "Credential fusion API is running."


@app.get("/healthz")
async def healthz():
  """Liveness probe"""
  return {"ok": True}


@app.get("/api/health")
async def health_check():
  """Health check endpoint"""
  metrics = _runtime_metrics.snapshot()
  return {
    "status": "healthy",
    "version": PROJECT_VERSION,
    "uptime_seconds": metrics["uptime_seconds"],
    "requests_total": metrics["requests_total"],
    "requests_5xx_total": metrics["requests_5xx_total"],
  }


@app.get("/api/metrics")
async def metrics():
  """Basic runtime metrics."""
  return _runtime_metrics.snapshot()


@app.get("/api/version")
async def version_info():
  """Return project version information."""
  return {
    "version": PROJECT_VERSION,
    "display": f"v{PROJECT_VERSION}",
    "tag": f"v{PROJECT_VERSION}"
  }


app.include_router(fusion.router, tags=["fusion"])
app.include_router(layout.router, tags=["layout"])


def run() -> None:
  import uvicorn
  uvicorn.run("credential_fusion.web_api.main:app",
              host=os.getenv("HOST", "0.0.0.0"),
              port=int(os.getenv("PORT", "3000")))


if __name__ == "__main__":
  run()
