"""FastAPI entrypoint for the directory submission answer service."""

import hashlib
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, Response

from directorybot.answers.pipeline import AnswerPipeline, build_pipeline
from directorybot.answers.sites import SiteEntry, find_site, load_site_catalog, site_urls
from directorybot.config import settings
from directorybot.ops.logging import log_event
from directorybot.ops.metrics import (
    inc_request_error,
    metrics_content_type,
    render_metrics,
    set_catalog_sites,
)
from directorybot.ops.ratelimit import RateLimitedError, RateLimiter
from directorybot.schemas import (
    AnalyzeRequest,
    CustomAnswersRequest,
    CustomAnswersResponse,
    SiteAnalysisResult,
    SiteAnswersRequest,
)


def _is_local_bind_host(host: str) -> bool:
    return host.strip().lower() in {"127.0.0.1", "localhost", "::1"}


def startup_security_check() -> None:
    if (
        settings.REQUIRE_API_KEY_ON_NON_LOCALHOST
        and not settings.API_KEY
        and not _is_local_bind_host(settings.API_HOST)
    ):
        raise RuntimeError(
            "Unsafe configuration: API_HOST is non-localhost but API_KEY is empty. "
            "Set API_KEY or set REQUIRE_API_KEY_ON_NON_LOCALHOST=false only for "
            "trusted local testing."
        )
    get_pipeline()


@asynccontextmanager
async def lifespan(_: FastAPI):
    startup_security_check()
    yield


app = FastAPI(title="DirectoryBot", lifespan=lifespan)

# One limiter per process so every request shares the per-site windows.
_RATE_LIMITER = RateLimiter(settings.RATE_LIMIT_WINDOW_SEC)
_PIPELINE: AnswerPipeline | None = None


def get_pipeline() -> AnswerPipeline:
    global _PIPELINE
    if _PIPELINE is None:
        _PIPELINE = build_pipeline(rate_limiter=_RATE_LIMITER)
    return _PIPELINE


def get_catalog() -> list[SiteEntry]:
    try:
        entries = load_site_catalog(settings.SITES_FILE)
    except RuntimeError as exc:
        inc_request_error("catalog_unavailable")
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    set_catalog_sites(len(entries))
    return entries


def require_api_key(request: Request) -> None:
    if (
        settings.REQUIRE_API_KEY_ON_NON_LOCALHOST
        and not settings.API_KEY
        and not _is_local_bind_host(settings.API_HOST)
    ):
        raise HTTPException(
            status_code=503,
            detail=(
                "Server misconfiguration: API key required "
                "for non-localhost bind"
            ),
        )
    if not settings.API_KEY:
        return
    if request.headers.get("x-api-key", "") != settings.API_KEY:
        raise HTTPException(status_code=401, detail="Unauthorized")


def _resolve_request_id(request: Request) -> str:
    return request.headers.get("x-request-id") or uuid.uuid4().hex


def _short_hash(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]


def _validate_site_url_or_raise(site_url: str) -> str:
    clean = site_url.strip()
    if not clean:
        inc_request_error("bad_request")
        raise HTTPException(status_code=400, detail="Missing siteUrl in request body.")
    return clean


def _run_guarded(request_id: str, route: str, action):
    started = time.time()
    try:
        return action()
    except HTTPException as exc:
        inc_request_error(f"http_{exc.status_code}")
        log_event(
            {
                "type": "request_error",
                "request_id": request_id,
                "route": route,
                "status_code": exc.status_code,
                "detail_hash": _short_hash(str(exc.detail)),
            }
        )
        raise
    except RateLimitedError as exc:
        inc_request_error("rate_limited")
        log_event(
            {
                "type": "request_error",
                "request_id": request_id,
                "route": route,
                "status_code": 429,
                "site": exc.key,
            }
        )
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded for '{exc.key}'. Try again shortly.",
        ) from exc
    except Exception as exc:
        inc_request_error(type(exc).__name__)
        log_event(
            {
                "type": "request_error",
                "request_id": request_id,
                "route": route,
                "status_code": 500,
                "error_type": type(exc).__name__,
                "detail_hash": _short_hash(str(exc)),
            }
        )
        raise HTTPException(status_code=500, detail="Internal server error") from exc
    finally:
        log_event(
            {
                "type": "request_end",
                "request_id": request_id,
                "route": route,
                "total_sec": time.time() - started,
            }
        )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics")
def metrics(_: None = Depends(require_api_key)) -> Response:
    return Response(content=render_metrics(), media_type=metrics_content_type())


@app.get("/sites", response_model=list[str])
def sites(
    catalog: list[SiteEntry] = Depends(get_catalog),
    _: None = Depends(require_api_key),
) -> list[str]:
    return site_urls(catalog)


@app.post("/analyze", response_model=SiteAnalysisResult)
def analyze(
    req: AnalyzeRequest,
    request: Request,
    pipeline: AnswerPipeline = Depends(get_pipeline),
    _: None = Depends(require_api_key),
) -> SiteAnalysisResult:
    site_url = _validate_site_url_or_raise(req.site_url)
    if not any(q.strip() for q in req.questions):
        inc_request_error("bad_request")
        raise HTTPException(status_code=400, detail="Questions cannot be empty")
    questions = [q.strip() for q in req.questions if q.strip()]
    return _run_guarded(
        _resolve_request_id(request),
        "analyze",
        lambda: pipeline.analyze(site_url, questions, req.app_info),
    )


@app.post("/generate-answers", response_model=SiteAnalysisResult)
def generate_answers(
    req: SiteAnswersRequest,
    request: Request,
    pipeline: AnswerPipeline = Depends(get_pipeline),
    catalog: list[SiteEntry] = Depends(get_catalog),
    _: None = Depends(require_api_key),
) -> SiteAnalysisResult:
    site_url = _validate_site_url_or_raise(req.site_url)
    entry = find_site(catalog, site_url)
    if entry is None:
        inc_request_error("site_not_found")
        raise HTTPException(status_code=404, detail=f"Site '{site_url}' not found in catalog.")
    return _run_guarded(
        _resolve_request_id(request),
        "generate_answers",
        lambda: pipeline.analyze(entry.site_url, entry.question_texts, req.app_info),
    )


@app.post("/generate-custom-answers", response_model=CustomAnswersResponse)
def generate_custom_answers(
    req: CustomAnswersRequest,
    request: Request,
    pipeline: AnswerPipeline = Depends(get_pipeline),
    catalog: list[SiteEntry] = Depends(get_catalog),
    _: None = Depends(require_api_key),
) -> CustomAnswersResponse:
    analyses = _run_guarded(
        _resolve_request_id(request),
        "generate_custom_answers",
        lambda: pipeline.analyze_catalog(catalog, req.app_info),
    )
    return CustomAnswersResponse(
        app_info=req.app_info,
        analyses=analyses,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


def main() -> None:
    uvicorn.run(
        "directorybot.__main__:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=False,
    )


if __name__ == "__main__":
    main()
