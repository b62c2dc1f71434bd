import json
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, Query
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator, metrics
from prometheus_client import Counter
from prometheus_fastapi_instrumentator.metrics import Info

from blogdesk.config import REQUEST_LATENCY_BUCKETS, load_config
from blogdesk.database import BlogDatabase
from blogdesk.errors import BlogError, ValidationError
from blogdesk.rpc import MUTATION, QUERY, build_app_router
from blogdesk.services import MutationService, QueryService

# --- 기본 로깅 ---
config = load_config()
logging.basicConfig(
    level=getattr(logging, config.server.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger('BlogServiceApp')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources."""
    # Startup: 설정은 기동 시점의 환경변수로 다시 읽는다
    settings = load_config()
    db = BlogDatabase(settings.database)
    await db.initialize()
    queries = QueryService(db)
    app.state.db = db
    app.state.queries = queries
    app.state.router = build_app_router(MutationService(db), queries)
    logger.info("Blog service initialized: database and RPC router ready")
    yield
    # Shutdown
    await db.close()
    logger.info("Blog service shutdown: database closed")


app = FastAPI(lifespan=lifespan)

# CORS 설정
# Environment-based CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
)

# Prometheus 메트릭 설정
# 커스텀 메트릭: http_requests_total_custom
# api-gateway와 동일한 형식의 status 레이블(2xx, 4xx, 5xx)을 사용
http_requests_total_custom = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ("method", "status"),
)


def status_group(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "2xx"
    if 300 <= status_code < 400:
        return "3xx"
    if 400 <= status_code < 500:
        return "4xx"
    if 500 <= status_code < 600:
        return "5xx"
    return "unknown"


def http_requests_total_custom_metric(info: Info) -> None:
    http_requests_total_custom.labels(info.method, status_group(info.response.status_code)).inc()


def configure_metrics(application: FastAPI) -> None:
    """Configure Prometheus request latency metrics with fine-grained buckets."""
    instrumentator = Instrumentator()
    instrumentator.add(metrics.latency(buckets=REQUEST_LATENCY_BUCKETS))
    # 커스텀 메트릭 추가
    instrumentator.add(http_requests_total_custom_metric)
    instrumentator.instrument(application).expose(application)


configure_metrics(app)


@app.exception_handler(BlogError)
async def blog_error_handler(request: Request, exc: BlogError):
    """BlogError → {"error": {...}} with the error's HTTP status."""
    if exc.http_status >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _parse_query_input(raw: Optional[str]):
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("input: Invalid JSON")


# --- RPC 핸들러 ---
@app.get("/api/trpc/{path}")
async def handle_query(request: Request, path: str, input: Optional[str] = Query(None)):
    """Query procedure 실행 (input은 JSON 문자열 쿼리 파라미터)."""
    data = await request.app.state.router.call(path, _parse_query_input(input), kind=QUERY)
    return {"result": {"data": data}}


@app.post("/api/trpc/{path}")
async def handle_mutation(request: Request, path: str):
    """Mutation procedure 실행 (input은 JSON body)."""
    body = await request.body()
    if body:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            raise ValidationError("input: Invalid JSON")
    else:
        payload = None
    data = await request.app.state.router.call(path, payload, kind=MUTATION)
    return {"result": {"data": data}}


@app.get("/health")
async def handle_health(request: Request):
    """Kubernetes를 위한 헬스 체크 엔드포인트"""
    is_db_healthy = await request.app.state.db.health_check()
    return {
        "status": "ok",
        "service": "blog-service",
        "database": "healthy" if is_db_healthy else "unhealthy",
    }


@app.get("/stats")
async def handle_stats(request: Request):
    """대시보드를 위한 통계 엔드포인트"""
    queries = request.app.state.queries
    try:
        post_count = await queries.count_posts()
        category_count = await queries.count_categories()
    except BlogError as e:
        logger.error(f"Failed to get counts: {e}", exc_info=True)
        post_count = 0
        category_count = 0

    return {
        "blog_service": {
            "service_status": "online",
            "post_count": post_count,
            "category_count": category_count,
        }
    }


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Blog Service starting on http://{config.server.host}:{config.server.port}")
    uvicorn.run(app, host=config.server.host, port=config.server.port)
