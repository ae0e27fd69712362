from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .catalog import CATEGORY_FIELDS, PROPERTY_CATEGORIES, PROPERTY_TYPES_CANON, FieldDescriptor, canonize
from .error_handlers import init_error_handlers
from .errors import UnknownCategoryError
from .logging_config import setup_logging
from .mapping import build_search_url, filters_to_params, filters_to_query, params_to_filters
from .middleware import RequestIdMiddleware
from .normalize import normalize_many
from .reducer import apply
from .schemas import (
    ApplyFilterRequest,
    ApplySessionRequest,
    FieldDescriptorOut,
    FilterParamsResponse,
    FilterState,
    NormalizeRequest,
    PropertyRecord,
    SearchRequest,
    SearchResponse,
    SessionState,
    StatsRequest,
    StatsResponse,
)
from .search import search, stats
from .session import apply_session
from .settings import settings

setup_logging(settings.LOG_LEVEL)

app = FastAPI(title="Property Search API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)
init_error_handlers(app)


def _describe(d: FieldDescriptor) -> FieldDescriptorOut:
    return FieldDescriptorOut(
        name=d.name,
        kind=d.kind,
        domain=list(d.domain),
        default=d.default,
        commercial_categories=list(d.commercial_categories),
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/schema", response_model=dict[str, list[FieldDescriptorOut]])
def schema_all():
    return {category: [_describe(d) for d in CATEGORY_FIELDS[category]] for category in PROPERTY_CATEGORIES}


@app.get("/schema/{category:path}", response_model=list[FieldDescriptorOut])
def schema_for(category: str):
    canon = canonize(category, PROPERTY_TYPES_CANON)
    if canon is None:
        raise UnknownCategoryError(f"Unknown property category: {category}")
    return [_describe(d) for d in CATEGORY_FIELDS[canon]]


@app.post("/records/normalize", response_model=list[PropertyRecord])
def normalize_records(req: NormalizeRequest):
    return normalize_many(req.records, now=req.reference_time, newly_listed_days=settings.NEWLY_LISTED_DAYS)


@app.post("/filters/apply", response_model=FilterState)
def apply_filter_action(req: ApplyFilterRequest):
    return apply(req.state, req.action)


@app.post("/session/apply", response_model=SessionState)
def apply_session_action(req: ApplySessionRequest):
    return apply_session(req.state, req.action)


@app.post("/filters/params", response_model=FilterParamsResponse)
def filter_params(filters: FilterState):
    # The URL is optional: without BASE_URL only params and query are returned.
    url = build_search_url(filters) if settings.BASE_URL else None
    return FilterParamsResponse(params=filters_to_params(filters), query=filters_to_query(filters), url=url)


@app.get("/filters/decode", response_model=FilterState)
def decode_filters(request: Request):
    return params_to_filters(request.url.query)


@app.post("/search", response_model=SearchResponse)
def search_records(req: SearchRequest):
    return search(req)


@app.post("/stats", response_model=StatsResponse)
def record_stats(req: StatsRequest):
    return stats(req.records, include_unpublished=req.include_unpublished)
