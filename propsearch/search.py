import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from .normalize import normalize_many
from .predicate import compile_filters, sort_records
from .schemas import Pagination, PropertyRecord, SearchRequest, SearchResponse, StatsResponse
from .settings import settings

logger = logging.getLogger(__name__)


def is_published(record: PropertyRecord, statuses: Iterable[str] | None = None) -> bool:
    allowed = {s.casefold() for s in (statuses if statuses is not None else settings.PUBLISHED_STATUSES)}
    return record.status.casefold() in allowed


def _normalize(raws: Iterable[Any], reference_time: datetime | None) -> list[PropertyRecord]:
    return normalize_many(raws, now=reference_time, newly_listed_days=settings.NEWLY_LISTED_DAYS)


def search(req: SearchRequest) -> SearchResponse:
    records = _normalize(req.records, req.reference_time)
    if not req.include_unpublished:
        records = [r for r in records if is_published(r)]
    if req.posting_type:
        records = [r for r in records if r.posting_type == req.posting_type]

    predicate = compile_filters(req.filters)
    matched = sort_records((r for r in records if predicate(r)), req.sort_by)

    limit = min(req.limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    page = matched[req.offset:req.offset + limit]
    logger.info(
        "search: %d raw, %d candidates, %d matched, returning %d",
        len(req.records), len(records), len(matched), len(page),
    )
    return SearchResponse(
        data=page,
        pagination=Pagination(
            total=len(matched),
            limit=limit,
            offset=req.offset,
            has_more=len(matched) > req.offset + limit,
        ),
    )


def stats(raws: Iterable[Any], include_unpublished: bool = False) -> StatsResponse:
    records = _normalize(raws, None)
    if not include_unpublished:
        records = [r for r in records if is_published(r)]
    by_type = Counter(r.category or "Other" for r in records)
    by_posting = Counter({"Sell": 0, "Rent": 0})
    by_posting.update(r.posting_type for r in records)
    return StatsResponse(
        total=len(records),
        by_property_type=dict(by_type),
        by_posting_type=dict(by_posting),
    )
