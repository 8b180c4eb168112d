"""Fact-checking API endpoints."""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field

from ...domain.models.report import Report
from ...domain.services.article_text import prepare_article
from ...domain.services.fact_checking_service import FactCheckingService
from ...infrastructure.dependencies import get_fact_checking_service, get_job_store
from ...infrastructure.jobs.memory_job_store import InMemoryJobStore, JobProgressReporter

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/fact-check", tags=["fact-check"])


class ArticleCheckRequest(BaseModel):
    """Request model for article fact-checking."""

    content: str = Field(..., min_length=1, description="Article body, plain text or HTML")
    title: Optional[str] = Field(None, description="Article title")


class JobCreatedResponse(BaseModel):
    """Response model for a queued fact-check job."""

    job_id: str
    message: str


async def run_fact_check_job(
    service: FactCheckingService,
    store: InMemoryJobStore,
    job_id: str,
    article: str,
) -> None:
    """Run one fact-check in the background and record the outcome in the store."""
    store.update(job_id, 5, "starting", "Initializing fact-check...")
    try:
        report = await service.fact_check(article, progress=JobProgressReporter(store, job_id))
        store.complete(job_id, report.to_dict())
    except Exception as e:
        logger.error(f"Error in fact-check job {job_id}: {type(e).__name__}: {str(e)}", exc_info=True)
        store.fail(job_id, str(e))


@router.post("", response_model=Report, response_model_exclude_none=True)
async def check_article(
    request: ArticleCheckRequest,
    service: FactCheckingService = Depends(get_fact_checking_service),
) -> Report:
    """Fact-check an article and return the report when done.

    Args:
        request: Article to check

    Returns:
        Compiled fact-check report
    """
    article = prepare_article(request.content, request.title)
    logger.info(f"Starting fact-check for article: {article[:100]}...")
    return await service.fact_check(article)


@router.post("/jobs", response_model=JobCreatedResponse, status_code=202)
async def start_fact_check_job(
    request: ArticleCheckRequest,
    background_tasks: BackgroundTasks,
    service: FactCheckingService = Depends(get_fact_checking_service),
    store: InMemoryJobStore = Depends(get_job_store),
) -> JobCreatedResponse:
    """Queue a fact-check to run in the background.

    Returns:
        Job id to poll with ``GET /fact-check/jobs/{job_id}``
    """
    article = prepare_article(request.content, request.title)
    job = store.create()
    background_tasks.add_task(run_fact_check_job, service, store, job.job_id, article)
    return JobCreatedResponse(job_id=job.job_id, message="Fact-check started in background")


@router.get("/jobs/{job_id}")
async def get_fact_check_job(
    job_id: str,
    store: InMemoryJobStore = Depends(get_job_store),
) -> Dict:
    """Get status, progress and (when finished) the report of a job."""
    return store.get(job_id).to_dict()
