"""Problem listing, lookup and mutation endpoints."""

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_author, get_filters, get_problem_service
from app.responses import success
from problems.filtering.models import ProblemFilters
from problems.models import CommentCreate, StatusUpdate
from problems.service import ProblemService

router = APIRouter(prefix="/api/v1/problems", tags=["problems"])


@router.get("")
async def list_problems(
    page: int = 1,
    limit: int = 10,
    sort_by: str = Query("startTime", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    filters: ProblemFilters = Depends(get_filters),
    service: ProblemService = Depends(get_problem_service),
):
    result = await service.get_problems(filters, page, limit, sort_by, sort_order)
    return success(result.model_dump(by_alias=True))


@router.get("/filter-options")
async def filter_options(service: ProblemService = Depends(get_problem_service)):
    options = await service.get_filter_options()
    return success(options.model_dump(by_alias=True))


@router.get("/{problem_id}")
async def get_problem(problem_id: str, service: ProblemService = Depends(get_problem_service)):
    problem = await service.get_problem_by_id(problem_id)
    return success({"problem": problem})


@router.patch("/{problem_id}/status")
async def update_status(
    problem_id: str,
    body: StatusUpdate,
    service: ProblemService = Depends(get_problem_service),
):
    problem = await service.update_problem_status(problem_id, body.status)
    return success({"problem": problem}, message="Status updated successfully")


@router.post("/{problem_id}/comments")
async def add_comment(
    problem_id: str,
    body: CommentCreate,
    author: str = Depends(get_author),
    service: ProblemService = Depends(get_problem_service),
):
    problem = await service.add_comment(problem_id, body.content, author)
    return success({"problem": problem}, message="Comment added successfully")
