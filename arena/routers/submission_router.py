from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from arena.dependencies import get_submission_service
from arena.exceptions import ForbiddenError
from arena.firebase_auth import get_current_user, is_reviewer, require_reviewer
from arena.models import (
    EnrichedSubmission, Submission, SubmissionCreate, SubmissionFilters,
    SubmissionReview, SubmissionStats, SubmissionStatus, User
)
from arena.services.submission_service import SubmissionService

router = APIRouter(tags=["Submissions"])

# ==================== ENDPOINTS ====================

@router.post("/", response_model=Submission, status_code=201)
async def submit_solution(
    data: SubmissionCreate,
    user: User = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service)
):
    """
    Submit a solution for a challenge.
    One submission per challenge; the challenge must be active and open.
    """
    return await service.submit_solution(user.id, data)

@router.get("/stats", response_model=SubmissionStats)
async def submission_stats(
    reviewer: User = Depends(require_reviewer),
    service: SubmissionService = Depends(get_submission_service)
):
    return await service.get_submission_stats()

@router.get("/pending", response_model=List[EnrichedSubmission])
async def pending_submissions(
    limit: int = Query(50, ge=1, le=200),
    reviewer: User = Depends(require_reviewer),
    service: SubmissionService = Depends(get_submission_service)
):
    """Review queue, oldest first"""
    submissions = await service.get_pending_submissions(limit)
    return await service.enrich_submissions(submissions)

@router.get("/me", response_model=List[Submission])
async def my_submissions(
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service)
):
    return await service.get_submissions_by_user(user.id, limit)

@router.get("/", response_model=List[Submission])
async def list_submissions(
    challenge_id: Optional[str] = None,
    user_id: Optional[str] = None,
    status: Optional[SubmissionStatus] = None,
    limit: int = Query(50, ge=1, le=200),
    reviewer: User = Depends(require_reviewer),
    service: SubmissionService = Depends(get_submission_service)
):
    filters = SubmissionFilters(challenge_id=challenge_id, user_id=user_id, status=status)
    return await service.get_submissions(filters, limit)

@router.get("/{submission_id}", response_model=EnrichedSubmission)
async def get_submission(
    submission_id: str,
    user: User = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service)
):
    """Owner or reviewers only"""
    submission = await service.require_submission(submission_id)
    if submission.user_id != user.id and not is_reviewer(user):
        raise ForbiddenError("Not authorized")
    return await service.enrich_submission(submission)

@router.put("/{submission_id}/review", response_model=Submission)
async def review_submission(
    submission_id: str,
    review: SubmissionReview,
    reviewer: User = Depends(require_reviewer),
    service: SubmissionService = Depends(get_submission_service)
):
    """Approve or reject a pending submission; approval awards the challenge points"""
    return await service.review_submission(submission_id, review.status, review.feedback, reviewer.id)
