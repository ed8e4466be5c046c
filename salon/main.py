"""FastAPI application for the salon reviews backend."""

import logging
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from salon.config import (
    ALLOWED_ORIGINS,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    RECENT_WINDOW_DAYS,
    REVIEW_MAX_LENGTH,
    REVIEW_MIN_LENGTH,
)
from salon.dependencies import get_current_user, get_optional_user, require_admin
from salon.errors import AuthorizationError, ReviewError
from salon.models.review_documents import ReviewStatus
from salon.services.review_service import review_service

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Salon Reviews API",
    description="Customer reviews, rating statistics and moderation for the salon website",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic models for request bodies
class ReviewRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=REVIEW_MIN_LENGTH, max_length=REVIEW_MAX_LENGTH)


class ReplyRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    reply: str = Field(..., min_length=1, max_length=REVIEW_MAX_LENGTH)


class ModerateRequest(BaseModel):
    status: str
    notes: Optional[str] = None


# Error envelopes
@app.exception_handler(ReviewError)
async def review_error_handler(request: Request, exc: ReviewError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [{"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]} for error in exc.errors()]
    return JSONResponse(status_code=400, content={"success": False, "message": "Validation failed", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


def _ok(data: Any = None, message: Optional[str] = None, pagination: Optional[dict] = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    return body


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "Salon Reviews API"}


# Statistics & analytics endpoints
@app.get("/api/comments/stats")
async def get_review_stats():
    """Rating statistics over approved reviews."""
    try:
        stats = review_service.get_statistics()
        return _ok(stats.model_dump(mode="json"))
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error getting review stats: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/comments/featured")
async def get_featured_reviews(limit: int = Query(3, ge=1, le=20)):
    """Top 5-star reviews by helpful votes."""
    try:
        return _ok(review_service.get_featured(limit))
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error getting featured reviews: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/comments/recent")
async def get_recent_reviews(
    limit: int = Query(5, ge=1, le=MAX_PAGE_SIZE),
    days: int = Query(RECENT_WINDOW_DAYS, ge=1, le=3650),
):
    """Approved reviews from the last `days` days."""
    try:
        return _ok(review_service.get_recent(limit, days))
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error getting recent reviews: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/comments/top-reviewers")
async def get_top_reviewers(limit: int = Query(10, ge=1, le=50)):
    """Reviewer leaderboard."""
    try:
        return _ok(review_service.get_top_reviewers(limit))
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error getting top reviewers: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/comments/verified")
async def get_verified_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """Reviews written by verified users."""
    try:
        result = review_service.list_by_filter("verified", page=page, limit=limit)
        return _ok(result["data"], pagination=result["pagination"])
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error getting verified reviews: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/comments/by-rating")
async def get_reviews_by_rating(
    rating: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """Reviews with exactly the given star rating."""
    try:
        result = review_service.list_by_filter("by_rating", page=page, limit=limit, rating=rating)
        return _ok(result["data"], pagination=result["pagination"])
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error getting reviews by rating: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/comments/search")
async def search_reviews(
    query: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """Case-insensitive substring search over review text and author name."""
    try:
        result = review_service.list_by_filter("search", page=page, limit=limit, query=query)
        return _ok(result["data"], pagination=result["pagination"])
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error searching reviews: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# Admin endpoints
@app.get("/api/comments/admin/pending")
async def get_pending_reviews(admin: dict = Depends(require_admin)):
    """Moderation queue."""
    try:
        return _ok(review_service.get_pending())
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error getting pending reviews: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.patch("/api/comments/{review_id}/moderate")
async def moderate_review(review_id: int, request: ModerateRequest, admin: dict = Depends(require_admin)):
    """Set a review's moderation status."""
    try:
        result = review_service.moderate(review_id, request.status, moderator_id=admin["id"], notes=request.notes)
        return _ok(result, message=f"Review {result['status']} successfully")
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error moderating review: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# Review CRUD endpoints
@app.get("/api/comments/user/my-comments")
async def get_my_reviews(user: dict = Depends(get_current_user)):
    """Reviews written by the caller."""
    try:
        return _ok(review_service.get_user_reviews(user["id"]))
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error getting user reviews: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/comments")
async def list_reviews(
    status: str = Query(ReviewStatus.APPROVED.value),
    rating: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort: str = Query("created_at"),
    order: str = Query("DESC"),
    user: Optional[dict] = Depends(get_optional_user),
):
    """Public listing. Only admins can list pending or rejected reviews."""
    try:
        if status != ReviewStatus.APPROVED.value and not (user and user.get("is_admin")):
            raise AuthorizationError("Admin access required")
        result = review_service.list_reviews(status=status, rating=rating, page=page, limit=limit, sort=sort, order=order)
        return _ok(result["data"], pagination=result["pagination"])
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error listing reviews: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/api/comments", status_code=201)
async def create_review(request: ReviewRequest, user: dict = Depends(get_current_user)):
    """Submit the caller's review."""
    try:
        review = review_service.create_review(user["id"], request.rating, request.comment)
        return _ok(review, message="Comment created successfully")
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error creating review: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/comments/{review_id}")
async def get_review(review_id: int):
    """One review with its replies."""
    try:
        return _ok(review_service.get_review(review_id))
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error getting review: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.put("/api/comments/{review_id}")
async def update_review(review_id: int, request: ReviewRequest, user: dict = Depends(get_current_user)):
    """Edit the caller's own review."""
    try:
        review = review_service.update_review(review_id, user["id"], request.rating, request.comment)
        return _ok(review, message="Comment updated successfully")
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error updating review: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.delete("/api/comments/{review_id}")
async def delete_review(review_id: int, user: dict = Depends(get_current_user)):
    """Delete a review as its owner or as an admin."""
    try:
        review_service.delete_review(review_id, user["id"], is_admin=bool(user.get("is_admin")))
        return _ok(message="Comment deleted successfully")
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error deleting review: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/api/comments/{review_id}/helpful")
async def mark_review_helpful(review_id: int, user: Optional[dict] = Depends(get_optional_user)):
    """Add a helpful vote."""
    try:
        return _ok(review_service.mark_helpful(review_id), message="Marked as helpful")
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error marking review helpful: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/api/comments/{review_id}/reply", status_code=201)
async def reply_to_review(review_id: int, request: ReplyRequest, user: dict = Depends(get_current_user)):
    """Reply to a review."""
    try:
        reply = review_service.reply(review_id, user["id"], request.reply)
        return _ok(reply, message="Reply added successfully")
    except ReviewError:
        raise
    except Exception as e:
        logger.error(f"Error replying to review: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
