"""Business logic for game reviews (the review ledger)."""
import logging
import uuid
from dataclasses import replace
from typing import Iterable, List, Optional

from ..exceptions import NotFoundError, ValidationError
from ..models import ReviewDraft, ReviewRecord, utc_now_iso
from ..repositories.review_repository import ReviewRepository
from .latency import Latency

logger = logging.getLogger('gamezone.reviews')

MIN_RATING = 1
MAX_RATING = 5


def sort_newest_first(reviews: Iterable[ReviewRecord]) -> List[ReviewRecord]:
    """Return *reviews* ordered by ``created_at``, newest first."""
    return sorted(reviews, key=lambda r: r.created_at, reverse=True)


class ReviewService:
    """Validates and applies review operations, delegating persistence to
    :class:`~gamezone.repositories.review_repository.ReviewRepository`.

    Rules
    -----
    * ``rating`` must be an integer in the range **1–5** (inclusive).
    * Only ``rating`` and ``comment`` may change after creation.
    * Deleting a missing review is not an error.
    * Listings carry no ordering guarantee; use :func:`sort_newest_first`.
    * Who may edit or delete a review is decided by the caller, not here.
    """

    def __init__(self, repository: ReviewRepository,
                 latency: Optional[Latency] = None) -> None:
        self._repo = repository
        self._latency = latency or Latency()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_rating(rating) -> int:
        try:
            value = int(rating)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Rating must be a whole number, got {rating!r}") from exc
        if not MIN_RATING <= value <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
        return value

    def _records(self) -> List[ReviewRecord]:
        self._repo.reload()
        return [ReviewRecord.from_dict(r) for r in self._repo.all()]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_by_item(self, item_id: int) -> List[ReviewRecord]:
        await self._latency.wait('reviews')
        return [r for r in self._records() if r.item_id == int(item_id)]

    async def list_by_author(self, author_id: str) -> List[ReviewRecord]:
        await self._latency.wait('reviews')
        return [r for r in self._records() if r.author_id == str(author_id)]

    async def get(self, review_id: str) -> ReviewRecord:
        """Return the review *review_id*, or raise :class:`NotFoundError`."""
        await self._latency.wait('reviews')
        self._repo.reload()
        raw = self._repo.find(review_id)
        if raw is None:
            raise NotFoundError("Review not found")
        return ReviewRecord.from_dict(raw)

    async def create(self, draft: ReviewDraft) -> ReviewRecord:
        """Store a new review and return it with its id and timestamp."""
        rating = self._validate_rating(draft.rating)
        if not draft.author_id:
            raise ValidationError("A review needs an author.")
        try:
            int(draft.item_id)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid item id: {draft.item_id!r}") from exc
        await self._latency.wait('reviews')
        self._repo.reload()
        record = ReviewRecord.from_draft(
            f"rev{uuid.uuid4().hex[:12]}",
            replace(draft, rating=rating, comment=draft.comment or ''),
            utc_now_iso(),
        )
        self._repo.prepend(record.to_dict())
        logger.info("Review %s posted for item %s by %s",
                    record.id, record.item_id, record.author_id)
        return record

    async def update(self, review_id: str, rating: int, comment: str) -> ReviewRecord:
        """Replace the rating and comment of *review_id*.

        Raises:
            NotFoundError: If the review does not exist.
        """
        value = self._validate_rating(rating)
        await self._latency.wait('reviews')
        self._repo.reload()
        raw = self._repo.find(review_id)
        if raw is None:
            raise NotFoundError("Review not found")
        updated = dict(raw, rating=value, comment=comment or '')
        self._repo.replace(updated)
        return ReviewRecord.from_dict(updated)

    async def delete(self, review_id: str) -> None:
        """Delete *review_id* if it exists."""
        await self._latency.wait('reviews')
        self._repo.reload()
        if not self._repo.delete(review_id):
            logger.debug("Review %s already absent", review_id)
