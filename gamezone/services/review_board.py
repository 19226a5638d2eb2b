"""Per-game review list for one context, kept live across contexts."""
import asyncio
import logging
from typing import List, Optional

from ..exceptions import PermissionDeniedError
from ..models import ReviewDraft, ReviewRecord
from ..repositories.review_repository import ReviewRepository
from .auth_service import AuthService
from .notifier import ChangeNotifier
from .review_service import ReviewService, sort_newest_first

logger = logging.getLogger('gamezone.review_board')


class ReviewBoard:
    """The reviews shown for one game, plus the signed-in user's edits.

    * Only a review's author may edit or delete it; that check lives here,
      the ledger itself does not enforce it.
    * After a create or update the record returned by the ledger replaces
      the local copy.
    * Changes made in other contexts trigger a re-fetch via a
      :class:`~gamezone.services.notifier.ChangeNotifier`.
    * Once :meth:`close` is called, results that arrive late are dropped.
    """

    def __init__(self, item_id: int, item_name: str, reviews: ReviewService,
                 auth: AuthService, store,
                 loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self.item_id = int(item_id)
        self.item_name = item_name
        self._service = reviews
        self._auth = auth
        self.reviews: List[ReviewRecord] = []
        self.editing_id: Optional[str] = None
        self.closed = False
        self._notifier = ChangeNotifier(store, ReviewRepository.KEY,
                                        self._on_change, loop=loop)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> List[ReviewRecord]:
        self._notifier.start()
        return await self.refresh()

    def close(self) -> None:
        self.closed = True
        self._notifier.stop()

    async def refresh(self) -> List[ReviewRecord]:
        fetched = await self._service.list_by_item(self.item_id)
        if self.closed:
            logger.debug("Board for item %s closed; ignoring refresh", self.item_id)
            return self.reviews
        self.reviews = sort_newest_first(fetched)
        return self.reviews

    async def wait_idle(self) -> None:
        """Wait for refreshes triggered by other contexts to finish."""
        await self._notifier.wait_idle()

    async def _on_change(self, event) -> None:
        await self.refresh()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def my_review(self) -> Optional[ReviewRecord]:
        if self._auth.user is None:
            return None
        return next((r for r in self.reviews if r.author_id == self._auth.user.id), None)

    def average_rating(self) -> Optional[float]:
        if not self.reviews:
            return None
        return round(sum(r.rating for r in self.reviews) / len(self.reviews), 2)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    async def begin_edit(self, review_id: str) -> ReviewRecord:
        review = await self._owned(review_id)
        self.editing_id = review.id
        return review

    def cancel_edit(self) -> None:
        self.editing_id = None

    async def submit(self, rating: int, comment: str) -> ReviewRecord:
        """Post a new review, or save the one being edited."""
        user = self._auth.require_user()
        if self.editing_id is not None:
            await self._owned(self.editing_id)
            updated = await self._service.update(self.editing_id, rating, comment)
            if not self.closed:
                self.reviews = [updated if r.id == updated.id else r for r in self.reviews]
                self.editing_id = None
            return updated

        draft = ReviewDraft(
            item_id=self.item_id,
            item_name=self.item_name,
            author_id=user.id,
            author_name=user.username,
            rating=rating,
            comment=comment,
        )
        created = await self._service.create(draft)
        if not self.closed:
            others = [r for r in self.reviews if r.id != created.id]
            self.reviews = sort_newest_first([created] + others)
        return created

    async def delete(self, review_id: str) -> None:
        await self._owned(review_id)
        await self._service.delete(review_id)
        if not self.closed:
            self.reviews = [r for r in self.reviews if r.id != review_id]
            if self.editing_id == review_id:
                self.editing_id = None

    async def _owned(self, review_id: str) -> ReviewRecord:
        """Return *review_id* if the signed-in user wrote it."""
        user = self._auth.require_user()
        review = next((r for r in self.reviews if r.id == review_id), None)
        if review is None:
            review = await self._service.get(review_id)
        if review.author_id != user.id:
            raise PermissionDeniedError("You can only change your own reviews.")
        return review
