"""
Sentiment Service
Batched classification with per-batch neutral fallback
"""

import asyncio
from typing import List, Optional, Sequence

from comment_analytics.domain.interfaces import SentimentClassifier
from comment_analytics.domain.models import MAX_CLASSIFIER_BATCH, Comment, CommentBatch
from comment_analytics.services.base_service import BaseService


def make_batches(comments: Sequence[Comment], size: int = MAX_CLASSIFIER_BATCH) -> List[CommentBatch]:
    """
    Partition ``comments`` into consecutive batches of at most ``size``

    Sizes above the classifier maximum are clamped to it. Concatenating the
    batches yields the input unchanged.
    """
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")

    size = min(size, MAX_CLASSIFIER_BATCH)
    return [
        CommentBatch(index=index, comments=tuple(comments[start : start + size]))
        for index, start in enumerate(range(0, len(comments), size))
    ]


def apply_default_sentiment(comments: Sequence[Comment]) -> List[Comment]:
    """Neutral / 0.5 / "en" annotation for every comment"""
    return [comment.with_default_sentiment() for comment in comments]


class BatchSentimentAnalyzer(BaseService):
    """
    Sentiment classification orchestrator

    Handles:
    - Splitting comments into classifier-sized batches
    - Concurrent submission, bounded by a semaphore
    - Local fallback for batches whose call fails
    - Order-preserving merge once every batch has settled
    """

    def __init__(
        self,
        classifier: SentimentClassifier,
        batch_size: int = MAX_CLASSIFIER_BATCH,
        max_concurrent_requests: Optional[int] = None,
        config=None,
    ):
        super().__init__(config=config)
        self.classifier = classifier
        self.batch_size = batch_size
        self.max_concurrent_requests = max_concurrent_requests

    def get_service_name(self) -> str:
        return "sentiment"

    async def analyze(self, comments: Sequence[Comment]) -> List[Comment]:
        """
        Classify ``comments``; never raises on classifier failure

        Args:
            comments: Comments in display order

        Returns:
            Annotated copies, same length and order as the input
        """
        if not comments:
            return []

        batches = make_batches(comments, self.batch_size)
        self.log_info(f"Classifying {len(comments)} comments in {len(batches)} batches")

        semaphore = asyncio.Semaphore(self.max_concurrent_requests or len(batches))

        async def run(batch: CommentBatch) -> List[Comment]:
            async with semaphore:
                return await self._classify_batch(batch)

        results = await asyncio.gather(*(run(batch) for batch in batches))

        merged = [comment for batch_result in results for comment in batch_result]
        fallback_count = sum(1 for comment in merged if comment.is_fallback)
        if fallback_count:
            self.log_warning(
                f"{fallback_count}/{len(merged)} comments received the neutral fallback"
            )
        return merged

    async def _classify_batch(self, batch: CommentBatch) -> List[Comment]:
        """Classify one batch, substituting the default annotation on failure"""
        try:
            classified = await self.classifier.classify(list(batch.comments))
        except Exception as e:
            self.log_warning(
                f"Batch {batch.index} ({len(batch)} comments) failed, using neutral fallback: {e}"
            )
            return apply_default_sentiment(batch.comments)

        if len(classified) != len(batch):
            self.log_warning(
                f"Batch {batch.index} returned {len(classified)} results for "
                f"{len(batch)} comments, using neutral fallback"
            )
            return apply_default_sentiment(batch.comments)

        self.log_debug(f"Batch {batch.index} classified ({len(batch)} comments)")
        return list(classified)
