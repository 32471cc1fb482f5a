import logging

from inkwell.domain.errors import StorageError

from ._impl import RecentViewGuard
from .models import IncrementViewInput, IncrementViewOutput
from .ports import ViewCounterRepoPort

logger = logging.getLogger(__name__)


class ViewCounter:
    """
    Increments article view counters.

    Every increment is one atomic operation at the storage layer. There is no
    de-duplication here; callers decide whether a view should count.
    """

    def __init__(self, repo: ViewCounterRepoPort) -> None:
        self._repo = repo

    def increment(self, article_id: int) -> int | None:
        """
        Count one view. Returns the new count, or None if the article is gone.

        A missing article is logged and swallowed. StorageError propagates.
        """
        views = self._repo.increment_views(article_id)
        if views is None:
            logger.warning("View not counted: article %s does not exist", article_id)
        return views


def run_increment(
    inp: IncrementViewInput,
    repo: ViewCounterRepoPort,
    guard: RecentViewGuard | None = None,
) -> IncrementViewOutput:
    if guard is not None and not guard.should_count(inp.viewer_key, inp.article_id):
        return IncrementViewOutput(views=None, counted=False, success=True)

    try:
        views = ViewCounter(repo).increment(inp.article_id)
    except StorageError:
        # The view was not recorded; the next attempt must be allowed through.
        if guard is not None:
            guard.forget(inp.viewer_key, inp.article_id)
        raise
    if views is None:
        return IncrementViewOutput(success=False, error="Article not found")
    return IncrementViewOutput(views=views, counted=True, success=True)
