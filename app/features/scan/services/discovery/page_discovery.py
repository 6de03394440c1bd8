from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.features.scan.services.navigation.page_navigator import PageNavigator, WaitCondition
from app.platform.config import settings
from app.platform.exceptions import InvalidUrlError, NavigationError
from app.platform.logger import get_logger
from app.platform.utils.url_validator import get_origin, normalize_url

logger = get_logger(__name__)

NavigatorFactory = Callable[[WaitCondition], PageNavigator]


class CrawlTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    depth: int = Field(ge=0)


class CrawlState:
    """
    Frontier bookkeeping for a single crawl invocation.

    `visited` is an insertion-ordered dict used as a set; its key order is the
    crawl output. `queued` only answers membership questions for the frontier.
    """

    def __init__(self, max_pages: int, max_depth: int):
        self.max_pages = max_pages
        self.max_depth = max_depth
        self.visited: Dict[str, None] = {}
        self.queued: set = set()
        self.frontier: Deque[CrawlTarget] = deque()

    def enqueue(self, url: str, depth: int) -> None:
        self.frontier.append(CrawlTarget(url=url, depth=depth))
        self.queued.add(url)

    def dequeue(self) -> CrawlTarget:
        target = self.frontier.popleft()
        self.queued.discard(target.url)
        return target

    def mark_visited(self, url: str) -> None:
        self.visited[url] = None

    def is_known(self, url: str) -> bool:
        return url in self.visited or url in self.queued

    def has_room(self) -> bool:
        return len(self.visited) + len(self.frontier) < self.max_pages

    def should_continue(self) -> bool:
        return bool(self.frontier) and len(self.visited) < self.max_pages

    def result(self) -> List[str]:
        return list(self.visited)


class PageDiscoveryService:
    """Breadth-first, same-origin page discovery bounded by page and depth caps."""

    def __init__(
        self,
        navigator_factory: Optional[NavigatorFactory] = None,
        wait_until: Optional[WaitCondition] = None,
        timeout_ms: Optional[int] = None,
    ):
        self.navigator_factory = navigator_factory or PageNavigator.launch
        self.wait_until = WaitCondition(wait_until or settings.CRAWL_WAIT_UNTIL)
        self.timeout_ms = timeout_ms or settings.CRAWL_TIMEOUT_MS

    @staticmethod
    def clamp_limits(max_pages: Optional[int], max_depth: Optional[int]):
        pages = settings.DEFAULT_MAX_PAGES if max_pages is None else int(max_pages)
        depth = settings.DEFAULT_MAX_DEPTH if max_depth is None else int(max_depth)
        return (
            max(1, min(pages, settings.MAX_PAGES_LIMIT)),
            max(0, min(depth, settings.MAX_DEPTH_LIMIT)),
        )

    @staticmethod
    def _is_same_origin(url: str, origin: str) -> bool:
        try:
            return get_origin(url) == origin
        except InvalidUrlError:
            return False

    def crawl(
        self,
        start_url: str,
        max_pages: Optional[int] = None,
        max_depth: Optional[int] = None,
        same_origin_only: bool = True,
    ) -> List[str]:
        """
        Discover pages reachable from `start_url`.

        Args:
            start_url: absolute http(s) URL to start from
            max_pages: cap on returned URLs (default 25, at most 200)
            max_depth: link generations to expand (default 2, at most 10)
            same_origin_only: drop links to other scheme/host/port combinations

        Returns:
            Normalized URLs in BFS visitation order, start URL first

        Raises:
            InvalidUrlError: if start_url is not an absolute http(s) URL
        """
        start = normalize_url(start_url)
        origin = get_origin(start)
        max_pages, max_depth = self.clamp_limits(max_pages, max_depth)

        state = CrawlState(max_pages=max_pages, max_depth=max_depth)
        state.enqueue(start, 0)

        logger.info(f"Crawling {start} (max_pages={max_pages}, max_depth={max_depth})")

        navigator: Optional[PageNavigator] = None
        try:
            while state.should_continue():
                target = state.dequeue()
                if target.url in state.visited:
                    continue
                state.mark_visited(target.url)

                if target.depth >= max_depth:
                    continue

                if navigator is None:
                    navigator = self.navigator_factory(self.wait_until)
                try:
                    navigator.navigate(target.url, self.wait_until, self.timeout_ms)
                    hrefs = navigator.extract_links()
                except NavigationError as e:
                    logger.warning(f"Not expanding {target.url}: {e.reason}")
                    continue

                self._enqueue_links(state, hrefs, target, origin, same_origin_only)
        finally:
            if navigator is not None:
                navigator.close()

        pages = state.result()
        logger.info(f"Discovered {len(pages)} pages from {start}")
        return pages

    def _enqueue_links(
        self,
        state: CrawlState,
        hrefs: List[str],
        source: CrawlTarget,
        origin: str,
        same_origin_only: bool,
    ) -> None:
        for href in hrefs:
            try:
                url = normalize_url(href, source.url)
            except InvalidUrlError:
                continue

            if same_origin_only and not self._is_same_origin(url, origin):
                continue
            if state.is_known(url):
                continue
            if not state.has_room():
                break

            state.enqueue(url, source.depth + 1)
