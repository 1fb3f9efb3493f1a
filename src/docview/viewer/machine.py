"""Document viewer state machine."""

import logging
from collections.abc import Awaitable, Callable

from docview.cache.manager import DocumentCache
from docview.config import ViewerConfig
from docview.core.document_factory import DocumentFactory, OpenedDocument
from docview.core.source_resolver import AssetBundle, SourceResolver
from docview.models.content import ContentBlock
from docview.models.source import DocumentSource, DocumentType
from docview.models.thumbnail import Thumbnail
from docview.viewer.state import Phase, ViewerState, can_transition

log = logging.getLogger(__name__)

Listener = Callable[[ViewerState], None]


class DocumentViewer:
    """Loads one document and tracks loading/ready/error plus the current page.

    All methods must be called from the event loop that runs :meth:`load`.
    Navigation outside ``1..total_pages`` or in the wrong phase is
    rejected and leaves the state untouched.
    """

    def __init__(
        self,
        source: DocumentSource,
        document_type: DocumentType,
        config: ViewerConfig | None = None,
        resolver: SourceResolver | None = None,
    ):
        self.source = source
        self.document_type = document_type
        self.config = config or ViewerConfig()
        self.resolver = resolver or SourceResolver(
            DocumentCache(self.config.app_data_dir),
            AssetBundle(self.config.asset_root),
            timeout=self.config.request_timeout,
        )
        self._state = ViewerState.loading()
        self._document: OpenedDocument | None = None
        self._listeners: list[Listener] = []
        self._started = False
        self._disposed = False

    @classmethod
    async def open(
        cls,
        source: DocumentSource,
        document_type: DocumentType,
        config: ViewerConfig | None = None,
        resolver: SourceResolver | None = None,
    ) -> "DocumentViewer":
        """Create a viewer and run its initial load."""
        viewer = cls(source, document_type, config=config, resolver=resolver)
        await viewer.load()
        return viewer

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def state(self) -> ViewerState:
        return self._state

    @property
    def filename(self) -> str:
        return self.source.filename

    @property
    def document_title(self) -> str | None:
        """Title of the open document, None until ready."""
        if self._document is None:
            return None
        return self._document.title

    @property
    def page_label(self) -> str:
        return self._state.page_label

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` on every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: ViewerState) -> None:
        if not can_transition(self._state.phase, state.phase):
            raise RuntimeError(
                f"Invalid transition {self._state.phase.value} -> {state.phase.value}"
            )
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                log.exception(f"State listener failed on {state.phase.value}")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Run the initial acquisition and initialization. Only the first call loads."""
        if self._started:
            log.debug("load() called more than once; ignoring")
            return
        self._started = True
        await self._run_load()

    async def retry(self) -> bool:
        """Reload from scratch after an error. Returns False if not in error."""
        if self._disposed or self._state.phase != Phase.ERROR:
            log.debug(f"Retry rejected in phase {self._state.phase.value}")
            return False
        log.info(f"Retrying load of {self.source.path}")
        self._set_state(ViewerState.loading())
        await self._run_load()
        return True

    async def _run_load(self) -> None:
        try:
            local = await self.resolver.resolve(self.source)
            document = await DocumentFactory.open(local, self.document_type)
        except Exception as e:
            log.error(f"Error loading document: {e}")
            if not self._disposed:
                self._set_state(ViewerState.error(str(e)))
            return

        if self._disposed:
            document.close()
            return

        self._document = document
        if self.config.show_thumbnails:
            document.start_thumbnails(self.config)

        log.info(f"Loaded {self.filename}: {document.total_pages} pages")
        self._set_state(ViewerState.ready(1, document.total_pages))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_to_index(self, index: int) -> bool:
        """Move to a 1-based page. Returns False if the request was rejected."""
        state = self._state
        if self._disposed or not state.is_ready:
            log.debug(f"Navigation rejected in phase {state.phase.value}")
            return False
        if not 1 <= index <= state.total_pages:
            log.debug(f"Navigation to {index} outside 1..{state.total_pages}")
            return False
        if index != state.current_index:
            self._set_state(ViewerState.ready(index, state.total_pages))
        return True

    def next_page(self) -> bool:
        return self.go_to_index(self._state.current_index + 1)

    def previous_page(self) -> bool:
        return self.go_to_index(self._state.current_index - 1)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def thumbnail(self, index: int) -> Awaitable[Thumbnail | None] | None:
        """Awaitable thumbnail for a page, or None if none was scheduled or it was cancelled.

        An awaitable that resolves to None is a permanent render failure.
        """
        if self._document is None:
            return None
        return self._document.thumbnails.get(index)

    def content_blocks(self, index: int) -> list[ContentBlock]:
        """Parsed content of one chapter; empty until ready and for PDF pages.

        Raises:
            IndexError: If ``index`` is outside ``1..total_pages``
        """
        if self._document is None:
            return []
        if not 1 <= index <= self._document.total_pages:
            raise IndexError(f"Index {index} outside 1..{self._document.total_pages}")
        return self._document.content_blocks(index)

    def chapter_outline(self) -> list[tuple[str | None, int]]:
        """(title, depth) for every page; titles are None for PDF pages."""
        if self._document is None:
            return []
        return self._document.outline()

    def dispose(self) -> None:
        """Release the document handle. Outstanding thumbnails are left to finish."""
        self._disposed = True
        if self._document is not None:
            self._document.close()
        self._listeners.clear()
