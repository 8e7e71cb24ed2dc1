"""
Render Service - Business logic for single and batch image rendering.

This service owns the raster surface and codec, applies filter presets,
runs batches in input order (optionally on a worker pool) and bundles
batch outputs into ZIP archives.
"""

import io
import logging
import re
import threading
import uuid
import zipfile
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set, Tuple

from core.constants import BatchConstants
from core.enums import BatchEventType
from core.exceptions import BatchCancelled, RenderException
from core.image.converters import ImageConverters
from core.utils.decorators import timer
from core.utils.numeric import clamp
from imaging.codec import EncodedImage, RasterCodec
from imaging.pipeline import render
from imaging.presets import apply_preset
from imaging.surface import RasterSurface
from schemas import BatchEventMessage, RenderPlan, RenderRequest

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r'[\\/:*?"<>|]+')
_EXTENSION = re.compile(r"\.[^.]+$")


def safe_name(name: Optional[str]) -> str:
    """Replace path separators and characters archives reject."""
    return _UNSAFE_NAME_CHARS.sub("_", str(name or BatchConstants.DEFAULT_ITEM_NAME))


def replace_extension(name: Optional[str], mime_type: str) -> str:
    """
    Sanitize a file name and swap its extension for the output type.

    Example:
        >>> replace_extension("holiday/photo.jpeg", "image/webp")
        'holiday_photo.webp'
    """
    base = _EXTENSION.sub("", safe_name(name))
    return f"{base}.{RasterCodec.extension_for(mime_type)}"


def unique_entry_name(entry: str, taken: Set[str]) -> str:
    """
    Suffix entry with -2, -3, ... until it is not in taken.

    Example:
        >>> unique_entry_name("one.png", {"one.png", "one-2.png"})
        'one-3.png'
    """
    if entry not in taken:
        return entry
    match = _EXTENSION.search(entry)
    ext = match.group(0) if match else ""
    stem = entry[: len(entry) - len(ext)]
    suffix = 2
    while f"{stem}-{suffix}{ext}" in taken:
        suffix += 1
    return f"{stem}-{suffix}{ext}"


@dataclass
class BatchEvent:
    """One event of the batch protocol."""

    type: BatchEventType
    index: Optional[int] = None
    name: Optional[str] = None
    encoded: Optional[EncodedImage] = None
    value: Optional[float] = None
    message: Optional[str] = None
    completed: Optional[int] = None
    error: Optional[RenderException] = None

    def to_message(self) -> BatchEventMessage:
        """Wire representation (output bytes as base64)."""
        return BatchEventMessage(
            type=self.type,
            index=self.index,
            name=self.name,
            encoded_bytes=ImageConverters.to_base64(self.encoded.data) if self.encoded else None,
            output_mime=self.encoded.mime_type if self.encoded else None,
            value=self.value,
            message=self.message,
            completed=self.completed,
        )


class RenderService:
    """
    Service for render operations.

    A batch is identified by a batch id; cancelling it takes effect at the
    next item boundary.
    """

    def __init__(
        self,
        surface: RasterSurface,
        codec: Optional[RasterCodec] = None,
        max_workers: int = BatchConstants.DEFAULT_MAX_WORKERS,
    ):
        """
        Initialize render service.

        Args:
            surface: Raster surface backend shared by all renders
            codec: Raster codec (a Pillow codec by default)
            max_workers: Worker threads per batch (1 renders sequentially)
        """
        self.surface = surface
        self.codec = codec or RasterCodec()
        self.max_workers = int(clamp(max_workers, 1, BatchConstants.MAX_WORKERS_LIMIT))

        self._batches: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    # ---- cancellation registry ----

    def start_batch(self, batch_id: Optional[str] = None) -> str:
        """Register a batch and return its id."""
        batch_id = batch_id or uuid.uuid4().hex
        with self._lock:
            self._batches[batch_id] = threading.Event()
        return batch_id

    def cancel_batch(self, batch_id: str) -> bool:
        """
        Request cancellation of a running batch.

        Returns:
            True if the batch was running, False if unknown or finished
        """
        with self._lock:
            event = self._batches.get(batch_id)
        if event is None:
            return False
        event.set()
        logger.info(f"Cancellation requested for batch {batch_id}")
        return True

    def finish_batch(self, batch_id: str) -> None:
        with self._lock:
            self._batches.pop(batch_id, None)

    def is_active(self, batch_id: str) -> bool:
        with self._lock:
            return batch_id in self._batches

    def is_cancelled(self, batch_id: str) -> bool:
        with self._lock:
            event = self._batches.get(batch_id)
        return event is not None and event.is_set()

    @property
    def active_batches(self) -> int:
        with self._lock:
            return len(self._batches)

    # ---- rendering ----

    def process_one(self, request: RenderRequest) -> Tuple[EncodedImage, int]:
        """
        Render a single request.

        Args:
            request: Render request with base64 source bytes

        Returns:
            Tuple of (encoded image, processing_time_ms)

        Raises:
            DecodeFailure: Source or watermark could not be decoded
            EncodeFailure: No output could be produced
        """
        source = ImageConverters.from_base64(request.source_bytes)
        return self.process_bytes(source, request.options, request.preset, request.name)

    def process_bytes(
        self,
        source: bytes,
        options: RenderPlan,
        preset: Optional[str] = None,
        name: str = "",
    ) -> Tuple[EncodedImage, int]:
        """Render raw source bytes (used by the upload endpoint)."""
        plan = apply_preset(options, preset)

        with timer() as t:
            encoded = render(source, plan, self.surface, self.codec)

        logger.info(
            f"Rendered {name or BatchConstants.DEFAULT_ITEM_NAME}: "
            f"{encoded.width}x{encoded.height} {encoded.mime_type}, "
            f"{len(encoded.data)} bytes in {t['ms']} ms"
        )
        return encoded, t["ms"]

    def _render_item(self, item: RenderRequest) -> EncodedImage:
        encoded, _ = self.process_one(item)
        return encoded

    def _results(self, items: List[RenderRequest], batch_id: str) -> Iterator[Future]:
        """Yield one future per item, in input order."""
        if self.max_workers == 1 or len(items) == 1:
            for item in items:
                if self.is_cancelled(batch_id):
                    return
                future: Future = Future()
                try:
                    future.set_result(self._render_item(item))
                except Exception as e:
                    future.set_exception(e)
                yield future
            return

        executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix=f"batch-{batch_id[:8]}"
        )
        try:
            futures = [executor.submit(self._render_item, item) for item in items]
            for future in futures:
                if self.is_cancelled(batch_id):
                    return
                yield future
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def iter_batch(
        self, items: List[RenderRequest], batch_id: Optional[str] = None
    ) -> Iterator[BatchEvent]:
        """
        Render a batch and yield protocol events in input order.

        For every item an item event followed by a progress event, then a
        single done event. The first failing item aborts the batch with an
        error event; no later item events are emitted. A cancellation stops
        at the next item boundary with a cancelled event.

        Args:
            items: Ordered render requests
            batch_id: Id registered with start_batch() (registered here if missing)

        Yields:
            BatchEvent instances
        """
        owns_registration = batch_id is None or not self.is_active(batch_id)
        if owns_registration:
            batch_id = self.start_batch(batch_id)

        total = max(1, len(items))
        completed = 0
        logger.info(f"Batch {batch_id} started: {len(items)} item(s), {self.max_workers} worker(s)")

        try:
            for index, future in enumerate(self._results(items, batch_id)):
                item = items[index]
                try:
                    encoded = future.result()
                except RenderException as e:
                    e.index = index
                    logger.warning(f"Batch {batch_id} aborted at item {index} ({e.kind}): {e.message}")
                    yield BatchEvent(type=BatchEventType.ERROR, index=index, message=e.message, error=e)
                    return
                except Exception as e:
                    logger.error(f"Batch {batch_id} failed at item {index}: {e}", exc_info=True)
                    yield BatchEvent(
                        type=BatchEventType.ERROR,
                        index=index,
                        message=str(e) or type(e).__name__,
                        error=RenderException(str(e), index=index),
                    )
                    return

                completed += 1
                yield BatchEvent(type=BatchEventType.ITEM, index=index, name=item.name, encoded=encoded)
                yield BatchEvent(type=BatchEventType.PROGRESS, value=completed / total)

            if completed < len(items):
                logger.info(f"Batch {batch_id} cancelled after {completed} item(s)")
                yield BatchEvent(type=BatchEventType.CANCELLED, completed=completed)
                return

            logger.info(f"Batch {batch_id} done: {completed} item(s)")
            yield BatchEvent(type=BatchEventType.DONE)
        finally:
            if owns_registration:
                self.finish_batch(batch_id)

    def bundle_zip(self, items: List[RenderRequest], batch_id: Optional[str] = None) -> bytes:
        """
        Render a batch and pack the outputs into a ZIP archive.

        Entry names are the sanitized item names with the extension of the
        produced output type; repeated names get a numeric suffix.

        Raises:
            RenderException: The first item failure (the batch is aborted)
            BatchCancelled: The batch was cancelled before completion
        """
        buffer = io.BytesIO()
        written: Set[str] = set()

        with zipfile.ZipFile(
            buffer,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=BatchConstants.ZIP_COMPRESSION_LEVEL,
        ) as archive:
            for event in self.iter_batch(items, batch_id):
                if event.type == BatchEventType.ERROR:
                    raise event.error
                if event.type == BatchEventType.CANCELLED:
                    raise BatchCancelled(event.completed)
                if event.type != BatchEventType.ITEM:
                    continue

                entry = unique_entry_name(
                    replace_extension(event.name, event.encoded.mime_type), written
                )
                written.add(entry)
                archive.writestr(entry, event.encoded.data)

        logger.info(f"Bundled {len(written)} entries into {len(buffer.getvalue())} byte ZIP")
        return buffer.getvalue()
