"""In-place progress line on stdout, drawn with tqdm."""

import logging
import sys
import threading
from typing import TextIO

from tqdm import tqdm

from ingestion.pipeline import ProgressCounter

logger = logging.getLogger(__name__)

SPINNER = "|/-\\"
DONE_GLYPH = "✓"
DEFAULT_INTERVAL = 0.1

PROGRESS_FORMAT = "{desc} {n}/{total} ({percentage:.2f}%)"
RAW_COUNT_FORMAT = "{desc} {n} rows"


class ProgressReporter:
    """Samples a ProgressCounter on a fixed cadence and redraws one line.

    The bar never counts on its own: each tick copies the counter's value
    into it. Rendering failures (closed or broken stdout) are logged at DEBUG
    and otherwise ignored; the reporter never raises into the ingest.
    """

    def __init__(
        self,
        counter: ProgressCounter,
        total: int,
        interval: float = DEFAULT_INTERVAL,
        stream: TextIO | None = None,
    ):
        self._counter = counter
        self._total = total
        self._interval = interval
        self._stream = stream
        self._done = threading.Event()
        self._thread = threading.Thread(target=self._run, name="progress-reporter", daemon=True)
        self._frame = 0
        self._bar: tqdm | None = None
        self.last_sample = 0

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so pytest's capsys replacement is honoured.
        return self._stream if self._stream is not None else sys.stdout

    def _open_bar(self, n: int, desc: str, bar_format: str) -> tqdm:
        return tqdm(
            total=self._total if self._total > 0 else None,
            initial=n,
            desc=desc,
            bar_format=bar_format,
            file=self.stream,
            position=0,
            dynamic_ncols=False,
            leave=True,
        )

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        while not self._done.wait(self._interval):
            self.tick()

    def tick(self) -> None:
        """Sample the counter once and redraw the line."""
        self.last_sample = self._counter.value
        glyph = SPINNER[self._frame % len(SPINNER)]
        self._frame += 1
        try:
            if self._bar is None:
                fmt = PROGRESS_FORMAT if self._total > 0 else RAW_COUNT_FORMAT
                self._bar = self._open_bar(self.last_sample, glyph, fmt)
                return
            self._bar.n = self.last_sample
            self._bar.set_description_str(glyph, refresh=False)
            self._bar.refresh()
        except (OSError, ValueError) as exc:
            logger.debug("Progress render failed: %s", exc)

    def _halt(self) -> None:
        self._done.set()
        if self._thread.is_alive():
            self._thread.join()

    def _close(self) -> None:
        try:
            self._bar.close()
        except (OSError, ValueError) as exc:
            logger.debug("Progress render failed: %s", exc)
        self._bar = None

    def stop(self) -> None:
        """Stop ticking; terminate the partial line if one was drawn."""
        self._halt()
        if self._bar is not None:
            self._close()

    def finish(self, count: int, elapsed: float) -> None:
        """Stop ticking and draw the final summary with the loaded row count."""
        self._halt()
        total = self._total if self._total > 0 else count
        summary = f"{{desc}} {count}/{total} (100.00%) in {elapsed:.2f}s"
        try:
            if self._bar is None:
                self._bar = self._open_bar(count, DONE_GLYPH, summary)
            else:
                self._bar.bar_format = summary
                self._bar.set_description_str(DONE_GLYPH, refresh=False)
        except (OSError, ValueError) as exc:
            logger.debug("Progress render failed: %s", exc)
            return
        self._close()
