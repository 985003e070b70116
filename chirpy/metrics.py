from __future__ import annotations

import threading


class HitCounter:
    """Counts file-server hits for the lifetime of one server process.

    FastAPI runs sync handlers on a threadpool, so each operation holds a lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits = 0

    def increment(self) -> int:
        with self._lock:
            self._hits += 1
            return self._hits

    def load(self) -> int:
        with self._lock:
            return self._hits

    def reset(self) -> None:
        with self._lock:
            self._hits = 0


METRICS_HTML = """
<html>
  <body>
    <h1>Welcome, Chirpy Admin</h1>
    <p>Chirpy has been visited {hits} times!</p>
  </body>
</html>"""


def render_metrics_html(hits: int) -> str:
    return METRICS_HTML.format(hits=int(hits))
