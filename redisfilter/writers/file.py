import logging
import sys
import threading
import orjson
from typing import Optional
from redisfilter.writers.base import BaseWriter

logger = logging.getLogger(__name__)

class JSONLinesWriter(BaseWriter):
    """Writes each event as a single JSON line to a file, or stdout if no path is given"""

    def __init__(self, path: Optional[str] = None):
        super().__init__()
        self.logger = logger
        self.path = path
        self.file = open(path, 'ab') if path else None
        # consumers run in their own threads
        self._lock = threading.Lock()

    def write_message(self, event, consumer_metadata=None):
        if event is None:
            return
        line = orjson.dumps(event.to_dict(), default=str) + b'\n'
        with self._lock:
            if self.file:
                self.file.write(line)
                self.file.flush()
            else:
                sys.stdout.buffer.write(line)
                sys.stdout.buffer.flush()

    def close(self):
        if self.file:
            self.file.close()
            self.file = None
            self.logger.info(f"Closed output file {self.path}")
