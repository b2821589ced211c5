import logging
import os
import sys
import orjson
from typing import List, Optional
from redisfilter.consumers.base import BaseConsumer

logger = logging.getLogger(__name__)

STDIN_PATH = '-'

class JSONLinesFileConsumer(BaseConsumer):
    """Reads one JSON object per line and hands each to the pipeline as an event"""

    def __init__(self, pipeline, paths: Optional[List[str]] = None):
        super().__init__(pipeline)
        self.logger = logger
        self.file_paths = []

        if paths is None:
            # Load file paths from environment variable
            file_str = os.getenv('FILE_CONSUMER_PATHS', '')
            paths = file_str.split(',') if file_str else []
        elif isinstance(paths, str):
            paths = [paths]
        self.file_paths = [path.strip() for path in paths if path and path.strip()]

        if self.file_paths:
            logger.info(f"Found {len(self.file_paths)} file paths: {self.file_paths}")
        else:
            logger.warning("No file paths configured and FILE_CONSUMER_PATHS environment variable is empty")

    def consume_messages(self):
        for file_path in self.file_paths:
            # read bytes so a badly encoded line only fails its own JSON parse
            try:
                if file_path == STDIN_PATH:
                    self.consume_lines(file_path, sys.stdin.buffer)
                    continue
                with open(file_path, 'rb') as file:
                    self.consume_lines(file_path, file)
            except FileNotFoundError as e:
                self.logger.error(f"File not found: {file_path}. Error: {e}")
            except Exception as e:
                self.logger.error(f"Error processing file {file_path}: {e}")

    def consume_lines(self, file_path: str, lines):
        for line_number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
            except orjson.JSONDecodeError as e:
                self.logger.error(f"Error parsing JSON at {file_path}:{line_number}: {e}")
                continue
            if not isinstance(data, dict):
                self.logger.warning(f"Skipping non-object JSON at {file_path}:{line_number}")
                continue
            self.pipeline.process_message(data, {'file_path': file_path, 'line': line_number})
