import logging

logger = logging.getLogger(__name__)

class BaseWriter:
    def __init__(self):
        # setup logger
        self.logger = logger

    def write_message(self, event, consumer_metadata=None):
        raise NotImplementedError("Subclasses should implement this method")

    def close(self):
        return
