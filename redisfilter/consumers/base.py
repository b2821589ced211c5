import logging

logger = logging.getLogger(__name__)

class BaseConsumer:

    def __init__(self, pipeline):
        # Initialize pipeline
        self.pipeline = pipeline
        self.logger = logger

    def consume_messages(self):
        """Main method to consume messages, to be implemented by subclasses"""
        raise NotImplementedError("Subclasses must implement consume_messages method")

    def consume(self):
        try:
            self.consume_messages()
        except KeyboardInterrupt:
            self.logger.info("Received interrupt signal, stopping consumer...")
        finally:
            self.close()

    def close(self):
        """Close operation if needed"""
        return
