import logging
import threading
import redis
from redisfilter.config import RedisFilterConfig
from redisfilter.connectors.base import BaseConnector

logger = logging.getLogger(__name__)

class RedisConnector(BaseConnector):
    def __init__(self, config: RedisFilterConfig):
        super().__init__()
        # setup logger
        self.logger = logger

        # Redis configuration comes from the owning filter
        self.redis_host = config.host
        self.redis_port = config.port
        self.redis_db = config.db
        self.redis_password = config.password.value if config.password else None
        self.redis_timeout = config.timeout

        # Connection is opened on first use, not here
        self.client = None
        self._lock = threading.Lock()

    def connect(self):
        """Initialize Redis connection"""
        try:
            redis_config = {
                'host': self.redis_host,
                'port': self.redis_port,
                'db': self.redis_db,
                'decode_responses': True,  # Automatically decode responses to strings
                'socket_timeout': self.redis_timeout,
                'socket_connect_timeout': self.redis_timeout,
            }

            if self.redis_password:
                redis_config['password'] = self.redis_password

            client = redis.Redis(**redis_config)

            # Test connection before publishing the client
            client.ping()
            self.client = client
            logger.info(f"Connected to Redis at {self.redis_host}:{self.redis_port}, db: {self.redis_db}")
        except Exception as e:
            logger.warning(f"Failed to connect to Redis: {e}")
            self.client = None
            raise

    def get_client(self) -> redis.Redis:
        """Return the client, connecting on first use"""
        if self.client is None:
            with self._lock:
                if self.client is None:
                    self.connect()
        return self.client

    def close(self):
        if self.client:
            self.client.connection_pool.disconnect()
            self.client = None
            logger.info("Redis connection closed")
