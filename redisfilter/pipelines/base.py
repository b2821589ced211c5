import importlib
import logging
import threading
import yaml
from typing import Dict, Optional, List
from redisfilter.consumers.base import BaseConsumer
from redisfilter.event import Event
from redisfilter.filters.base import BaseFilter
from redisfilter.writers.base import BaseWriter

logger = logging.getLogger(__name__)

FILTER_ERROR_TAG = '_filter_error'

class BasePipeline:
    def __init__(self):
        # setup logger
        self.logger = logger

        # Initialize values
        self.consumers: List[BaseConsumer] = []
        self.filters: List[BaseFilter] = []
        self.writers: List[BaseWriter] = []
        self.consumer_threads: List[threading.Thread] = []

    def start(self):
        if self.consumers:
            for consumer in self.consumers:
                thread = threading.Thread(target=consumer.consume, name=f"Consumer-{type(consumer).__name__}")
                thread.daemon = True
                thread.start()
                self.consumer_threads.append(thread)
            self.logger.info(f"Started {len(self.consumer_threads)} consumer threads")
        else:
            self.logger.warning("No consumers to start")

        # block until consumers have drained their input
        for thread in self.consumer_threads:
            thread.join()

    def process_message(self, msg, consumer_metadata: Optional[Dict] = None) -> Optional[Event]:
        if msg is None:
            return None
        event = msg if isinstance(msg, Event) else Event(msg)
        for stage in self.filters:
            try:
                stage.process(event)
            except Exception as e:
                self.logger.error(f"Filter {stage.id} failed on event: {e}")
                event.tag(FILTER_ERROR_TAG)
        for writer in self.writers:
            writer.write_message(event, consumer_metadata)
        return event

    def load_classes(self, class_str: str, init_args={}, required_class=None) -> List:
        classes = []
        if class_str:
            for class_name in class_str.split(','):
                class_name = class_name.strip()
                if not class_name:
                    continue
                if '.' not in class_name:
                    self.logger.error(f"Failed to load class {class_name}: not a dotted class path")
                    continue
                try:
                    module_name, class_name = class_name.rsplit('.', 1)
                    module = importlib.import_module(module_name)
                    cls = getattr(module, class_name)

                    if required_class is None or issubclass(cls, required_class):
                        classes.append(cls(**init_args))
                    else:
                        self.logger.warning(f"Class {class_name} is not a subclass of {required_class.__name__}, skipping")

                except (ImportError, AttributeError) as e:
                    self.logger.error(f"Failed to load class {class_name}: {e}")

            if classes:
                self.logger.info(f"Loaded {len(classes)} classes: {[type(p).__name__ for p in classes]}")
            else:
                self.logger.warning(f"No valid classes loaded from {class_str}")
        else:
            self.logger.warning("Class string is empty")

        return classes

    def close(self):
        if self.consumers:
            for consumer in self.consumers:
                consumer.close()
            self.logger.info("Consumers closed")

        if self.consumer_threads:
            self.logger.info("Waiting for consumer threads to finish...")
            for thread in self.consumer_threads:
                thread.join(timeout=10.0)  # Wait up to 10 seconds per thread
                if thread.is_alive():
                    self.logger.warning(f"Thread {thread.name} did not finish within timeout")
            self.consumer_threads.clear()

        if self.filters:
            for stage in self.filters:
                stage.shutdown()
            self.logger.info("Filters shut down")

        if self.writers:
            for writer in self.writers:
                writer.close()
            self.logger.info("Writers closed")

    def describe(self) -> List[str]:
        """Summarize inputs, filters and outputs, one line each"""
        lines = []
        for consumer in self.consumers:
            paths = getattr(consumer, 'file_paths', None) or []
            lines.append(f"input {type(consumer).__name__}: {', '.join(paths) or '(none)'}")
        for stage in self.filters:
            lines.append(f"filter {stage.describe()}")
        for writer in self.writers:
            target = getattr(writer, 'path', None) or 'stdout'
            lines.append(f"output {type(writer).__name__}: {target}")
        return lines

    def __str__(self):
        consumer_names = [type(c).__name__ for c in self.consumers]
        filter_names = [f.id for f in self.filters]
        writer_names = [type(w).__name__ for w in self.writers]
        return f"Pipeline(Consumers: {consumer_names}, Filters: {filter_names}, Writers: {writer_names})"


class YAMLPipeline(BasePipeline):
    def __init__(self, yaml_file: str):
        super().__init__()
        self.yaml_file = yaml_file
        self.logger = logger

        #load yaml content
        yaml_config = None
        try:
            with open(self.yaml_file, 'r') as file:
                yaml_config = yaml.safe_load(file)
            self.logger.info(f"Loaded pipeline YAML configuration from {self.yaml_file}")
            self.logger.debug(f"YAML content: {yaml_config}")
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing YAML file: {e}")
            raise e
        if not yaml_config or not isinstance(yaml_config, dict):
            raise ValueError("YAML configuration is empty or invalid")

        #load consumers
        for consumer_cfg in yaml_config.get('consumers', []) or []:
            consumer_type = consumer_cfg.get('type')
            if not consumer_type:
                self.logger.warning("Consumer type not specified in YAML, skipping")
                continue
            init_args = {'pipeline': self}
            if consumer_cfg.get('paths'):
                init_args['paths'] = consumer_cfg['paths']
            self.consumers.extend(self.load_classes(consumer_type, init_args=init_args, required_class=BaseConsumer))

        #load filters, config errors are fatal
        for filter_cfg in yaml_config.get('filters', []) or []:
            filter_type = filter_cfg.get('type')
            if not filter_type:
                self.logger.warning("Filter type not specified in YAML, skipping")
                continue
            init_args = {'settings': filter_cfg.get('config', {}) or {}}
            self.filters.extend(self.load_classes(filter_type, init_args=init_args, required_class=BaseFilter))

        #load writers
        for writer_cfg in yaml_config.get('writers', []) or []:
            writer_type = writer_cfg.get('type', None)
            if not writer_type:
                self.logger.warning("Writer type not specified in YAML, skipping")
                continue
            init_args = {}
            if writer_cfg.get('path'):
                init_args['path'] = writer_cfg['path']
            self.writers.extend(self.load_classes(writer_type, init_args=init_args, required_class=BaseWriter))
