#!/usr/bin/env python3

import unittest
import sys
import os
import io
import tempfile
from unittest.mock import MagicMock, patch

# Add the project root to Python path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from redisfilter.consumers.base import BaseConsumer
from redisfilter.consumers.file import JSONLinesFileConsumer


class TestJSONLinesFileConsumer(unittest.TestCase):

    def setUp(self):
        self.mock_pipeline = MagicMock()
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write_file(self, name, content):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, 'w') as f:
            f.write(content)
        return path

    def test_paths_argument(self):
        consumer = JSONLinesFileConsumer(self.mock_pipeline, paths=[' a.jsonl ', '', 'b.jsonl'])
        self.assertEqual(consumer.file_paths, ['a.jsonl', 'b.jsonl'])

    def test_single_path_string(self):
        consumer = JSONLinesFileConsumer(self.mock_pipeline, paths='a.jsonl')
        self.assertEqual(consumer.file_paths, ['a.jsonl'])

    @patch.dict(os.environ, {'FILE_CONSUMER_PATHS': 'a.jsonl, b.jsonl'})
    def test_paths_from_environment(self):
        consumer = JSONLinesFileConsumer(self.mock_pipeline)
        self.assertEqual(consumer.file_paths, ['a.jsonl', 'b.jsonl'])

    @patch.dict(os.environ, {}, clear=True)
    def test_no_paths(self):
        consumer = JSONLinesFileConsumer(self.mock_pipeline)
        self.assertEqual(consumer.file_paths, [])
        consumer.consume()
        self.mock_pipeline.process_message.assert_not_called()

    def test_consume_lines(self):
        path = self.write_file('events.jsonl',
                               '{"message": "one"}\n'
                               '\n'
                               'not json\n'
                               '[1, 2]\n'
                               '{"message": "two"}\n')
        consumer = JSONLinesFileConsumer(self.mock_pipeline, paths=[path])

        consumer.consume()

        calls = self.mock_pipeline.process_message.call_args_list
        self.assertEqual(len(calls), 2)
        self.assertEqual(calls[0][0][0], {'message': 'one'})
        self.assertEqual(calls[0][0][1], {'file_path': path, 'line': 1})
        self.assertEqual(calls[1][0][0], {'message': 'two'})
        self.assertEqual(calls[1][0][1]['line'], 5)

    def test_invalid_utf8_line_is_skipped(self):
        """Test a badly encoded line does not stop the lines around it."""
        path = os.path.join(self.tmpdir.name, 'events.jsonl')
        with open(path, 'wb') as f:
            f.write(b'{"a": 1}\n{"b": "\xff\xfe"}\n{"c": 3}\n')
        consumer = JSONLinesFileConsumer(self.mock_pipeline, paths=[path])

        consumer.consume()

        calls = self.mock_pipeline.process_message.call_args_list
        self.assertEqual([c[0][0] for c in calls], [{'a': 1}, {'c': 3}])
        self.assertEqual(calls[1][0][1], {'file_path': path, 'line': 3})

    @patch('redisfilter.consumers.file.logger')
    def test_read_error_is_logged(self, mock_logger):
        path = self.write_file('events.jsonl', '{"message": "one"}\n')
        consumer = JSONLinesFileConsumer(self.mock_pipeline, paths=[path, path])
        self.mock_pipeline.process_message.side_effect = [OSError("disk gone"), None]

        consumer.consume()

        self.assertEqual(self.mock_pipeline.process_message.call_count, 2)
        mock_logger.error.assert_called_once()

    @patch('redisfilter.consumers.file.logger')
    def test_missing_file_is_skipped(self, mock_logger):
        path = self.write_file('events.jsonl', '{"message": "one"}\n')
        consumer = JSONLinesFileConsumer(self.mock_pipeline, paths=[os.path.join(self.tmpdir.name, 'missing.jsonl'), path])

        consumer.consume()

        self.mock_pipeline.process_message.assert_called_once()
        mock_logger.error.assert_called_once()

    def test_stdin(self):
        consumer = JSONLinesFileConsumer(self.mock_pipeline, paths=['-'])
        stdin = io.TextIOWrapper(io.BytesIO(b'{"message": "from stdin"}\n'))
        with patch('sys.stdin', stdin):
            consumer.consume()

        self.mock_pipeline.process_message.assert_called_once_with({'message': 'from stdin'}, {'file_path': '-', 'line': 1})


class TestBaseConsumer(unittest.TestCase):
    def test_consume_not_implemented(self):
        consumer = BaseConsumer(MagicMock())
        with self.assertRaises(NotImplementedError):
            consumer.consume()


if __name__ == '__main__':
    unittest.main()
