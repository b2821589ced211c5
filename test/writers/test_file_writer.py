import unittest
import os
import sys
import io
import tempfile
import orjson
from unittest.mock import patch

# Add the project root to Python path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from redisfilter.event import Event
from redisfilter.writers.base import BaseWriter
from redisfilter.writers.file import JSONLinesWriter


class TestJSONLinesWriter(unittest.TestCase):
    """Test the JSONLinesWriter class."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.path = os.path.join(self.tmpdir.name, 'out.jsonl')

    def test_write_to_file(self):
        writer = JSONLinesWriter(path=self.path)
        event = Event({'message': 'hello', 'redis': {'a': 1}})
        event.tag('enriched')

        writer.write_message(event)
        writer.write_message(Event({'message': 'second'}))
        writer.close()

        with open(self.path, 'rb') as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertEqual(orjson.loads(lines[0]), {'message': 'hello', 'redis': {'a': 1}, 'tags': ['enriched']})
        self.assertEqual(orjson.loads(lines[1]), {'message': 'second'})

    def test_write_none(self):
        writer = JSONLinesWriter(path=self.path)
        writer.write_message(None)
        writer.close()
        with open(self.path, 'rb') as f:
            self.assertEqual(f.read(), b'')

    def test_write_to_stdout(self):
        stdout = io.TextIOWrapper(io.BytesIO())
        writer = JSONLinesWriter()
        with patch('sys.stdout', stdout):
            writer.write_message(Event({'message': 'hello'}))
        self.assertEqual(stdout.buffer.getvalue(), b'{"message":"hello"}\n')

    def test_close_twice(self):
        writer = JSONLinesWriter(path=self.path)
        writer.close()
        writer.close()
        self.assertIsNone(writer.file)


class TestBaseWriter(unittest.TestCase):
    def test_write_message_not_implemented(self):
        with self.assertRaises(NotImplementedError):
            BaseWriter().write_message(Event({'a': 1}))


if __name__ == '__main__':
    unittest.main()
