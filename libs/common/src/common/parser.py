import json
import re
import time
from datetime import datetime, timezone
from typing import Any


class TextParser:
    """Turns one raw log line into (timestamp, fields).

    Subclasses implement parse_fields(); returning None means the line did
    not match the format.
    """

    time_key: str
    time_format: str | None

    def __init__(self, time_key: str = "time", time_format: str | None = None):
        self.time_key = time_key
        self.time_format = time_format

    def parse(self, text: str) -> tuple[int, dict[str, Any]] | None:
        fields = self.parse_fields(text)
        if fields is None:
            return None
        return self.pop_time(fields), fields

    def parse_fields(self, text: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def pop_time(self, fields: dict[str, Any]) -> int:
        """Remove the time field and convert it to epoch seconds."""
        value = fields.pop(self.time_key, None)
        if value is None:
            return int(time.time())

        if self.time_format:
            parsed = datetime.strptime(str(value), self.time_format)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return int(parsed.timestamp())
        return int(float(value))


class JSONParser(TextParser):
    def parse_fields(self, text):
        fields = json.loads(text)
        if not isinstance(fields, dict):
            return None
        return fields


class LTSVParser(TextParser):
    def parse_fields(self, text):
        fields = {}
        for item in text.rstrip("\r\n").split("\t"):
            if not item:
                continue
            label, sep, value = item.partition(":")
            if not sep:
                raise ValueError(f"Not an LTSV label:value pair: {item!r}")
            fields[label] = value
        return fields


class NoneParser(TextParser):
    def parse_fields(self, text):
        return {"message": text}


class RegexpParser(TextParser):
    pattern: re.Pattern

    def __init__(self, pattern: str, time_key: str = "time", time_format: str | None = None):
        super().__init__(time_key, time_format)
        self.pattern = re.compile(pattern)
        if not self.pattern.groupindex:
            raise ValueError(f"Regexp format needs named groups: {pattern}")

    def parse_fields(self, text):
        match = self.pattern.search(text)
        if match is None:
            return None
        return match.groupdict()


PARSERS = {
    "json": JSONParser,
    "ltsv": LTSVParser,
    "none": NoneParser,
}


def build_parser(
    format: str | None, time_key: str = "time", time_format: str | None = None
) -> TextParser | None:
    """Parser for the configured format, or None for the built-in JSON extraction."""
    if not format:
        return None

    if len(format) > 2 and format.startswith("/") and format.endswith("/"):
        return RegexpParser(format[1:-1], time_key, time_format)

    parser_class = PARSERS.get(format)
    if parser_class is None:
        raise ValueError(f"Unknown format: {format}")
    return parser_class(time_key, time_format)
