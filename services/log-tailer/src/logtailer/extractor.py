import json

from common.log import log
from common.models import RawEvent, Record
from common.parser import TextParser


class RecordExtractor:
    """Converts raw events into records without ever raising.

    With a parser the message goes through it. Without one, the span from the
    first "{" to the last "}" is parsed as JSON; lines where that fails are
    wrapped as {"message": ..., "@log_name": tag} instead of being dropped.
    Braces inside string literals or several JSON fragments on one line can
    mis-extract.
    """

    parser: TextParser | None
    total: int
    skipped: int

    def __init__(self, parser: TextParser | None = None):
        self.parser = parser
        self.total = 0
        self.skipped = 0

    def extract(self, event: RawEvent, tag: str) -> Record | None:
        self.total += 1
        try:
            if self.parser is not None:
                parsed = self.parser.parse(event.message)
                if parsed is None:
                    raise ValueError("message does not match the configured format")
                time, fields = parsed
                return Record(tag, int(time), fields)

            return Record(tag, event.timestamp // 1000, self.extract_json(event.message, tag))
        except Exception as e:
            self.skipped += 1
            log(f"skipped event at {event.timestamp}: {type(e).__name__}: {e}")
            return None

    @staticmethod
    def extract_json(message: str, tag: str) -> dict:
        start = message.find("{")
        end = message.rfind("}")
        if start != -1 and end > start:
            try:
                fields = json.loads(message[start:end + 1])
            except ValueError:
                fields = None
            if isinstance(fields, dict):
                return fields

        return {"message": message, "@log_name": tag}
