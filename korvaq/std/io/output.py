import sys
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class OutputEvent:
    channel: str  # 'show', 'error' or 'alert'
    text: str


class ConsoleOutput:
    """Writes `show` lines to stdout and `error`/`alert` lines to stderr."""
    def show(self, text: str):
        print(text)

    def error(self, text: str):
        print(text, file=sys.stderr)

    def alert(self, text: str):
        print(text, file=sys.stderr)


class RecordingOutput:
    """Collects output events in program order instead of printing them."""
    def __init__(self):
        self.events: List[OutputEvent] = []

    def show(self, text: str):
        self.events.append(OutputEvent('show', text))

    def error(self, text: str):
        self.events.append(OutputEvent('error', text))

    def alert(self, text: str):
        self.events.append(OutputEvent('alert', text))

    def lines(self, channel: str = 'show') -> List[str]:
        return [event.text for event in self.events if event.channel == channel]
