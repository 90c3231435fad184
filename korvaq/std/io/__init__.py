from .basic_io import BasicIO
from .output import ConsoleOutput, OutputEvent, RecordingOutput

__all__ = ['BasicIO', 'ConsoleOutput', 'OutputEvent', 'RecordingOutput']
