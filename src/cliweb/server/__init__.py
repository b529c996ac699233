"""HTTP side of cliweb: dispatcher, uploads, live output, and the FastAPI app."""

from cliweb.server.app import CliwebApplication, create_app, run
from cliweb.server.broadcast import Broadcaster
from cliweb.server.dispatcher import Dispatcher
from cliweb.server.sink import OutputSink
from cliweb.server.uploads import UploadStore, encode_paths

__all__ = [
    "Broadcaster",
    "CliwebApplication",
    "Dispatcher",
    "OutputSink",
    "UploadStore",
    "create_app",
    "encode_paths",
    "run",
]
