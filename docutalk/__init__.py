"""
Docutalk - conversational retrieval over previously ingested documents.

Each chat turn retrieves passages for the user's question, streams the model's
answer token-by-token, runs any tools the model asks for, and stores the final
answer in a bounded per-session history.

Run the server (after pip install):
    docutalk-server --port 8000
"""

from docutalk.version import VERSION

__version__ = VERSION
__all__ = [
    "VERSION",
    "__version__",
]
