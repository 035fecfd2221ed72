import os
import datetime
import logging

logger = logging.getLogger(__name__)


def log_to_file(file_path: str, content: str):
    """Appends content to a flat log file."""
    timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    entry = f"\n[{timestamp}] {content}\n"
    os.makedirs(os.path.dirname(file_path) or ".", exist_ok=True)
    with open(file_path, "a") as f:
        f.write(entry)


class ChatLog:
    def __init__(self, log_path: str | None = None):
        self.log_path = log_path
        self.messages: list[dict] = []

    def post(self, content: str, roll_mode: str | None = None) -> dict:
        message = {"content": content, "roll_mode": roll_mode or "publicroll"}
        self.messages.append(message)
        if self.log_path:
            prefix = "[SECRET]" if message["roll_mode"] in ("gmroll", "blindroll", "selfroll") else "[PUBLIC]"
            log_to_file(self.log_path, f"{prefix} {content}")
        return message

    @property
    def last(self) -> dict | None:
        return self.messages[-1] if self.messages else None
