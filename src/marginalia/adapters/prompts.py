from collections import deque
from typing import Iterable

from ..core.errors import InputAborted
from ..core.model import View
from ..core.ports import Prompter


class ScriptedPrompter(Prompter):
    """
    Answers prompts from queues filled in advance.

    A missing click aborts, like a user pressing quit. A missing answer
    accepts the default.
    """

    def __init__(
        self,
        clicks: Iterable[tuple[float, float]] = (),
        answers: Iterable[str | None] = (),
    ):
        self.clicks = deque(clicks)
        self.answers = deque(answers)
        self.asked: list[tuple[str, list[str], str | None]] = []

    def read_click(self, view: View) -> tuple[float, float]:
        if not self.clicks:
            raise InputAborted("No location selected")
        return self.clicks.popleft()

    def choose(self, prompt: str, candidates: list[str], default: str | None) -> str:
        self.asked.append((prompt, list(candidates), default))
        if not self.answers:
            return default or ""
        answer = self.answers.popleft()
        if answer is None:
            raise InputAborted("Prompt cancelled")
        return answer
