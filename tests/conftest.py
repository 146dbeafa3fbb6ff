"""Shared fixtures: isolated settings and fake Claude responses."""

from types import SimpleNamespace

import pytest

from dart_insight import config, narrator
from dart_insight.config import Settings


@pytest.fixture
def settings(monkeypatch):
    """Install a Settings instance that ignores .env and the real API keys."""

    def _install(**overrides):
        values = {"opendart_api_key": "", "anthropic_api_key": "", "mock_analysis": False}
        values.update(overrides)
        installed = Settings(_env_file=None, **values)
        monkeypatch.setattr(config, "_config", installed)
        monkeypatch.setattr(narrator, "_client", None)
        return installed

    return _install


def text_response(*texts):
    """A Messages API response carrying the given text blocks."""
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


class FakeClaude:
    """Stands in for anthropic.Anthropic; records calls and replays answers.

    Each answer is either a response object or an exception to raise.
    """

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = []
        self.messages = SimpleNamespace(create=self._create)

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer
