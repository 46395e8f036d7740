"""Prompt forwarding to the input backend."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest

from npd.lib.errors import InputCancelled, InputFailed
from npd.lib.render.events import PromptEvent
from npd.lib.render.prompt import PromptAdapter, PromptDescriptor

SessionFactory = Callable[..., Any]


class FakeBackend:
    def __init__(self, answers: dict[str, Any] | None = None, exc: BaseException | None = None):
        self.answers = answers or {}
        self.exc = exc
        self.seen: list[PromptDescriptor] = []

    def ask(self, prompts: Sequence[PromptDescriptor]) -> dict[str, Any]:
        self.seen.extend(prompts)
        if self.exc is not None:
            raise self.exc
        return dict(self.answers)


def test_descriptor_from_dict_defaults() -> None:
    descriptor = PromptDescriptor.from_dict({"name": "answer", "message": "Pick"})

    assert descriptor == PromptDescriptor(name="answer", message="Pick")


def test_descriptor_requires_name() -> None:
    with pytest.raises(KeyError):
        PromptDescriptor.from_dict({"message": "Pick"})


def test_prepare_strips_color_when_disabled() -> None:
    adapter = PromptAdapter(color=False, backend=FakeBackend())

    prepared = adapter.prepare([{"name": "ok", "message": "\x1b[32mProceed?\x1b[0m"}])

    assert prepared[0].message == "Proceed?"


def test_prepare_keeps_color_when_enabled() -> None:
    adapter = PromptAdapter(color=True, backend=FakeBackend())

    prepared = adapter.prepare([{"name": "ok", "message": "\x1b[32mProceed?\x1b[0m"}])

    assert prepared[0].message == "\x1b[32mProceed?\x1b[0m"


@pytest.mark.asyncio
async def test_prompt_returns_backend_answers(make_session: SessionFactory) -> None:
    backend = FakeBackend(answers={"answer": "1"})
    session = make_session("install", prompter=backend)

    answers = await session.renderer.prompt(
        [{"name": "answer", "type": "input", "message": "\x1b[33mChoose\x1b[0m"}]
    )

    assert answers == {"answer": "1"}
    assert [item.message for item in backend.seen] == ["Choose"]


@pytest.mark.asyncio
async def test_dispatch_prompt_event_returns_answers(make_session: SessionFactory) -> None:
    backend = FakeBackend(answers={"confirm": True})
    session = make_session("install", prompter=backend)
    descriptor = PromptDescriptor(name="confirm", message="Sure?", type="confirm")
    event = PromptEvent(prompts=(descriptor,))

    assert await session.renderer.dispatch(event) == {"confirm": True}


@pytest.mark.asyncio
async def test_aborted_input_raises_cancelled() -> None:
    adapter = PromptAdapter(color=False, backend=FakeBackend(exc=EOFError()))

    with pytest.raises(InputCancelled) as excinfo:
        await adapter.prompt([{"name": "x", "message": "?"}])

    assert excinfo.value.code == "EINPUTCANCELLED"


@pytest.mark.asyncio
async def test_backend_failure_raises_input_failed() -> None:
    adapter = PromptAdapter(color=False, backend=FakeBackend(exc=OSError("no tty")))

    with pytest.raises(InputFailed) as excinfo:
        await adapter.prompt([{"name": "x", "message": "?"}])

    assert excinfo.value.code == "EINPUTFAILED"
    assert str(excinfo.value) == "no tty"
