"""Error rendering: terse coded errors and full diagnostics."""

from __future__ import annotations

import io
from collections.abc import Callable
from typing import Any

import pytest

from npd.lib.config.settings import RenderConfig
from npd.lib.errors import NpdError, create_error, unimplemented_error, working_error
from npd.lib.render import OutputWriter, StandardRenderer

SessionFactory = Callable[..., Any]


class _ClosedPipe(io.StringIO):
    def write(self, s: str) -> int:
        raise BrokenPipeError(32, "Broken pipe")


def test_coded_error_is_a_single_line(make_session: SessionFactory) -> None:
    session = make_session("install", columns=80)

    session.renderer.error(NpdError("Package foo not found", "ENOTFOUND"))

    assert session.stderr.getvalue() == "npd " + "ENOTFOUND".ljust(13) + " Package foo not found\n"
    assert session.stdout.getvalue() == ""


def test_error_message_newlines_are_collapsed(make_session: SessionFactory) -> None:
    session = make_session("list")

    session.renderer.error(NpdError("line one\nline two\r\n", "EBAD"))

    assert session.stderr.getvalue() == "npd " + "EBAD".ljust(13) + " line one line two\n"


def test_details_follow_the_error_line(make_session: SessionFactory) -> None:
    session = make_session("list")

    session.renderer.error(NpdError("Conflict", "ECONFLICT", details="  pick one  \n"))

    assert session.stderr.getvalue() == (
        "npd " + "ECONFLICT".ljust(13) + " Conflict\n"
        "\nAdditional error details:\npick one\n"
    )


def test_uncoded_error_prints_full_diagnostics(make_session: SessionFactory) -> None:
    session = make_session("list")

    session.renderer.error(NpdError("boom"))

    output = session.stderr.getvalue()
    assert output.startswith("npd " + "error".ljust(13) + " boom\n")
    assert "\nStack trace:\nN/A\n" in output
    assert "\nConsole trace:\n" in output
    assert "\nSystem Info:\nnpd version: 0.4.0\npython version: " in output
    assert "\nos: " in output


def test_raised_exception_reports_its_traceback(make_session: SessionFactory) -> None:
    session = make_session("list")

    try:
        raise RuntimeError("kaboom")
    except RuntimeError as exc:
        session.renderer.error(exc)

    output = session.stderr.getvalue()
    assert "Traceback (most recent call last)" in output
    assert "RuntimeError: kaboom" in output


def test_explicit_stack_frames_are_listed(make_session: SessionFactory) -> None:
    session = make_session("list")

    session.renderer.error(NpdError("bad", stack=["at resolve (resolver.js:1)", "at run"]))

    assert "\nStack trace:\nat resolve (resolver.js:1)\nat run\n" in session.stderr.getvalue()


def test_verbose_adds_diagnostics_to_coded_errors(make_session: SessionFactory) -> None:
    session = make_session("list", verbose=True)

    session.renderer.error(NpdError("Package foo not found", "ENOTFOUND"))

    assert "Stack trace:" in session.stderr.getvalue()
    assert "System Info:" in session.stderr.getvalue()


def test_errno_forces_diagnostics(make_session: SessionFactory) -> None:
    session = make_session("list")

    session.renderer.error(NpdError("permission denied", "EACCES", errno=13))

    assert "System Info:" in session.stderr.getvalue()


def test_wide_error_shows_origin_label(make_session: SessionFactory) -> None:
    session = make_session("install", columns=200)

    session.renderer.error(
        NpdError("No tag found", "ENORESTARGET", data={"name": "foo", "version": "1.0"})
    )

    assert session.stderr.getvalue() == (
        "npd foo#1.0" + " " * 13 + "ENORESTARGET No tag found\n"
    )


def test_error_id_is_red_when_colored(make_session: SessionFactory) -> None:
    session = make_session("list", color=True)

    session.renderer.error(NpdError("nope", "ENOTFOUND"))

    assert "\x1b[31mENOTFOUND" in session.stderr.getvalue()


def test_create_error_copies_extra_props() -> None:
    err = create_error("Bad", "EBAD", details="more", url="http://x")

    assert err.code == "EBAD"
    assert err.details == "more"
    assert getattr(err, "url") == "http://x"


def test_working_error_code() -> None:
    err = working_error()

    assert err.code == "EWORKING"
    assert str(err) == "Already working"


def test_unimplemented_error_has_no_code() -> None:
    err = unimplemented_error()

    assert err.code is None
    assert str(err) == "Not implemented"


def test_broken_pipe_while_rendering_exits_zero() -> None:
    renderer = StandardRenderer(
        "list",
        RenderConfig(color=False, dir="/work"),
        writer=OutputWriter(color=False, stdout=_ClosedPipe(), stderr=_ClosedPipe()),
    )

    with pytest.raises(SystemExit) as excinfo:
        renderer.error(NpdError("nope", "ENOTFOUND"))

    assert excinfo.value.code == 0
