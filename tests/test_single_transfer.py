"""Tests for hfsupload.transfer.single module."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from hfsupload.transfer.single import SingleTransfer


@pytest.fixture
def hooks() -> tuple[MagicMock, MagicMock]:
    return MagicMock(), MagicMock()


def _transfer(transport, hooks, item, **kwargs) -> SingleTransfer:
    on_progress, on_complete = hooks
    return SingleTransfer(
        item,
        "/docs/",
        transport=transport,
        channel="upload-0123456789abcdef",
        on_progress=on_progress,
        on_complete=on_complete,
        **kwargs,
    )


class TestBuildRequest:
    """Tests for request construction."""

    def test_fresh_upload_params(self, transport, hooks, make_item):
        transfer = _transfer(transport, hooks, make_item("dir/a.bin", size=1000))
        request = transfer.build_request()

        assert request.destination == "/docs/"
        assert request.filename == "dir/a.bin"
        assert request.offset == 0
        assert request.body_size == 1000
        assert request.params == {
            "channel": "upload-0123456789abcdef",
            "resume": "0",
            "comment": "",
            "skipExisting": "0",
        }

    def test_resume_and_policy_params(self, transport, hooks, make_item):
        item = make_item("a.bin", size=1000)
        item.comment = "second try"
        transfer = _transfer(transport, hooks, item, skip_existing=True, resume_offset=400)
        request = transfer.build_request()

        assert request.params["resume"] == "400"
        assert request.params["skipExisting"] == "1"
        assert request.params["comment"] == "second try"
        assert request.body_size == 600


class TestProgress:
    """Tests for progress reporting."""

    def test_partial_bytes_include_offset(self, transport, hooks, make_item):
        on_progress, _ = hooks
        transfer = _transfer(transport, hooks, make_item(size=1000), resume_offset=400)
        transfer.start()

        transport.last.progress(100)
        transport.last.progress(350)

        assert transfer.partial_bytes == 750
        assert transfer.progress == 0.75
        assert [c.args[1] for c in on_progress.call_args_list] == [100, 250]

    def test_repeated_report_not_forwarded(self, transport, hooks, make_item):
        on_progress, _ = hooks
        transfer = _transfer(transport, hooks, make_item(size=1000))
        transfer.start()

        transport.last.progress(100)
        transport.last.progress(100)

        assert on_progress.call_count == 1

    def test_empty_file_progress(self, transport, hooks, make_item):
        transfer = _transfer(transport, hooks, make_item(size=0))
        transfer.start()
        assert transfer.progress == 0.0

        transport.last.complete(200)
        assert transfer.progress == 1.0


class TestCompletion:
    """Tests for completion and abort."""

    def test_completes_once(self, transport, hooks, make_item):
        _, on_complete = hooks
        transfer = _transfer(transport, hooks, make_item())
        transfer.start()

        transport.last.complete(200)
        transport.last.complete(500)

        on_complete.assert_called_once_with(transfer, 200, None)
        assert transfer.finished

    def test_status_override_replaces_status(self, transport, hooks, make_item):
        _, on_complete = hooks
        transfer = _transfer(transport, hooks, make_item())
        transfer.start()
        transfer.status_override = 413

        transport.last.complete(0)

        on_complete.assert_called_once_with(transfer, 413, None)

    def test_error_forwarded(self, transport, hooks, make_item):
        _, on_complete = hooks
        transfer = _transfer(transport, hooks, make_item())
        transfer.start()
        error = OSError("broken pipe")

        transport.last.complete(0, error)

        on_complete.assert_called_once_with(transfer, 0, error)

    def test_abort_with_resume_target(self, transport, hooks, make_item):
        transfer = _transfer(transport, hooks, make_item())
        transfer.start()

        transfer.abort(resume_to=500)

        assert transport.last.aborted
        assert transfer.aborted
        assert transfer.resume_to == 500

    def test_abort_after_finish_is_noop(self, transport, hooks, make_item):
        transfer = _transfer(transport, hooks, make_item())
        transfer.start()
        transport.last.complete(200)

        transfer.abort(resume_to=500)

        assert not transport.last.aborted
        assert transfer.resume_to is None
