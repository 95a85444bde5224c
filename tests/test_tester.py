"""End-to-end tests for httptester.tester — dispatch plus chained assertions."""

import io

import pytest

from httptester import (
    ChainState,
    HandlerProtocolError,
    NumericHeaderError,
    PatternError,
    RecordingReporter,
    Tester,
    TesterConfig,
    UnsupportedValueError,
    new,
)

ECHO_DATA = bytes([1, 2, 3, 4, 5, 6])


class TestExpect:
    """Successful chains record nothing."""

    def test_full_chain_on_hello(self, tester: Tester, reporter: RecordingReporter) -> None:
        chain = (
            tester.get("/hello")
            .expect(200)
            .contains("hello")
            .expect("hello world")
            .match(r"\w+ \w+")
            .expect_header("X-Hello", "World")
            .expect_header("X-Number", 42)
            .contains_header("X-Hello", "Wo")
            .match_header("X-Hello", "W.*d")
        )
        assert chain.err() is None
        assert chain.fatal_error is None
        assert chain.state is ChainState.OPEN
        assert not reporter.failed

    def test_not_found(self, tester: Tester, reporter: RecordingReporter) -> None:
        tester.post("/does-not-exist").expect(404)
        assert not reporter.failed

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            (ECHO_DATA, ECHO_DATA),
            (ECHO_DATA, io.BytesIO(ECHO_DATA)),
            (ECHO_DATA.decode("ascii"), ECHO_DATA),
            (ECHO_DATA, ECHO_DATA.decode("ascii")),
            (io.BytesIO(ECHO_DATA), ECHO_DATA),
            (bytearray(ECHO_DATA), memoryview(ECHO_DATA)),
        ],
        ids=["bytes-bytes", "bytes-stream", "text-bytes", "bytes-text", "stream-bytes", "bytearray-memoryview"],
    )
    def test_echo_representations(
        self, tester: Tester, reporter: RecordingReporter, payload: object, expected: object
    ) -> None:
        tester.post("/echo", payload).expect(expected)
        assert not reporter.failed

    @pytest.mark.parametrize("expected", [None, "", b""])
    def test_empty_body(self, tester: Tester, reporter: RecordingReporter, expected: object) -> None:
        tester.post("/echo").expect(200).expect(expected)
        assert not reporter.failed

    def test_form_post_and_query_get(self, tester: Tester, reporter: RecordingReporter) -> None:
        form = {"foo": 1, "bar": "baz"}
        tester.form("/echo-form", form).expect("bar=baz\nfoo=1\n")
        tester.get("/echo-form", form).expect("bar=baz\nfoo=1\n")
        tester.post("/echo-form", form).expect("bar=baz\nfoo=1\n")
        assert not reporter.failed

    def test_query_mapping_extends_existing_query(self, tester: Tester, reporter: RecordingReporter) -> None:
        tester.get("/echo-form?a=1", {"b": 2}).expect("a=1\nb=2\n")
        assert not reporter.failed

    def test_headers_and_method_reach_app(self, tester: Tester, reporter: RecordingReporter) -> None:
        tester.put("/echo-request", b"x", headers={"X-Token": "abc"}).expect_header("X-Method", "PUT").expect_header(
            "X-Echo-X-Token", "abc"
        )
        tester.delete("/echo-request").expect_header("X-Method", "DELETE")
        tester.patch("/echo-request").expect_header("X-Method", "PATCH")
        assert not reporter.failed

    def test_form_sets_content_type(self, tester: Tester, reporter: RecordingReporter) -> None:
        tester.form("/echo-request", {"a": "b"}).expect_header(
            "X-Echo-Content-Type", "application/x-www-form-urlencoded"
        )
        assert not reporter.failed

    def test_form_keeps_caller_content_type(self, tester: Tester, reporter: RecordingReporter) -> None:
        chain = tester.form("/echo-request", {"a": "b"}, headers={"Content-Type": "text/plain"})
        chain.expect_header("X-Echo-Content-Type", "text/plain")
        assert chain.headers.get_list("X-Echo-Content-Type") == ["text/plain"]
        assert not reporter.failed

    def test_delete_mapping_is_form_body(self, tester: Tester, reporter: RecordingReporter) -> None:
        chain = tester.delete("/echo-request", {"a": "b"})
        chain.expect("").expect_header("X-Echo-Content-Type", "application/x-www-form-urlencoded")
        assert not reporter.failed

    def test_unicode_path_reaches_app(self, reporter: RecordingReporter) -> None:
        seen: dict[str, object] = {}

        async def app(scope, receive, send) -> None:
            seen.update(path=scope["path"], raw_path=scope["raw_path"])
            await send({"type": "http.response.start", "status": 204, "headers": []})
            await send({"type": "http.response.body", "body": b""})

        Tester(reporter, app).get("/café/日本").expect(204)
        assert seen == {"path": "/café/日本", "raw_path": b"/caf%C3%A9/%E6%97%A5%E6%9C%AC"}
        assert not reporter.failed

    def test_unicode_query(self, tester: Tester, reporter: RecordingReporter) -> None:
        tester.get("/echo-form?q=日").expect("q=日\n")
        assert not reporter.failed

    def test_default_headers_from_config(self, reporter: RecordingReporter, app) -> None:
        tester = Tester(reporter, app, TesterConfig(default_headers=(("Accept", "text/plain"),)))
        tester.get("/echo-request").expect_header("X-Echo-Accept", "text/plain")
        assert not reporter.failed

    def test_new_builds_tester(self, reporter: RecordingReporter, app) -> None:
        tester = new(reporter, app)
        assert isinstance(tester, Tester)
        assert tester.reporter is reporter
        assert tester.app is app


class TestExpectErrors:
    """Each mismatch is reported through Reporter.error."""

    @pytest.mark.parametrize(
        ("path", "check"),
        [
            ("/hello", lambda c: c.expect(400)),
            ("/hello", lambda c: c.contains("nothing")),
            ("/hello", lambda c: c.expect("nothing")),
            ("/hello", lambda c: c.expect_header("X-Number", 37)),
            ("/hello", lambda c: c.expect(None)),
            ("/hello", lambda c: c.expect_header("X-Missing", "x")),
            ("/hello", lambda c: c.match(r"^\d+$")),
            ("/hello", lambda c: c.match_header("X-Hello", "^w")),
            ("/hello", lambda c: c.contains_header("X-Hello", "xyz")),
        ],
    )
    def test_get_mismatch(self, tester: Tester, reporter: RecordingReporter, path: str, check) -> None:
        chain = check(tester.get(path))
        assert len(reporter.errors) == 1
        assert chain.err() is reporter.err
        assert chain.state is ChainState.ERRORED
        assert not reporter.fatals

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            (None, ECHO_DATA),
            (None, io.BytesIO(ECHO_DATA)),
            (ECHO_DATA, None),
            (ECHO_DATA, 0.0),
        ],
    )
    def test_echo_mismatch(
        self, tester: Tester, reporter: RecordingReporter, payload: object, expected: object
    ) -> None:
        tester.post("/echo", payload).expect(expected)
        assert reporter.err is not None
        assert not reporter.fatals

    def test_float_body_is_fatal(self, tester: Tester, reporter: RecordingReporter) -> None:
        chain = tester.post("/echo", 0.0).expect(0.0)
        assert isinstance(reporter.fatal_err, UnsupportedValueError)
        assert chain.state is ChainState.FATAL
        assert len(reporter.fatals) == 1
        assert not reporter.errors

    def test_non_numeric_header_is_fatal(self, tester: Tester, reporter: RecordingReporter) -> None:
        tester.get("/hello").expect_header("X-Hello", 13)
        assert isinstance(reporter.fatal_err, NumericHeaderError)

    def test_errors_keep_first_but_report_all(self, tester: Tester, reporter: RecordingReporter) -> None:
        chain = tester.get("/hello").expect(500).expect("nope").expect(200)
        assert len(reporter.errors) == 2
        assert chain.err() is reporter.errors[0]
        assert "status" in str(chain.err())


class TestInvalidRegexp:
    def test_invalid_pattern_is_fatal(self, tester: Tester, reporter: RecordingReporter) -> None:
        chain = tester.get("/hello").match(r"\Ga+")
        assert isinstance(reporter.fatal_err, PatternError)
        assert "error compiling regular expression" in str(reporter.fatal_err)
        assert chain.fatal_error is reporter.fatal_err

    def test_chain_stops_after_fatal(self, tester: Tester, reporter: RecordingReporter) -> None:
        tester.get("/hello").match(r"\Ga+").expect(500).match("(").contains("nothing")
        assert len(reporter.fatals) == 1
        assert not reporter.errors


class TestHandlerProtocol:
    def test_invalid_write_header(self, tester: Tester, reporter: RecordingReporter) -> None:
        chain = tester.get("/invalid-write-header").expect(None)
        assert isinstance(reporter.err, HandlerProtocolError)
        assert "called with invalid code" in str(reporter.err)
        assert chain.status == 200
        assert chain.state is ChainState.ERRORED

    def test_multiple_write_header(self, tester: Tester, reporter: RecordingReporter) -> None:
        err = tester.get("/multiple-write-header").expect(None).err()
        assert err is reporter.err
        assert "called 2 times" in str(reporter.err)

    def test_first_status_wins(self, tester: Tester) -> None:
        assert tester.get("/multiple-write-header").status == 200

    def test_body_without_start_is_200(self, tester: Tester, reporter: RecordingReporter) -> None:
        tester.get("/body-only").expect(200).expect("implicit")
        assert not reporter.failed

    def test_app_exception_propagates(self, tester: Tester) -> None:
        with pytest.raises(RuntimeError, match="handler exploded"):
            tester.get("/boom")


class TestTesterImmutable:
    def test_cannot_set_attributes(self, tester: Tester) -> None:
        with pytest.raises(AttributeError, match="immutable"):
            tester.foo = 1  # type: ignore[attr-defined]
