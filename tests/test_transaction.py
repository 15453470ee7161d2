"""
Tests for TransactionEngine

Marker framing, line classification, timeouts and serialization.
"""

import threading
import time

import pytest

from cisco_exporter.devices import (
    CommandTimeoutError,
    LineReader,
    MarkerClock,
    StreamClosedError,
)
from cisco_exporter.devices.transaction import TransactionEngine
from conftest import FakeChannel, FakeShell


def make_engine(respond, timeout=1.0, clock=None):
    channel = FakeChannel(respond)
    reader = LineReader(channel, name="test")
    reader.start()
    engine = TransactionEngine(
        send=lambda data: channel.sendall(data.encode()),
        reader=reader,
        timeout=timeout,
        marker_clock=MarkerClock(clock) if clock else None,
        name="test"
    )
    return engine, channel


def scripted(*replies):
    """Respond to the n-th write with the n-th reply"""
    pending = list(replies)

    def respond(data):
        return pending.pop(0) if pending else b""
    return respond


class TestMarkerClock:

    def test_consecutive_markers_distinct(self):
        clock = MarkerClock()
        assert clock.next_marker() != clock.next_marker()

    def test_stalled_clock_still_advances(self):
        clock = MarkerClock(lambda: 123)
        assert clock.next_marker() == "__END_123__"
        assert clock.next_marker() == "__END_124__"
        assert clock.next_marker() == "__END_125__"

    def test_backwards_clock_never_repeats(self):
        values = iter([500, 100, 600])
        clock = MarkerClock(lambda: next(values))
        assert [clock.next_marker() for _ in range(3)] == [
            "__END_500__", "__END_501__", "__END_600__"
        ]


class TestFraming:

    def test_outbound_framing(self):
        engine, channel = make_engine(FakeShell({"show clock": "12:00"}), clock=lambda: 42)
        engine.run("show clock")
        assert channel.sent == ["show clock\n!__END_42__\n"]

    def test_concrete_scenario(self):
        """Echo and marker stripped, CR converted to the line separator"""
        engine, _ = make_engine(
            scripted(b"show vlan brief\r\n1 active\r\n!__END_123__\r\n"),
            clock=lambda: 123
        )
        assert engine.run("show vlan brief") == "1 active\n"

    def test_payload_excludes_echo_and_marker(self, nxos_outputs):
        shell = FakeShell(nxos_outputs)
        engine, _ = make_engine(shell)

        output = engine.run("show vlan brief | include active | no-more")

        assert output == (
            "1    default                          active    Eth1/1, Eth1/2\n"
            "100  Engineering                      active    Eth1/3\n"
        )
        assert shell.markers[0] not in output
        assert "no-more" not in output

    def test_premature_marker_tolerated(self):
        """Marker echoed before any output is skipped, the next one completes"""
        engine, _ = make_engine(
            scripted(b"!__END_7__\r\nreal output\r\n!__END_7__\r\n"),
            clock=lambda: 7
        )
        assert engine.run("show x") == "real output\n"

    def test_marker_after_prompt_matches(self):
        engine, _ = make_engine(
            scripted(b"switch# show x\r\nvalue 1\r\nswitch# !__END_9__\r\n"),
            clock=lambda: 9
        )
        assert engine.run("show x") == "value 1\n"

    def test_stale_marker_from_previous_command_is_payload(self):
        engine, _ = make_engine(
            scripted(b"!__END_1__\r\nout\r\n!__END_2__\r\n"),
            clock=lambda: 2
        )
        assert engine.run("show x") == "!__END_1__\nout\n"

    def test_embedded_carriage_returns_converted(self):
        engine, _ = make_engine(
            scripted(b"a\rb\r\n!__END_5__\r\n"),
            clock=lambda: 5
        )
        assert engine.run("show x") == "a\nb\n"

    def test_buffer_fresh_per_call(self):
        shell = FakeShell({"show a": "alpha", "show b": "beta"})
        engine, _ = make_engine(shell)

        assert engine.run("show a") == "alpha\n"
        assert engine.run("show b") == "beta\n"

    def test_consecutive_calls_use_distinct_markers(self):
        shell = FakeShell({"show a": "alpha"})
        engine, _ = make_engine(shell)

        engine.run("show a")
        engine.run("show a")

        assert len(set(shell.markers)) == 2

    def test_empty_command_never_completes(self):
        """Every line ends with the empty command, so all of it counts as echo"""
        engine, _ = make_engine(
            scripted(b"\r\nswitch#\r\nswitch# !__END_3__\r\n"),
            timeout=0.3,
            clock=lambda: 3
        )
        with pytest.raises(CommandTimeoutError):
            engine.run("")


class TestFailures:

    def test_timeout_bounds(self):
        """Without a marker, run() fails no earlier than T and not much later"""
        engine, _ = make_engine(FakeShell(complete=False), timeout=0.3)

        start = time.monotonic()
        with pytest.raises(CommandTimeoutError, match="timeout reached"):
            engine.run("show version")
        elapsed = time.monotonic() - start

        assert elapsed >= 0.29
        assert elapsed < 0.3 + 0.5

    def test_deadline_restarts_per_call(self):
        engine, channel = make_engine(FakeShell({"show a": "alpha"}), timeout=0.3)

        assert engine.run("show a") == "alpha\n"
        time.sleep(0.35)
        assert engine.run("show a") == "alpha\n"

    def test_stream_closed_fails_fast(self):
        engine, channel = make_engine(None, timeout=5.0)
        channel.end_stream()

        start = time.monotonic()
        with pytest.raises(StreamClosedError):
            engine.run("show version")
        assert time.monotonic() - start < 1.0

    def test_partial_output_discarded_on_timeout(self):
        engine, _ = make_engine(scripted(b"partial\r\n"), timeout=0.2)

        with pytest.raises(CommandTimeoutError):
            engine.run("show x")


class TestSerialization:

    def test_concurrent_calls_do_not_interleave(self):
        shell = FakeShell({"show a": "alpha", "show b": "beta"})
        engine, channel = make_engine(shell)
        results = {}

        def run(command):
            results[command] = engine.run(command)

        threads = [threading.Thread(target=run, args=(c,)) for c in ("show a", "show b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5.0)

        assert results == {"show a": "alpha\n", "show b": "beta\n"}
        # one framed write per transaction, never overlapping
        assert len(channel.sent) == 2
