"""
Shared test fixtures and configuration for the haproxy_statsd test suite.
"""

import socket
from typing import Callable, Dict, Generator, List

import pytest
from aioresponses import aioresponses

from haproxy_statsd import CollectorConfig, MemorySink, StatsSourceConfig, StatsdSinkConfig

STATS_URL = "http://lb.example.com:8404/stats/csv"

# HAProxy 1.5 CSV columns, in order.
HEADER_FIELDS = [
    "pxname", "svname", "qcur", "qmax", "scur", "smax", "slim", "stot",
    "bin", "bout", "dreq", "dresp", "ereq", "econ", "eresp", "wretr",
    "wredis", "status", "weight", "act", "bck", "chkfail", "chkdown",
    "lastchg", "downtime", "qlimit", "pid", "iid", "sid", "throttle",
    "lbtot", "tracked", "type", "rate", "rate_lim", "rate_max",
    "check_status", "check_code", "check_duration", "hrsp_1xx", "hrsp_2xx",
    "hrsp_3xx", "hrsp_4xx", "hrsp_5xx", "hrsp_other", "hanafail",
    "req_rate", "req_rate_max", "req_tot", "cli_abrt", "srv_abrt",
    "comp_in", "comp_out", "comp_byp", "comp_rsp", "lastsess", "last_chk",
    "last_agt", "qtime", "ctime", "rtime", "ttime",
]
POSITIONS: Dict[str, int] = {name: i for i, name in enumerate(HEADER_FIELDS)}

# HAProxy ends every line with a comma, hence one extra empty field.
HEADER_LINE = "# " + ",".join(HEADER_FIELDS) + ","
ROW_WIDTH = len(HEADER_FIELDS) + 1


def build_row(pxname: str = "web", svname: str = "srv1", width: int = ROW_WIDTH, **values) -> List[str]:
    """Build a report row with every unlisted column empty."""
    row = [""] * width
    row[0] = pxname
    row[1] = svname
    for key, value in values.items():
        row[POSITIONS[key]] = str(value)
    return row


def build_report(*rows: List[str], header: bool = True) -> str:
    """Join rows into a report body the way HAProxy serves it."""
    lines = [HEADER_LINE] if header else []
    lines.extend(",".join(row) for row in rows)
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_row() -> Callable[..., List[str]]:
    """Factory for report rows."""
    return build_row


@pytest.fixture
def make_report() -> Callable[..., str]:
    """Factory for report bodies."""
    return build_report


@pytest.fixture
def sample_report() -> str:
    """A small report with a frontend, one server and the backend summary."""
    return build_report(
        build_row("http-in", "FRONTEND", scur=3, smax=12, bin=1024, bout=4096,
                  ereq=1, rate=2, hrsp_2xx=40, hrsp_4xx=2),
        build_row("web:8080", "srv1", scur=1, smax=4, bin=512, bout=2048, econ=1,
                  hrsp_2xx=20, qtime=0, ctime=1, rtime=15, ttime=20),
        build_row("web:8080", "BACKEND", scur=1, smax=4, bin=512, bout=2048,
                  hrsp_2xx=20, qtime=0, ctime=1, rtime=15, ttime=20),
    )


@pytest.fixture
def source_config() -> StatsSourceConfig:
    """Statistics endpoint configuration with credentials."""
    return StatsSourceConfig(url=STATS_URL, username="admin", password="s3cret", timeout=5.0)


@pytest.fixture
def collector_config(source_config: StatsSourceConfig) -> CollectorConfig:
    """Collector configuration pointing at a StatsD address nobody listens on."""
    return CollectorConfig(
        source=source_config,
        statsd=StatsdSinkConfig(address="127.0.0.1:8125", prefix="lb"),
        poll_interval=0,
    )


@pytest.fixture
def memory_sink_factory():
    """Sink factory recording every sink it opens."""
    sinks: List[MemorySink] = []

    def factory(config: CollectorConfig) -> MemorySink:
        sink = MemorySink(prefix=config.statsd.prefix)
        sinks.append(sink)
        return sink

    factory.sinks = sinks
    return factory


@pytest.fixture
def mock_aiohttp() -> Generator[aioresponses, None, None]:
    """Mock aiohttp responses for testing."""
    with aioresponses() as m:
        yield m


@pytest.fixture
def udp_server() -> Generator[socket.socket, None, None]:
    """UDP socket standing in for the StatsD daemon."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


def receive_datagrams(sock: socket.socket, count: int) -> List[str]:
    """Read count datagrams from a UDP socket."""
    return [sock.recv(2048).decode("utf-8") for _ in range(count)]
