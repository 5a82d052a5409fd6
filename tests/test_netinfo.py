import socket
from collections import namedtuple

import psutil
import pytest

from tcp_echo import netinfo
from tcp_echo.config import EchoConfig

Addr = namedtuple("Addr", "family address netmask broadcast ptp")


@pytest.fixture
def fake_interfaces(monkeypatch):
    interfaces = {
        "lo": [Addr(socket.AF_INET, "127.0.0.1", "255.0.0.0", None, None)],
        "eth0": [
            Addr(socket.AF_INET, "10.0.0.5", "255.255.255.0", None, None),
            Addr(socket.AF_INET6, "fe80::1", None, None, None),
        ],
        "eth1": [Addr(socket.AF_INET, "192.168.1.20", "255.255.255.0", None, None)],
    }
    monkeypatch.setattr(psutil, "net_if_addrs", lambda: interfaces)
    monkeypatch.setattr(socket, "gethostname", lambda: "echo-host")
    return interfaces


def test_discover_filters_loopback_and_ipv6(fake_interfaces):
    assert netinfo.discover_ipv4_addresses() == ["10.0.0.5", "192.168.1.20"]


def test_discover_swallows_enumeration_errors(monkeypatch):
    def boom():
        raise OSError("no interfaces")

    monkeypatch.setattr(psutil, "net_if_addrs", boom)
    assert netinfo.discover_ipv4_addresses() == []


def test_hostname_placeholder(monkeypatch):
    def boom():
        raise OSError("no hostname")

    monkeypatch.setattr(socket, "gethostname", boom)
    assert netinfo.get_hostname() == "unknown"


def test_describe_lists_bound_endpoint_and_ips(fake_interfaces):
    text = netinfo.describe(("10.0.0.5", 9002))
    lines = text.strip("\n").splitlines()
    assert lines[0].startswith("╔") and lines[-1].startswith("╚")
    assert "║ Hostname            : echo-host       ║" in lines
    assert "║ Listening on        : 10.0.0.5        ║" in lines
    assert "║ Port                : 9002            ║" in lines
    assert "║ Available IPs       : 10.0.0.5        ║" in lines
    assert "║                       192.168.1.20    ║" in lines
    assert any(line.startswith("║ Current Time") for line in lines)
    assert text.startswith("\n") and text.endswith("╝\n\n")


def test_describe_without_ips_omits_row(monkeypatch):
    monkeypatch.setattr(psutil, "net_if_addrs", lambda: {})
    assert "Available IPs" not in netinfo.describe(("127.0.0.1", 1))


def test_describe_never_raises_on_odd_address(fake_interfaces):
    assert "unknown" in netinfo.describe(None)


def test_startup_banner_shows_prefix(fake_interfaces):
    banner = netinfo.startup_banner(EchoConfig(host="0.0.0.0", port="9002", prefix="X: "))
    assert "║ Listening on        : 0.0.0.0         ║" in banner
    assert "║ Prefix              : X:              ║" in banner
    assert "Start Time" in banner
    assert "Current Time" not in banner
