"""
Pytest configuration and fixtures for port sentry tests.

Provides canned tool output, a mocked command runner, a temporary proc root and an
API client whose engine and session gate are replaced by test doubles.
"""
import pytest
import sys
import os
from unittest.mock import Mock

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from portsentry.auth import SessionGate
from portsentry.inventory import CommandRunner, CommandResult, PortControlEngine


TEST_USERNAME = "admin"
TEST_PASSWORD = "Admin123!"


@pytest.fixture
def sample_ss_output():
    """
    Provide sample ``ss -tulpn`` output.

    Returns:
        str: Listing with a header, IPv4/IPv6 TCP, UDP and a process-less socket
    """
    return """Netid State  Recv-Q Send-Q Local Address:Port  Peer Address:Port Process
tcp   LISTEN 0      128    0.0.0.0:22          0.0.0.0:*         users:(("sshd",pid=1234,fd=3))
tcp   LISTEN 0      511    0.0.0.0:80          0.0.0.0:*         users:(("nginx",pid=5678,fd=6))
tcp   LISTEN 0      511    0.0.0.0:80          0.0.0.0:*         users:(("nginx",pid=5679,fd=6))
tcp   LISTEN 0      128    :::8080             :::*              users:(("node",pid=9999,fd=12))
udp   UNCONN 0      0      127.0.0.53%lo:53    0.0.0.0:*         users:(("systemd-resolve",pid=500,fd=12))
tcp   LISTEN 0      64     0.0.0.0:2049        0.0.0.0:*
"""


@pytest.fixture
def sample_iptables_output():
    """
    Provide sample ``iptables -L INPUT -n --line-numbers`` output.

    Returns:
        str: Listing with one ACCEPT and three DROP rules
    """
    return """Chain INPUT (policy ACCEPT)
num  target     prot opt source               destination
1    ACCEPT     tcp  --  0.0.0.0/0            0.0.0.0/0            tcp dpt:22
2    DROP       tcp  --  0.0.0.0/0            0.0.0.0/0            tcp dpt:8080
3    DROP       udp  --  0.0.0.0/0            0.0.0.0/0            udp dpt:53
4    DROP       tcp  --  0.0.0.0/0            0.0.0.0/0            tcp dpt:80
"""


@pytest.fixture
def proc_root(tmp_path):
    """
    Create a fake /proc with cgroup files.

    pid 1234 belongs to ssh.service; pid 9999 lives in a user session.
    """
    sshd = tmp_path / "1234"
    sshd.mkdir()
    (sshd / "cgroup").write_text("0::/system.slice/ssh.service\n")

    node = tmp_path / "9999"
    node.mkdir()
    (node / "cgroup").write_text("0::/user.slice/user-1000.slice/session-2.scope\n")
    return tmp_path


@pytest.fixture
def mock_runner(sample_ss_output, sample_iptables_output):
    """
    Create a mocked command runner that answers like ss and iptables.

    Returns:
        Mock: CommandRunner double; inspect ``execute_elevated.call_args_list``
    """
    runner = Mock(spec=CommandRunner)
    runner.has_elevated_privileges.return_value = True

    def respond(command, timeout=None):
        if command[0] == "ss":
            return CommandResult(stdout=sample_ss_output.strip(), stderr="")
        if command[:2] == ["iptables", "-L"]:
            return CommandResult(stdout=sample_iptables_output.strip(), stderr="")
        return CommandResult(stdout="", stderr="")

    runner.execute_elevated.side_effect = respond
    runner.execute.side_effect = respond
    return runner


@pytest.fixture
def engine(mock_runner, proc_root):
    """Create a port control engine on the mocked runner and fake /proc."""
    return PortControlEngine(runner=mock_runner, proc_root=str(proc_root), chain="INPUT")


@pytest.fixture
def session_gate():
    """Session gate with fixed test credentials."""
    return SessionGate(
        secret_key="test-secret-key",
        admin_username=TEST_USERNAME,
        admin_password=TEST_PASSWORD,
        expire_minutes=60,
    )


@pytest.fixture
def fake_engine():
    """Engine double for route tests."""
    return Mock(spec=PortControlEngine)


@pytest.fixture
def api_client(session_gate, fake_engine, monkeypatch):
    """
    Create a test client for API endpoint testing.

    Returns:
        TestClient: FastAPI test client with engine and gate overridden
    """
    from fastapi.testclient import TestClient
    from portsentry.main import app, get_engine
    from portsentry.auth import get_session_gate
    from portsentry.config import settings

    monkeypatch.setattr(settings, "login_failure_delay_seconds", 0.0)

    app.dependency_overrides[get_engine] = lambda: fake_engine
    app.dependency_overrides[get_session_gate] = lambda: session_gate

    client = TestClient(app)
    try:
        yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_client(api_client):
    """API client that has already logged in (session cookie set)."""
    response = api_client.post(
        "/api/auth/login", json={"username": TEST_USERNAME, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    return api_client
