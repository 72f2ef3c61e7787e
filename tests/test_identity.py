"""
Unit tests for systemd service identity resolution.
"""
import psutil
from unittest.mock import patch

from portsentry.inventory.identity import read_command_line, resolve_service_identity


class TestResolveServiceIdentity:
    """Tests for resolve_service_identity against a fake /proc."""

    def test_service_process_is_resolved(self, proc_root):
        """Test that a system.slice cgroup yields the service and its command line."""
        with patch("portsentry.inventory.identity.psutil.Process") as mock_process:
            mock_process.return_value.cmdline.return_value = [
                "sshd: /usr/sbin/sshd",
                "-D",
                "[listener]",
            ]

            identity = resolve_service_identity(1234, proc_root)

        assert identity is not None
        assert identity.service_name == "ssh"
        assert identity.command == "sshd: /usr/sbin/sshd -D [listener]"
        mock_process.assert_called_once_with(1234)

    def test_unreadable_cmdline_falls_back_to_service_name(self, proc_root):
        with patch(
            "portsentry.inventory.identity.psutil.Process",
            side_effect=psutil.NoSuchProcess(1234),
        ):
            identity = resolve_service_identity(1234, proc_root)

        assert identity.service_name == "ssh"
        assert identity.command == "ssh"

    def test_empty_cmdline_falls_back_to_service_name(self, proc_root):
        """Test kernel threads and zombies, which report no arguments."""
        with patch("portsentry.inventory.identity.psutil.Process") as mock_process:
            mock_process.return_value.cmdline.return_value = []
            identity = resolve_service_identity(1234, proc_root)

        assert identity.command == "ssh"

    def test_non_service_process_returns_none(self, proc_root):
        assert resolve_service_identity(9999, proc_root) is None

    def test_missing_process_returns_none(self, proc_root):
        assert resolve_service_identity(424242, proc_root) is None

    def test_zero_pid_returns_none(self, proc_root):
        assert resolve_service_identity(0, proc_root) is None

    def test_cgroup_v1_layout(self, tmp_path):
        """Test the multi-line cgroup v1 format."""
        pid_dir = tmp_path / "321"
        pid_dir.mkdir()
        (pid_dir / "cgroup").write_text(
            "12:pids:/system.slice/nginx.service\n"
            "1:name=systemd:/system.slice/nginx.service\n"
        )

        with patch("portsentry.inventory.identity.psutil.Process") as mock_process:
            mock_process.return_value.cmdline.return_value = ["nginx: master process"]
            identity = resolve_service_identity(321, tmp_path)

        assert identity.service_name == "nginx"
        assert identity.command == "nginx: master process"


class TestReadCommandLine:
    """Tests for read_command_line."""

    def test_null_separators_become_spaces(self):
        """Test processes that rewrite argv into one NUL-separated string."""
        with patch("portsentry.inventory.identity.psutil.Process") as mock_process:
            mock_process.return_value.cmdline.return_value = ["postgres\0-D\0/var/lib/pg"]
            assert read_command_line(55) == "postgres -D /var/lib/pg"

    def test_access_denied_returns_none(self):
        with patch(
            "portsentry.inventory.identity.psutil.Process",
            side_effect=psutil.AccessDenied(55),
        ):
            assert read_command_line(55) is None
