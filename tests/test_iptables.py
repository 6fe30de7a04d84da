import subprocess
from unittest.mock import MagicMock, patch

import pytest

from nhpkit.cmd import CommandError
from nhpkit.iptables import (
    IPSet,
    IPTables,
    IPType,
    Policy,
    new_ipset,
    new_iptables,
)

LISTING = (
    b"Chain INPUT (policy DROP)\n"
    b"target     prot opt source               destination\n"
    b"\n"
    b"Chain FORWARD (policy REJECT)\n"
    b"\n"
    b"Chain OUTPUT (policy ACCEPT)\n"
)


def _ok(stdout=b"", stderr=b"", returncode=0):
    return subprocess.CompletedProcess([], returncode, stdout, stderr)


@patch("nhpkit.iptables.subprocess.run")
@patch("nhpkit.iptables.shutil.which")
def test_new_iptables_reads_policies(which, run):
    which.return_value = "/sbin/iptables"
    run.return_value = _ok(LISTING)
    table = new_iptables()
    assert table.binary == "/sbin/iptables"
    assert table.input_policy == Policy.DROP
    assert table.forward_policy == Policy.REJECT
    assert table.output_policy == Policy.ACCEPT
    assert run.call_args.args[0] == ["/sbin/iptables", "-L"]


@patch("nhpkit.iptables.shutil.which")
def test_new_iptables_without_binary(which):
    which.return_value = None
    with pytest.raises(FileNotFoundError):
        new_iptables()


@patch("nhpkit.iptables.subprocess.run")
@patch("nhpkit.iptables.shutil.which")
def test_new_iptables_without_privilege(which, run):
    which.return_value = "/sbin/iptables"
    run.side_effect = subprocess.CalledProcessError(1, ["/sbin/iptables", "-L"])
    with pytest.raises(subprocess.CalledProcessError):
        new_iptables()


@patch("nhpkit.iptables.subprocess.run")
def test_accept_all_input_inserts_rules_once(run):
    run.return_value = _ok()
    table = IPTables(binary="/sbin/iptables")
    table.accept_all_input()
    table.accept_all_input()
    assert table.accept_input_mode is True
    assert [c.args[0] for c in run.call_args_list] == [
        ["/sbin/iptables", "-I", "INPUT", "-d", "0.0.0.0/0", "-j", "ACCEPT"],
        ["/sbin/iptables", "-I", "FORWARD", "-d", "0.0.0.0/0", "-j", "ACCEPT"],
    ]


@patch("nhpkit.iptables.subprocess.run")
def test_reset_all_input_deletes_rules(run):
    run.return_value = _ok(returncode=1)
    table = IPTables(binary="/sbin/iptables", accept_input_mode=True)
    table.reset_all_input()
    assert table.accept_input_mode is False
    assert [c.args[0][1:3] for c in run.call_args_list] == [["-D", "INPUT"], ["-D", "FORWARD"]]


@patch("nhpkit.iptables.subprocess.run")
def test_reset_without_accept_mode_does_nothing(run):
    table = IPTables(binary="/sbin/iptables")
    table.reset_all_input()
    assert run.call_count == 0
    assert table.accept_input_mode is False


@pytest.mark.parametrize(
    "ip_type, set_type, expected",
    [
        (IPType.IPV4, 1, "defaultset"),
        (IPType.IPV6, 1, "defaultset_v6"),
        (IPType.IPV4, 2, ""),
        (IPType.IPV6, 3, "blacklistset"),
        (IPType.IPV4, 4, "tempset"),
        (IPType.IPV6, 4, "tempset_v6"),
        (IPType.IPV4, 9, ""),
    ],
)
def test_get_ipset_name(ip_type, set_type, expected):
    assert IPSet("/sbin/ipset").get_ipset_name(ip_type, set_type) == expected


@pytest.mark.parametrize(
    "set_type, expected", [(2, "whitelistset"), (3, "blacklistset"), (1, "")]
)
def test_get_default_name(set_type, expected):
    assert IPSet("/sbin/ipset").get_default_name(IPType.IPV6, set_type) == expected


@patch("nhpkit.iptables.subprocess.run")
def test_ipset_add_builds_command(run):
    run.return_value = _ok(b"added")
    ipset = IPSet("/sbin/ipset")
    assert ipset.add(IPType.IPV4, 1, 60, "192.0.2.1") == "added"
    assert run.call_args.args[0] == [
        "/sbin/ipset", "add", "-exist", "defaultset", "192.0.2.1", "timeout", "60",
    ]
    assert run.call_args.kwargs["timeout"] == 2.0


@patch("nhpkit.iptables.subprocess.run")
def test_ipset_run_stderr_raises(run):
    run.return_value = _ok(stderr=b"set does not exist")
    with pytest.raises(CommandError) as excinfo:
        IPSet("/sbin/ipset").run("list")
    assert excinfo.value.stderr == "set does not exist"


@patch("nhpkit.iptables.subprocess.run")
def test_ipset_run_failure_raises(run):
    run.return_value = _ok(returncode=2)
    with pytest.raises(CommandError):
        IPSet("/sbin/ipset").run("list")


@patch("nhpkit.iptables.shutil.which")
def test_new_ipset(which):
    which.return_value = "/sbin/ipset"
    ipset = new_ipset(True)
    assert ipset == IPSet(binary="/sbin/ipset", wait=True)


@patch("nhpkit.iptables.shutil.which")
def test_new_ipset_without_binary(which):
    which.return_value = None
    with pytest.raises(FileNotFoundError):
        new_ipset(False)