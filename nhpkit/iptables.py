"""Control of iptables policies and ipset entries."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from . import logger as log
from .cmd import CommandError

DEFAULT_SET = "defaultset"
DEFAULT_SET_V6 = "defaultset_v6"
WHITELIST_SET = "whitelistset"
WHITELIST_SET_V6 = "whitelistset_v6"
BLACKLIST_SET = "blacklistset"
BLACKLIST_SET_V6 = "blacklistset_v6"
TEMP_SET = "tempset"
TEMP_SET_V6 = "tempset_v6"

IPSET_ADD_TIMEOUT = 2.0


class IPType(IntEnum):
    IPV6 = 1
    IPV4 = 2


class Policy(IntEnum):
    ACCEPT = 0
    DROP = 1
    REJECT = 2


class RuleOperation(IntEnum):
    ADD = 0
    DELETE = 1


def _policy_in_line(line: str, current: Policy) -> Policy:
    for policy in Policy:
        if policy.name in line:
            return policy
    return current


def _execute(argv: list[str]) -> None:
    command_line = " ".join(argv)
    try:
        completed = subprocess.run(argv, capture_output=True)
    except OSError as exc:
        log.debug("execute command %s, error: %s", command_line, exc)
        return
    if completed.returncode != 0:
        log.debug("execute command %s, error: exit status %d", command_line, completed.returncode)


@dataclass
class IPTables:
    """The iptables binary and the default policies of its built-in chains."""

    binary: str
    input_policy: Policy = Policy.ACCEPT
    forward_policy: Policy = Policy.ACCEPT
    output_policy: Policy = Policy.ACCEPT
    accept_input_mode: bool = False

    def _change_policy(
        self,
        input_policy: Optional[Policy],
        forward_policy: Optional[Policy],
        output_policy: Optional[Policy],
    ) -> None:
        for chain, policy in (
            ("INPUT", input_policy),
            ("FORWARD", forward_policy),
            ("OUTPUT", output_policy),
        ):
            if policy is not None:
                _execute([self.binary, "-P", chain, Policy(policy).name])

    def _change_rule(
        self,
        input_policy: Optional[Policy],
        forward_policy: Optional[Policy],
        output_policy: Optional[Policy],
        operation: RuleOperation,
        dest: str,
    ) -> None:
        flag = "-D" if operation == RuleOperation.DELETE else "-I"
        for chain, policy in (
            ("INPUT", input_policy),
            ("FORWARD", forward_policy),
            ("OUTPUT", output_policy),
        ):
            if policy is not None:
                _execute([self.binary, flag, chain, "-d", dest, "-j", Policy(policy).name])

    def reset_all_input(self) -> None:
        """Remove the accept-all rules added by :meth:`accept_all_input`."""
        if not self.accept_input_mode:
            return
        log.info("reset iptables input v2")
        self._change_rule(Policy.ACCEPT, Policy.ACCEPT, None, RuleOperation.DELETE, "0.0.0.0/0")
        self.accept_input_mode = False

    def accept_all_input(self) -> None:
        """Insert rules accepting all input and forwarded traffic."""
        if self.accept_input_mode:
            return
        log.info("accept iptables input v2")
        self._change_rule(Policy.ACCEPT, Policy.ACCEPT, None, RuleOperation.ADD, "0.0.0.0/0")
        self.accept_input_mode = True


def new_iptables() -> IPTables:
    """Locate iptables and read the current chain policies (needs root)."""
    path = shutil.which("iptables")
    if path is None:
        log.error("unable to locate iptables")
        raise FileNotFoundError("unable to locate iptables")
    try:
        completed = subprocess.run([path, "-L"], capture_output=True, check=True)
    except (subprocess.CalledProcessError, OSError) as exc:
        log.error(
            "execute command %s -L, error: %s\nYou need root privilege to run this appplication",
            path,
            exc,
        )
        raise

    table = IPTables(binary=path)
    for line in completed.stdout.decode("utf-8", errors="replace").split("\n"):
        if line.startswith("Chain INPUT"):
            table.input_policy = _policy_in_line(line, table.input_policy)
        elif line.startswith("Chain FORWARD"):
            table.forward_policy = _policy_in_line(line, table.forward_policy)
        elif line.startswith("Chain OUTPUT"):
            table.output_policy = _policy_in_line(line, table.output_policy)
    return table


@dataclass
class IPSet:
    """The ipset binary."""

    binary: str
    wait: bool = False

    def add(self, ip_type: IPType, set_type: int, expire: int, *args: str) -> str:
        """Add an entry with a timeout to the set chosen by type."""
        name = self.get_ipset_name(ip_type, set_type)
        params = ["add", "-exist", name, *args, "timeout", str(expire)]
        log.debug("Execute ipset: ipset %s", params)
        return self._run(params, IPSET_ADD_TIMEOUT)

    def get_ipset_name(self, ip_type: IPType, set_type: int) -> str:
        """Return the set name for a set type (1 default, 3 blacklist, 4 temp)."""
        if set_type == 1:
            return DEFAULT_SET_V6 if ip_type == IPType.IPV6 else DEFAULT_SET
        if set_type == 3:
            return self.get_default_name(ip_type, set_type)
        if set_type == 4:
            return TEMP_SET_V6 if ip_type == IPType.IPV6 else TEMP_SET
        return ""

    def get_default_name(self, ip_type: IPType, set_type: int) -> str:
        """Return the whitelist (2) or blacklist (3) set name."""
        if set_type == 2:
            return WHITELIST_SET
        if set_type == 3:
            return BLACKLIST_SET
        return ""

    def run(self, *args: str) -> str:
        """Run ipset with ``args`` and return its standard output."""
        return self._run(list(args), None)

    def _run(self, args: list[str], timeout: Optional[float]) -> str:
        argv = [self.binary, *args]
        command_line = " ".join(argv)
        try:
            completed = subprocess.run(argv, capture_output=True, timeout=timeout)
        except subprocess.TimeoutExpired as exc:
            raise CommandError(f"command timed out after {timeout:g}s", command_line) from exc
        except OSError as exc:
            raise CommandError(str(exc), command_line) from exc
        stderr = completed.stderr.decode("utf-8", errors="replace")
        if completed.returncode != 0:
            raise CommandError(f"exit status {completed.returncode}", command_line, stderr)
        if stderr:
            raise CommandError(stderr, command_line, stderr)
        return completed.stdout.decode("utf-8", errors="replace")


def new_ipset(wait: bool) -> IPSet:
    """Locate the ipset binary (needs root to use)."""
    path = shutil.which("ipset")
    if path is None:
        log.error("unable to locate ipset")
        raise FileNotFoundError("unable to locate ipset")
    return IPSet(binary=path, wait=wait)