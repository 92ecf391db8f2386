"""Privilege context resolution for container runtime calls."""

import grp
import os
from typing import Callable, List, Optional

from ipeoplepm.models import PrivilegeContext


class PrivilegeResolver:
    """Decides, per call, whether the runtime must be reached through ``sudo``.

    Nothing is cached: group membership granted after the tool started is
    honoured on the next call.
    """

    ESCALATION_PREFIX = ["sudo"]

    def __init__(
        self,
        docker_group: str,
        geteuid: Callable[[], int] = os.geteuid,
        getegid: Callable[[], int] = os.getegid,
        getgroups: Callable[[], List[int]] = os.getgroups,
        getgrnam: Callable[[str], grp.struct_group] = grp.getgrnam,
    ):
        self.docker_group = docker_group
        self.geteuid = geteuid
        self.getegid = getegid
        self.getgroups = getgroups
        self.getgrnam = getgrnam

    def _group_id(self) -> Optional[int]:
        try:
            return self.getgrnam(self.docker_group).gr_gid
        except KeyError:
            return None

    def is_group_member(self) -> bool:
        gid = self._group_id()
        if gid is None:
            return False
        return gid == self.getegid() or gid in self.getgroups()

    def resolve(self) -> PrivilegeContext:
        if self.geteuid() == 0:
            return PrivilegeContext.ROOT
        if self.is_group_member():
            return PrivilegeContext.GROUP_MEMBER
        return PrivilegeContext.ESCALATE


class PrivilegedExecutor:
    """Runs a command through the runner with whatever privilege it needs."""

    def __init__(self, resolver: PrivilegeResolver, command_runner, logger):
        self.resolver = resolver
        self.command_runner = command_runner
        self.logger = logger

    def prepare(self, cmd: List[str]) -> List[str]:
        context = self.resolver.resolve()
        if context.needs_escalation:
            self.logger.debug(
                "Not a member of group '%s'; escalating with sudo.", self.resolver.docker_group
            )
            return self.resolver.ESCALATION_PREFIX + list(cmd)
        return list(cmd)

    def execute(self, cmd: List[str], **kwargs):
        return self.command_runner.run(self.prepare(cmd), **kwargs)

    def execute_to(self, cmd: List[str], sink) -> int:
        return self.command_runner.stream_to(self.prepare(cmd), sink)
