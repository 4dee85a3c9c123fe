"""
Tests for LogCommand — Sealing the slate under a status
"""

from unittest.mock import PropertyMock

import pytest

from helm.commands.log_cmd import LogCommand
from helm.core.action import Log
from helm.core.errors import IdentityRequired, SerializationError
from tests.factories import TEST_IDENTITY


class TestLog:
    def test_seals_slate(self, helm_env, capsys):
        command = helm_env.create_command(LogCommand)

        command.log(helm_env.sample.voyage_id, "fix drafted", "The flaky test races on the clock")

        latest = helm_env.sample.logbook.latest()
        assert latest.action == Log(status="fix drafted")
        assert latest.identity == TEST_IDENTITY
        assert (latest.role, latest.method) == ("agent", "model")
        assert [o.target.describe() for o in latest.bearing] == ["file tests/login.rs"]
        assert helm_env.sample.slate.count() == 0
        assert "Sealed 1 observation(s) as test-agent" in capsys.readouterr().out

    def test_identity_required_before_any_write(self, helm_env):
        cli = helm_env.create_cli_mock()
        type(cli).identity = PropertyMock(side_effect=IdentityRequired("identity required"))
        command = helm_env.create_command(LogCommand, cli)

        with pytest.raises(IdentityRequired):
            command.log(helm_env.sample.voyage_id, "status", "summary")
        assert helm_env.sample.logbook.count() == 1
        assert helm_env.sample.slate.count() == 1

    def test_blank_status(self, helm_env):
        command = helm_env.create_command(LogCommand)
        with pytest.raises(SerializationError):
            command.log(helm_env.sample.voyage_id, "", "summary")
        assert helm_env.sample.logbook.count() == 1

    def test_unknown_voyage(self, helm_factory):
        command = helm_factory.create_command(LogCommand)
        assert command.log("missing", "status", "summary") == 1
