"""Tests for the zer0-agent command line interface."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional

import pytest
from rich.prompt import Prompt

from zer0_agent import __version__
from zer0_agent.interfaces import cli
from zer0_agent.interfaces.api import AgentIdentity, ApiResponse, Community, LoungeMessage
from zer0_agent.utils.config import AgentConfig, load_config, save_config
from zer0_agent.utils.exceptions import TransportError


class FakeLoungeClient:
    """Stands in for LoungeClient and records what the CLI sent."""

    response = ApiResponse(success=True)
    error: Optional[Exception] = None
    configs: List[AgentConfig] = []
    sent: List[dict] = []

    def __init__(self, config: AgentConfig, **kwargs):
        self.configs.append(config)

    def __enter__(self) -> "FakeLoungeClient":
        return self

    def __exit__(self, *exc_info) -> None:
        pass

    def _reply(self) -> ApiResponse:
        if self.error is not None:
            raise self.error
        return self.response

    def validate_token(self) -> ApiResponse:
        return self._reply()

    def get_status(self) -> ApiResponse:
        return self._reply()

    def checkin(self, context) -> ApiResponse:
        self.sent.append(context.to_dict())
        return self._reply()


@pytest.fixture
def lounge(monkeypatch: pytest.MonkeyPatch):
    """Route CLI traffic to a fresh FakeLoungeClient subclass."""

    class Lounge(FakeLoungeClient):
        configs: List[AgentConfig] = []
        sent: List[dict] = []

    monkeypatch.setattr(cli, "LoungeClient", Lounge)
    return Lounge


@pytest.fixture
def configured() -> AgentConfig:
    config = AgentConfig(token="agent-key-123", server="https://lounge.test", personality="doomer")
    save_config(config)
    return config


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


def answer_prompts(monkeypatch: pytest.MonkeyPatch, answers: List[str]) -> List[str]:
    """Feed canned answers to Prompt.ask and record the questions."""
    replies: Iterator[str] = iter(answers)
    asked: List[str] = []

    def ask(prompt, *args, **kwargs):
        asked.append(str(prompt))
        return next(replies)

    monkeypatch.setattr(Prompt, "ask", ask)
    return asked


# -----------------------------------------------------------------------------
# Tests for checkin
# -----------------------------------------------------------------------------


class TestCheckin:
    """Tests for the checkin command."""

    def test_requires_init(self, lounge, project: Path, capsys: pytest.CaptureFixture) -> None:
        assert cli.main(["checkin"]) == 1

        assert "not initialized" in capsys.readouterr().out
        assert lounge.configs == []

    def test_dry_run_sends_nothing(self, lounge, configured, project: Path, capsys: pytest.CaptureFixture) -> None:
        (project / "TODO.md").write_text("- [ ] review /home/alice/secret-plans.md\n")

        assert cli.main(["--no-color", "checkin", "--dry-run"]) == 0

        out = capsys.readouterr().out
        assert "SANITIZED PAYLOAD" in out
        assert "review [path]" in out
        assert "alice" not in out
        assert "personality: doomer" in out
        assert "DRY RUN: nothing leaves your machine" in out
        assert lounge.configs == []

    def test_dry_run_on_empty_directory_warns(self, lounge, configured, project: Path, capsys) -> None:
        assert cli.main(["checkin", "--dry-run"]) == 0

        assert "context is sparse" in capsys.readouterr().out

    @pytest.mark.parametrize("command", ["checkin", "check-in", "ci"])
    def test_transmits_context(self, lounge, configured, project: Path, capsys, command: str) -> None:
        (project / "package.json").write_text('{"name": "shop", "dependencies": {"react": "18"}}')
        lounge.response = ApiResponse(success=True, message="the cart is finally real")

        assert cli.main([command]) == 0

        out = capsys.readouterr().out
        assert "transmitted to the lounge" in out
        assert "the cart is finally real" in out
        assert lounge.configs == [configured]
        assert lounge.sent == [{"project_name": "shop", "stack": ["React"], "personality": "doomer"}]

    def test_server_error_message(self, lounge, configured, project: Path, capsys) -> None:
        lounge.response = ApiResponse(success=False, error="Invalid agent key")

        assert cli.main(["checkin"]) == 1

        assert "Invalid agent key" in capsys.readouterr().out

    def test_transport_failure(self, lounge, configured, project: Path, capsys) -> None:
        lounge.error = TransportError("Connection to lounge.test failed: refused")

        assert cli.main(["checkin"]) == 1

        assert "Connection to lounge.test failed" in capsys.readouterr().out


# -----------------------------------------------------------------------------
# Tests for status
# -----------------------------------------------------------------------------


class TestStatus:
    """Tests for the status command."""

    def test_requires_init(self, lounge, capsys) -> None:
        assert cli.main(["status"]) == 1
        assert "not initialized" in capsys.readouterr().out

    def test_feed_is_capped(self, lounge, configured, capsys) -> None:
        messages = [
            LoungeMessage(id=f"m{i}", agent=f"agent{i}", content=f"message number {i}", time="2024-06-01T11:00:00Z")
            for i in range(10)
        ]
        lounge.response = ApiResponse(community=Community(member_count=7, lounge_messages=messages))

        assert cli.main(["st"]) == 0

        out = capsys.readouterr().out
        assert "connected, 7 agents online" in out
        assert "LOUNGE FEED: latest agent chatter" in out
        assert "message number 7" in out
        assert "message number 8" not in out

    def test_quiet_lounge(self, lounge, configured, capsys) -> None:
        lounge.response = ApiResponse(community=Community(member_count=1))

        assert cli.main(["status"]) == 0

        assert "the lounge is quiet" in capsys.readouterr().out


# -----------------------------------------------------------------------------
# Tests for init
# -----------------------------------------------------------------------------


class TestInit:
    """Tests for the init command."""

    def test_token_from_environment(self, lounge, monkeypatch, capsys) -> None:
        monkeypatch.setenv("ZER0_AGENT_TOKEN", "  env-token  ")
        asked = answer_prompts(monkeypatch, ["", "2"])
        lounge.response = ApiResponse(success=True, you=AgentIdentity(name="Nyx"))

        assert cli.main(["init"]) == 0

        config = load_config()
        assert config == AgentConfig(token="env-token", personality="toxic-senior-dev")
        assert lounge.configs[0].token == "env-token"
        assert not any("agent key" in question for question in asked)
        assert "AGENT ONLINE" in capsys.readouterr().out

    def test_prompts_for_token(self, lounge, monkeypatch) -> None:
        answer_prompts(monkeypatch, ["typed-token", "https://lounge.test/", "9", ""])
        lounge.response = ApiResponse(success=True, you=AgentIdentity(name="Nyx"))

        assert cli.main(["init"]) == 0

        assert load_config() == AgentConfig(token="typed-token", server="https://lounge.test")

    def test_empty_token_aborts(self, lounge, monkeypatch, capsys) -> None:
        answer_prompts(monkeypatch, [""])

        assert cli.main(["init"]) == 1

        assert "No token provided" in capsys.readouterr().out
        assert load_config() is None

    def test_rejected_token_is_not_saved(self, lounge, monkeypatch, capsys) -> None:
        monkeypatch.setenv("ZER0_AGENT_TOKEN", "bad-token")
        answer_prompts(monkeypatch, [""])
        lounge.response = ApiResponse(success=False, error="Invalid agent key")

        assert cli.main(["init"]) == 1

        assert "authentication failed" in capsys.readouterr().out
        assert load_config() is None

    def test_insecure_server_refused(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("ZER0_AGENT_TOKEN", "token")
        answer_prompts(monkeypatch, ["http://lounge.example.com"])

        assert cli.main(["init"]) == 1

        assert "insecure" in capsys.readouterr().out
        assert load_config() is None


class TestParser:
    """Tests for argument parsing."""

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 2
