"""
Tests for the sequential batch runner.
Covers proxy pairing, inter-account delays, failure isolation and key loading.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from core.account import Account
from core.batch import BatchRunner, assign_proxies
from core.config import BotSettings
from core.errors import NoAccountsError, TransientRemoteError
from core.pipeline import AccountPipeline
from core.results import RunOutcome
from core.retry import RetryPolicy
from operations.base import RemoteOperation

KEYS = ["55" * 32, "66" * 32]


class RecordingOperation(RemoteOperation):
    """Appends ``(address, name)`` for every attempt; optionally fails for one address."""

    def __init__(self, name, log, fail_for=None):
        self.name = name
        self.label = name
        self.log = log
        self.fail_for = fail_for

    async def attempt(self, ctx):
        self.log.append((ctx.account.address, self.name))
        if ctx.account.address == self.fail_for:
            raise TransientRemoteError("HTTP 503", status=503)
        return "ok"


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return BotSettings(
        delay_between_tasks=0,
        delay_between_accounts=10000,
        retry={"max_retries": 1},
        tasks={"fund": True, "claim": True, "stake": False, "compound": False, "unstake": True},
    )


def make_runner(settings, log, fail_for=None):
    proxies_seen = []

    def client_factory(settings, proxy):
        proxies_seen.append(proxy)
        clients = MagicMock()
        clients.close = AsyncMock()
        return clients

    reporter = MagicMock()
    operations = [
        RecordingOperation(name, log, fail_for)
        for name in ["fund", "claim", "stake", "compound", "unstake"]
    ]
    pipeline = AccountPipeline(
        settings,
        operations=operations,
        retry_policy=RetryPolicy(settings.retry, sleep=AsyncMock(), reporter=reporter),
        reporter=reporter,
        client_factory=client_factory,
        sleep=AsyncMock(),
    )
    runner = BatchRunner(
        settings, pipeline, reporter=reporter, sleep=AsyncMock(), dashboard=MagicMock(),
    )
    return runner, proxies_seen


def test_assign_proxies_pads_with_none():
    assert assign_proxies(3, ["p0"]) == ["p0", None, None]
    assert assign_proxies(1, ["p0", "p1"]) == ["p0"]
    assert assign_proxies(2, []) == [None, None]


@pytest.mark.asyncio
async def test_two_accounts_one_proxy_selected_tasks(settings):
    log = []
    runner, proxies_seen = make_runner(settings, log)

    summary = await runner.run_batch(KEYS, ["http://1.1.1.1:80"])

    first, second = (outcome.address for outcome in summary.outcomes)
    assert log == [
        (first, "fund"), (first, "claim"), (first, "unstake"),
        (second, "fund"), (second, "claim"), (second, "unstake"),
    ]
    assert proxies_seen == ["http://1.1.1.1:80", None]
    assert summary.proxies_assigned == ["http://1.1.1.1:80", None]
    assert summary.total == 2 and summary.succeeded == 2
    runner.reporter.warn.assert_called_once()


@pytest.mark.asyncio
async def test_inter_account_delay_only_between_accounts(settings):
    runner, _ = make_runner(settings, [])

    await runner.run_batch(KEYS + ["77" * 32], [])

    assert [c.args[0] for c in runner.sleep.await_args_list] == [10.0, 10.0]


@pytest.mark.asyncio
async def test_single_account_never_sleeps(settings):
    runner, _ = make_runner(settings, [])
    await runner.run_batch(KEYS[:1], [])
    runner.sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_account_does_not_abort_batch(settings):
    log = []
    runner, _ = make_runner(settings, log)
    failing = Account.from_private_key(KEYS[0]).address
    runner.pipeline.operations[0].fail_for = failing

    summary = await runner.run_batch(KEYS, [])

    assert summary.succeeded == 1
    assert summary.failed == 1
    assert summary.outcomes[0].record.not_run() == ["claim", "stake", "compound", "unstake"]
    assert [name for address, name in log if address != failing] == ["fund", "claim", "unstake"]


@pytest.mark.asyncio
async def test_invalid_key_is_counted_as_failure(settings):
    runner, _ = make_runner(settings, [])

    summary = await runner.run_batch(["bad", KEYS[0]], [])

    assert [o.completed_all for o in summary.outcomes] == [False, True]
    assert summary.outcomes[0].address is None


@pytest.mark.asyncio
async def test_run_loads_sources_and_prints_summaries(settings):
    runner, _ = make_runner(settings, [])
    runner.key_loader = MagicMock(return_value=KEYS)
    runner.proxy_loader = MagicMock(return_value=[])

    summary = await runner.run()

    runner.key_loader.assert_called_once_with("pk.txt")
    runner.proxy_loader.assert_called_once_with("proxy.txt")
    runner.dashboard.show_config_summary.assert_called_once_with(settings, 2, 0)
    runner.dashboard.show_task_summary.assert_called_once_with(summary)
    assert summary.total == 2


@pytest.mark.asyncio
async def test_run_without_keys_raises(settings):
    runner, _ = make_runner(settings, [])
    runner.key_loader = MagicMock(return_value=[])

    with pytest.raises(NoAccountsError):
        await runner.run()
    runner.dashboard.show_config_summary.assert_not_called()


@pytest.mark.asyncio
async def test_run_batch_with_stub_pipeline(settings):
    pipeline = MagicMock()
    pipeline.process = AsyncMock(side_effect=[RunOutcome(False), RunOutcome(True)])
    runner = BatchRunner(settings, pipeline, reporter=MagicMock(), sleep=AsyncMock(), dashboard=MagicMock())

    summary = await runner.run_batch(KEYS, ["p0", "p1"])

    assert pipeline.process.await_args_list[0].args == (KEYS[0], "p0", 0, 2)
    assert pipeline.process.await_args_list[1].args == (KEYS[1], "p1", 1, 2)
    assert summary.failed == 1
    runner.reporter.warn.assert_not_called()


def test_from_settings_wires_shared_reporter(settings):
    reporter = MagicMock()
    runner = BatchRunner.from_settings(settings, reporter=reporter)
    assert runner.pipeline.reporter is reporter
    assert runner.pipeline.retry_policy.reporter is reporter
    assert [op.name for op in runner.pipeline.operations] == ["fund", "claim", "stake", "compound", "unstake"]
