"""End-to-end CLI tests against a scripted JSON-RPC endpoint."""

from __future__ import annotations

import json
from functools import partial
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner
from solders.hash import Hash
from solders.keypair import Keypair

from conftest import FakeRpc, RpcFail, SleepRecorder
from jitorpc.cli import VERSION, cli
from jitorpc.client.poller import BUNDLE_POLICY, SIGNATURE_POLICY, BundleTracker, SignatureTracker
from jitorpc.client.rpc import Transport
from jitorpc.wallet import keypair_from_keygen_file, load_keypair, save_keypair


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def keypair_file(tmp_path: Path) -> Path:
    return save_keypair(Keypair(), tmp_path / "id.json")


@pytest.fixture()
def fake() -> FakeRpc:
    fake = FakeRpc()
    fake.script("getTipAccounts", [str(Keypair().pubkey()) for _ in range(3)])
    fake.script(
        "getLatestBlockhash",
        {"context": {"slot": 1}, "value": {"blockhash": str(Hash.new_unique()), "lastValidBlockHeight": 10}},
    )
    return fake


def invoke(runner: CliRunner, fake: FakeRpc, args: list[str], env: dict[str, str] | None = None):
    obj = {"http_transport": httpx.MockTransport(fake)}
    return runner.invoke(cli, args, obj=obj, env=env)


def finalized(bundle_id: str) -> dict:
    return {
        "context": {"slot": 100},
        "value": [
            {
                "bundle_id": bundle_id,
                "transactions": ["sigA", "sigB"],
                "slot": 99,
                "confirmation_status": "finalized",
                "err": {"Ok": None},
            }
        ],
    }


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert VERSION in result.output


def test_tip_accounts(runner: CliRunner, fake: FakeRpc) -> None:
    fake.script("getTipAccounts", ["A", "B"])
    result = invoke(runner, fake, ["tip-accounts", "--uuid", "tok"])

    assert result.exit_code == 0, result.output
    assert "Tip Accounts:" in result.output
    assert '"A"' in result.output
    request = fake.requests[0]
    assert request.url.params["uuid"] == "tok"
    assert request.headers["x-jito-auth"] == "tok"


def test_tip_accounts_rpc_error(runner: CliRunner, fake: FakeRpc) -> None:
    fake.script("getTipAccounts", RpcFail(-32603, "internal"))
    result = invoke(runner, fake, ["tip-accounts"])

    assert result.exit_code == 3
    assert "internal" in result.output
    assert "Method: getTipAccounts" in result.output


class TestSendBundle:
    def test_full_flow(self, runner: CliRunner, fake: FakeRpc, keypair_file: Path) -> None:
        fake.script("sendBundle", "bundle-1")
        fake.script("getBundleStatuses", {"context": {"slot": 1}, "value": []}, finalized("bundle-1"))

        receiver = str(Keypair().pubkey())
        result = invoke(
            runner,
            fake,
            ["send-bundle", "--receiver", receiver, "--keypair", str(keypair_file), "--interval", "0"],
        )

        assert result.exit_code == 0, result.output
        assert "Bundle ID: bundle-1" in result.output
        assert "SUCCESS" in result.output
        assert "https://solscan.io/tx/sigA" in result.output

        (send,) = fake.calls("sendBundle")
        assert len(send.params) == 1
        assert len(send.params[0]) == 2
        assert all(isinstance(tx, str) for tx in send.params[0])
        assert fake.calls("getBundleStatuses")[0].params == [["bundle-1"]]
        assert len(fake.calls("getBundleStatuses")) == 2

    def test_no_wait(self, runner: CliRunner, fake: FakeRpc, keypair_file: Path) -> None:
        fake.script("sendBundle", "bundle-1")
        result = invoke(
            runner,
            fake,
            ["send-bundle", "--receiver", str(Keypair().pubkey()), "--keypair", str(keypair_file), "--no-wait"],
        )

        assert result.exit_code == 0, result.output
        assert fake.calls("getBundleStatuses") == []

    def test_rejected_bundle(self, runner: CliRunner, fake: FakeRpc, keypair_file: Path) -> None:
        fake.script("sendBundle", RpcFail(-32602, "bundle contains an already processed transaction"))
        result = invoke(
            runner,
            fake,
            ["send-bundle", "--receiver", str(Keypair().pubkey()), "--keypair", str(keypair_file)],
        )

        assert result.exit_code == 3
        assert "already processed" in result.output
        assert "Method: sendBundle" in result.output
        assert "Code: -32602" in result.output
        assert "Params:" in result.output

    def test_failed_bundle_exits_nonzero(self, runner: CliRunner, fake: FakeRpc, keypair_file: Path) -> None:
        status = finalized("bundle-1")
        status["value"][0]["err"] = {"InstructionError": [0, "Custom"]}
        fake.script("sendBundle", "bundle-1")
        fake.script("getBundleStatuses", status)

        result = invoke(
            runner,
            fake,
            ["send-bundle", "--receiver", str(Keypair().pubkey()), "--keypair", str(keypair_file), "--interval", "0"],
        )

        assert result.exit_code == 1
        assert "FAILED" in result.output

    def test_bad_receiver(self, runner: CliRunner, fake: FakeRpc, keypair_file: Path) -> None:
        result = invoke(runner, fake, ["send-bundle", "--receiver", "nope", "--keypair", str(keypair_file)])
        assert result.exit_code == 1
        assert "receiver" in result.output
        assert fake.requests == []

    def test_missing_wallet(self, runner: CliRunner, fake: FakeRpc, tmp_path: Path) -> None:
        result = invoke(
            runner,
            fake,
            ["send-bundle", "--receiver", str(Keypair().pubkey()), "--keypair", str(tmp_path / "missing.json")],
        )
        assert result.exit_code == 2
        assert fake.requests == []


class TestSendTxn:
    def test_tracks_signature(self, runner: CliRunner, fake: FakeRpc, keypair_file: Path) -> None:
        fake.script("sendTransaction", "5sig")
        fake.script(
            "getSignatureStatuses",
            {"context": {"slot": 1}, "value": [None]},
            {
                "context": {"slot": 2},
                "value": [{"slot": 2, "confirmations": 30, "err": None, "confirmationStatus": "confirmed"}],
            },
        )

        result = invoke(
            runner,
            fake,
            ["send-txn", "--receiver", str(Keypair().pubkey()), "--keypair", str(keypair_file), "--interval", "0"],
        )

        assert result.exit_code == 0, result.output
        assert "Signature: 5sig" in result.output
        assert "SUCCESS" in result.output
        (send,) = fake.calls("sendTransaction")
        assert send.url.path == "/api/v1/transactions"
        assert "bundleOnly" not in send.url.params
        assert fake.calls("getSignatureStatuses")[0].params[0] == ["5sig"]

    def test_bundle_only(self, runner: CliRunner, fake: FakeRpc, keypair_file: Path) -> None:
        fake.script("sendBundle", "bundle-9")
        fake.script("getBundleStatuses", finalized("bundle-9"))

        result = invoke(
            runner,
            fake,
            [
                "send-txn",
                "--receiver",
                str(Keypair().pubkey()),
                "--keypair",
                str(keypair_file),
                "--bundle-only",
                "--interval",
                "0",
            ],
        )

        assert result.exit_code == 0, result.output
        (send,) = fake.calls("sendBundle")
        assert len(send.params[0]) == 1
        assert fake.calls("sendTransaction") == []

    def test_bundle_only_polls_at_bundle_cadence(self, runner: CliRunner, fake: FakeRpc, keypair_file: Path) -> None:
        fake.script("sendBundle", "bundle-9")
        fake.script("getBundleStatuses", {"context": {"slot": 1}, "value": []})
        sleeps = SleepRecorder()

        with patch("jitorpc.commands.txn.BundleTracker", partial(BundleTracker, sleep=sleeps)):
            result = invoke(
                runner,
                fake,
                ["send-txn", "--receiver", str(Keypair().pubkey()), "--keypair", str(keypair_file), "--bundle-only"],
            )

        assert result.exit_code == 0, result.output
        assert BUNDLE_POLICY.max_attempts == 60
        assert len(fake.calls("getBundleStatuses")) == 60
        assert sleeps.calls == [5.0] * 60
        assert "unknown after 60 attempts" in result.output

    def test_signature_path_polls_at_signature_cadence(
        self, runner: CliRunner, fake: FakeRpc, keypair_file: Path
    ) -> None:
        fake.script("sendTransaction", "5sig")
        fake.script("getSignatureStatuses", {"context": {"slot": 1}, "value": [None]})
        sleeps = SleepRecorder()

        with patch("jitorpc.commands.txn.SignatureTracker", partial(SignatureTracker, sleep=sleeps)):
            result = invoke(
                runner,
                fake,
                ["send-txn", "--receiver", str(Keypair().pubkey()), "--keypair", str(keypair_file)],
            )

        assert result.exit_code == 0, result.output
        assert len(fake.calls("getSignatureStatuses")) == SIGNATURE_POLICY.max_attempts == 120
        assert sleeps.calls == [1.0] * 120

    def test_bundle_only_honours_explicit_attempts(
        self, runner: CliRunner, fake: FakeRpc, keypair_file: Path
    ) -> None:
        fake.script("sendBundle", "bundle-9")
        fake.script("getBundleStatuses", {"context": {"slot": 1}, "value": []})
        sleeps = SleepRecorder()

        with patch("jitorpc.commands.txn.BundleTracker", partial(BundleTracker, sleep=sleeps)):
            result = invoke(
                runner,
                fake,
                [
                    "send-txn",
                    "--receiver",
                    str(Keypair().pubkey()),
                    "--keypair",
                    str(keypair_file),
                    "--bundle-only",
                    "--max-attempts",
                    "3",
                ],
            )

        assert result.exit_code == 0, result.output
        assert sleeps.calls == [5.0] * 3


class TestTimeout:
    @staticmethod
    def _recording(seen: list):
        def build(config, **kwargs):
            seen.append(config)
            return Transport(config, **kwargs)
        return build

    def test_option_reaches_both_endpoints(self, runner: CliRunner, fake: FakeRpc, keypair_file: Path) -> None:
        fake.script("sendBundle", "bundle-1")
        seen: list = []

        with patch("jitorpc.commands.Transport", side_effect=self._recording(seen)):
            result = invoke(
                runner,
                fake,
                [
                    "send-bundle",
                    "--receiver",
                    str(Keypair().pubkey()),
                    "--keypair",
                    str(keypair_file),
                    "--no-wait",
                    "--timeout",
                    "3",
                ],
            )

        assert result.exit_code == 0, result.output
        assert len(seen) == 2
        assert {config.timeout for config in seen} == {3.0}

    def test_env_var(self, runner: CliRunner, fake: FakeRpc) -> None:
        seen: list = []
        with patch("jitorpc.commands.Transport", side_effect=self._recording(seen)):
            result = invoke(runner, fake, ["tip-accounts"], env={"JITO_TIMEOUT": "7.5"})

        assert result.exit_code == 0, result.output
        assert seen[0].timeout == 7.5

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_invalid_value_is_usage_error(self, runner: CliRunner, fake: FakeRpc, value: str) -> None:
        result = invoke(runner, fake, ["tip-accounts", "--timeout", value])
        assert result.exit_code == 2
        assert fake.requests == []


class TestBundleStatus:
    def test_one_shot(self, runner: CliRunner, fake: FakeRpc) -> None:
        fake.script("getBundleStatuses", finalized("b1"))
        result = invoke(runner, fake, ["bundle-status", "b1", "b2"])

        assert result.exit_code == 0, result.output
        assert "Context slot: 100" in result.output
        assert "b1: finalized (slot 99)" in result.output
        assert "b2: no status available" in result.output
        assert fake.requests[0].params == [["b1", "b2"]]

    def test_wait(self, runner: CliRunner, fake: FakeRpc) -> None:
        fake.script("getBundleStatuses", finalized("b1"))
        result = invoke(runner, fake, ["bundle-status", "b1", "--wait", "--interval", "0"])

        assert result.exit_code == 0, result.output
        assert "SUCCESS" in result.output

    def test_wait_gives_up(self, runner: CliRunner, fake: FakeRpc) -> None:
        fake.script("getBundleStatuses", {"context": {"slot": 1}, "value": []})
        result = invoke(
            runner, fake, ["bundle-status", "b1", "--wait", "--interval", "0", "--max-attempts", "3"]
        )

        assert result.exit_code == 0
        assert "unknown after 3 attempts" in result.output
        assert len(fake.calls("getBundleStatuses")) == 3

    def test_wait_needs_one_id(self, runner: CliRunner, fake: FakeRpc) -> None:
        result = invoke(runner, fake, ["bundle-status", "b1", "b2", "--wait"])
        assert result.exit_code == 2
        assert fake.requests == []


def test_inflight(runner: CliRunner, fake: FakeRpc) -> None:
    raw = {"context": {"slot": 1}, "value": [{"bundle_id": "b1", "status": "Pending", "landed_slot": None}]}
    fake.script("getInflightBundleStatuses", raw)
    result = invoke(runner, fake, ["inflight", "b1"])

    assert result.exit_code == 0, result.output
    assert '"Pending"' in result.output
    assert fake.requests[0].params == [["b1"]]


class TestWallet:
    def test_keygen_then_whoami(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "new.json"
        result = runner.invoke(cli, ["keygen", str(path)])
        assert result.exit_code == 0, result.output

        address = str(keypair_from_keygen_file(path).pubkey())
        assert address in result.output
        assert len(json.loads(path.read_text(encoding="utf-8"))) == 64

        whoami = runner.invoke(cli, ["whoami", "--keypair", str(path)])
        assert whoami.exit_code == 0
        assert f"Address: {address}" in whoami.output

    def test_keygen_refuses_overwrite(self, runner: CliRunner, keypair_file: Path) -> None:
        result = runner.invoke(cli, ["keygen", str(keypair_file)])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_whoami_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["whoami", "--keypair", str(tmp_path / "none.json")])
        assert result.exit_code == 2
        assert "No wallet found" in result.output

    def test_keygen_save_env(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "new.json"
        env_file = tmp_path / ".env"
        result = runner.invoke(cli, ["keygen", str(path), "--save-env", "--env-file", str(env_file)])

        assert result.exit_code == 0, result.output
        assert f"Env:     {env_file}" in result.output
        address = keypair_from_keygen_file(path).pubkey()
        with patch.dict("os.environ", {}, clear=True):
            assert load_keypair(env_path=env_file).pubkey() == address

    def test_keygen_without_save_env_leaves_env_alone(self, runner: CliRunner, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        result = runner.invoke(cli, ["keygen", str(tmp_path / "new.json"), "--env-file", str(env_file)])
        assert result.exit_code == 0, result.output
        assert not env_file.exists()
