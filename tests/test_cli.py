from __future__ import annotations

import contextlib
import io

import pytest

import facematch.cli as cli
from conftest import FakeRekognition, FakeS3
from facematch.errors import StackOutputError
from facematch.schema import MatchResult


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cli, "configure_logging", lambda verbosity=0: None)


def test_stack_flag_defaults_to_dev():
    assert cli.build_parser().parse_args([]).stack == "dev"
    assert cli.build_parser().parse_args(["-stack", "prod"]).stack == "prod"
    assert cli.build_parser().parse_args(["--stack", "qa"]).stack == "qa"


def test_print_result():
    out = io.StringIO()
    result = MatchResult(image="input/group.jpg", user_ids=["alice", "bob"])

    cli.print_result(result, out)

    assert out.getvalue() == (
        "\nProcessing image: input/group.jpg \nFound user: alice \nFound user: bob \n"
    )


def test_main_prints_users_per_image(monkeypatch, capsys, make_run, stack_info):
    fake = FakeRekognition(
        faces_by_image={
            "reference/alice_1.jpg": ["faceA"],
            "input/group.jpg": ["det1", "det2"],
            "input/empty.jpg": [],
        },
        matches={"det1": ["faceA"]},
    )
    s3 = FakeS3(["reference/alice_1.jpg", "input/empty.jpg", "input/group.jpg"])
    seen = {}

    def get_stack_info(stack_name, work_dir):
        seen["stack"] = stack_name
        return stack_info

    monkeypatch.setattr(cli, "get_stack_info", get_stack_info)
    monkeypatch.setattr(cli.MatchingRun, "from_stack", classmethod(lambda cls, info, settings: make_run(fake, s3)))

    cli.main(["-stack", "staging"])

    assert seen["stack"] == "staging"
    assert capsys.readouterr().out == (
        "\nProcessing image: input/empty.jpg \n"
        "\nProcessing image: input/group.jpg \nFound user: alice \n"
    )


def test_main_exits_nonzero_on_fatal_error(monkeypatch, caplog):
    def get_stack_info(stack_name, work_dir):
        raise StackOutputError("missing values in stack output")

    monkeypatch.setattr(cli, "get_stack_info", get_stack_info)

    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 1
    assert any(
        r.levelname == "CRITICAL" and "missing values in stack output" in r.getMessage()
        for r in caplog.records
    )


def test_print_result_follows_current_stdout():
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        cli.print_result(MatchResult(image="input/solo.jpg", user_ids=["carol"]))

    assert buf.getvalue() == "\nProcessing image: input/solo.jpg \nFound user: carol \n"
