import pytest

from .context import (
    BPlusTreeSession,
    run_file,
    parse_args_and_start,
    MetaCommandResult,
    CommandType,
    TreeInsertResult,
    TreeDeleteResult,
    StepType,
)


@pytest.fixture
def session():
    return BPlusTreeSession(order=3)


def test_insert_find_delete(session):
    resp = session.handle_input("insert 10 'ten'; insert 20; find 10")
    assert resp.success, resp.error_message
    insert_ten, insert_twenty, find_ten = resp.body
    assert insert_ten.command_type == CommandType.Insert
    assert insert_ten.status == TreeInsertResult.Success
    assert insert_twenty.key == 20
    assert find_ten.command_type == CommandType.Find
    assert find_ten.value == "ten"
    assert find_ten.path == [session.tree.root_id]

    resp = session.handle_input("delete 10")
    assert resp.success
    assert resp.body[0].status == TreeDeleteResult.Success
    assert session.tree.keys() == [20]


def test_failed_commands(session):
    resp = session.handle_input("insert 1; insert 1; insert 2")
    assert not resp.success
    assert [outcome.success for outcome in resp.body] == [True, False, True]
    assert resp.body[1].status == TreeInsertResult.DuplicateKey
    assert "already exists" in resp.error_message
    # later commands still run
    assert session.tree.keys() == [1, 2]

    resp = session.handle_input("delete 5")
    assert not resp.success
    assert resp.body[0].status == TreeDeleteResult.KeyNotFound

    resp = session.handle_input("find 5")
    assert not resp.success
    assert resp.body[0].value is None


def test_delete_from_empty_session(session):
    resp = session.handle_input("delete 1")
    assert not resp.success
    assert resp.body[0].status == TreeDeleteResult.EmptyTree


def test_parse_failure(session):
    resp = session.handle_input("insert ten")
    assert not resp.success
    assert resp.body is None
    assert resp.error_message.startswith("parse failed")
    assert session.tree.root is None


def test_trace_meta_command(session):
    resp = session.handle_input(".trace on")
    assert resp.success
    resp = session.handle_input("insert 1; insert 2")
    assert all(outcome.steps for outcome in resp.body)
    assert resp.body[0].steps[0].kind == StepType.Start
    assert resp.body[-1].steps[-1].kind == StepType.Final

    session.handle_input(".trace off")
    resp = session.handle_input("insert 3")
    assert resp.body[0].steps == []

    resp = session.handle_input(".trace maybe")
    assert resp.status == MetaCommandResult.InvalidArgument


def test_trace_session():
    session = BPlusTreeSession(order=4, trace=True)
    resp = session.handle_input("insert 5")
    assert [step.kind for step in resp.body[0].steps] == [StepType.Start, StepType.NewRoot, StepType.Final]


def test_order_meta_command(session):
    session.handle_input("insert 1; insert 2")
    resp = session.handle_input(".order 5")
    assert resp.success
    assert session.order == 5
    assert session.tree.order == 5
    assert session.tree.root is None


@pytest.mark.parametrize("command", [".order", ".order 2", ".order 11", ".order abc", ".order 4 5"])
def test_order_meta_command_invalid(session, command):
    session.handle_input("insert 1")
    resp = session.handle_input(command)
    assert not resp.success
    assert resp.status == MetaCommandResult.InvalidArgument
    assert session.order == 3
    assert session.tree.keys() == [1]


def test_clear_meta_command(session):
    session.handle_input("insert 1; insert 2; insert 3; insert 4")
    resp = session.handle_input(".clear")
    assert resp.success
    assert session.tree.root is None
    assert session.tree.order == 3


def test_validate_meta_command(session):
    session.handle_input("; ".join(f"insert {key}" for key in range(20)))
    resp = session.handle_input(".validate")
    assert resp.success

    # corrupt the tree
    next(session.tree.leaves()).keys.append(-1)
    resp = session.handle_input(".validate")
    assert not resp.success
    assert resp.status == MetaCommandResult.ValidationFailed


def test_rules(session, capsys):
    resp = session.handle_input(".rules")
    assert resp.success
    out = capsys.readouterr().out
    assert "Order M=3" in out
    assert "2 to 3 children" in out
    assert "Have 2 to 3 keys" in out


def test_btree_and_help(session, capsys):
    session.handle_input("insert 1; insert 2; insert 3; insert 4")
    assert session.handle_input(".btree").success
    out = capsys.readouterr().out
    assert "internal [2]" in out
    assert "leaf [1]" in out

    assert session.handle_input(".help").success
    assert ".trace" in capsys.readouterr().out


def test_unrecognized_meta_command(session):
    resp = session.handle_input(".foo")
    assert not resp.success
    assert resp.status == MetaCommandResult.UnrecognizedCommand


def test_quit(session):
    with pytest.raises(SystemExit):
        session.handle_input(".quit")


def test_run_file(tmp_path, capsys):
    commands = tmp_path / "commands.txt"
    commands.write_text("insert 3;\ninsert 1;\ninsert 2;\nfind 2;\n")
    resp = run_file(str(commands), order=3)
    assert resp.success
    assert len(resp.body) == 4
    out = capsys.readouterr().out
    assert "Key 2 found" in out


def test_run_file_missing(tmp_path):
    resp = run_file(str(tmp_path / "missing.txt"))
    assert not resp.success
    assert "not found" in resp.error_message


def test_parse_args(tmp_path, capsys):
    parse_args_and_start([])
    assert "run-mode not specified" in capsys.readouterr().out

    parse_args_and_start(["bogus"])
    assert "Invalid run mode" in capsys.readouterr().out

    parse_args_and_start(["repl", "2"])
    assert "Invalid order" in capsys.readouterr().out

    parse_args_and_start(["file"])
    assert "Expected input filepath" in capsys.readouterr().out

    commands = tmp_path / "commands.txt"
    commands.write_text("insert 1; insert 2")
    parse_args_and_start(["file", str(commands), "4"])
    out = capsys.readouterr().out
    assert "Inserted key 2." in out
