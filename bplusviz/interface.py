"""
This module contains the highest level user-interaction, i.e. management of
the tree and the command parser, that drive the btree from text commands.
"""
import os
import os.path
import sys
import logging

from typing import List

from .btree import Tree, TreeInsertResult, TreeDeleteResult
from .constants import (
    DEFAULT_ORDER,
    EXIT_SUCCESS,
    MAX_ORDER,
    MIN_ORDER,
    PROMPT,
    USAGE,
)
from .dataexchange import Response, MetaCommandResult, CommandOutcome, CommandType
from .lang_parser.cmdhandler import CommandFrontEnd
from .lang_parser.symbols import Program, InsertCommand, DeleteCommand, FindCommand
from .steps import StepRecorder
from .stress import run_add_del_stress_suite


# section: core execution/user-interface logic

def config_logging():
    # config logger
    FORMAT = "[%(filename)s:%(lineno)s - %(funcName)s ] %(message)s"
    # log to stdout
    logging.basicConfig(format=FORMAT, level=logging.DEBUG)


class BPlusTreeSession:
    """
    This provides programmatic interface for driving a tree with text commands.

    An example flow is like:
    ```
    # create handler instance
    session = BPlusTreeSession(order=4, trace=True)

    # submit commands
    resp = session.handle_input("insert 10; insert 20")
    assert resp.success

    # each command has an outcome; with tracing on, outcomes carry steps
    for outcome in resp.body:
        print(outcome.message)
        for step in outcome.steps:
            print(step.kind, step.message)
    ```
    """

    def __init__(self, order: int = DEFAULT_ORDER, trace: bool = False):
        """
        :param order: order of the tree; see `Tree`
        :param trace: whether commands record their steps
        """
        self.order = order
        self.trace = trace
        self.tree = None
        # the lark parser is built once per session
        self.frontend = CommandFrontEnd()
        self.configure()
        self.reset()

    def reset(self):
        """
        Reset state, i.e. recreate an empty tree of the current order
        """
        self.tree = Tree(self.order)

    def configure(self):
        """
        Handle any configuration tasks
        """
        config_logging()

    @staticmethod
    def is_meta_command(command: str) -> bool:
        return bool(command) and command[0] == '.'

    def handle_input(self, input_buffer: str) -> Response:
        """
        handle input- parse and execute

        :param input_buffer:
        :return:
        """
        input_buffer = input_buffer.strip()
        if self.is_meta_command(input_buffer):
            return self.do_meta_command(input_buffer)

        p_resp = self.prepare_statement(input_buffer)
        if not p_resp.success:
            return Response(False, error_message=p_resp.error_message)

        return self.execute_program(p_resp.body)

    def do_meta_command(self, command: str) -> Response:
        """
        handle execution of meta command
        :param command:
        :return:
        """
        splits = command.split()
        name, args = splits[0], splits[1:]
        if name == ".quit":
            print("goodbye")
            sys.exit(EXIT_SUCCESS)
        elif name == ".btree":
            print("Printing tree" + "-"*50)
            self.tree.print_tree()
            print("Finished printing tree" + "-"*50)
            return Response(True, status=MetaCommandResult.Success)
        elif name == ".validate":
            print("Validating tree....")
            try:
                self.tree.validate()
            except AssertionError as e:
                return Response(False, error_message=f"validation failed: {e}",
                                status=MetaCommandResult.ValidationFailed)
            print("Validation succeeded.......")
            return Response(True, status=MetaCommandResult.Success)
        elif name == ".order":
            if len(args) != 1 or not args[0].isdigit() or not MIN_ORDER <= int(args[0]) <= MAX_ORDER:
                return Response(False, error_message=f"Invalid argument to .order| Usage: > .order <n>, "
                                                     f"with {MIN_ORDER} <= n <= {MAX_ORDER}",
                                status=MetaCommandResult.InvalidArgument)
            self.order = int(args[0])
            self.reset()
            print(f"New B+ Tree of order {self.order} created.")
            return Response(True, status=MetaCommandResult.Success)
        elif name == ".clear":
            self.reset()
            print(f"New B+ Tree of order {self.order} created.")
            return Response(True, status=MetaCommandResult.Success)
        elif name == ".rules":
            print(self.rules())
            return Response(True, status=MetaCommandResult.Success)
        elif name == ".trace":
            if len(args) != 1 or args[0] not in ("on", "off"):
                return Response(False, error_message="Invalid argument to .trace| Usage: > .trace on|off",
                                status=MetaCommandResult.InvalidArgument)
            self.trace = args[0] == "on"
            return Response(True, status=MetaCommandResult.Success)
        elif name == ".help":
            print(USAGE)
            return Response(True, status=MetaCommandResult.Success)
        return Response(False, error_message=f"Unrecognized meta command [{command}]",
                        status=MetaCommandResult.UnrecognizedCommand)

    def rules(self) -> str:
        """
        fill rules for the current order
        """
        return "\n".join([
            f"B+ Tree Rules (Order M={self.order})",
            f"Root: Is a leaf or has 2 to {self.order} children.",
            f"Internal Nodes: Have {self.tree.min_children} to {self.order} children.",
            f"Leaf Nodes: Have {self.tree.min_leaf_keys} to {self.order} keys (except possibly root).",
            "All leaves are at the same depth.",
        ])

    def prepare_statement(self, command: str) -> Response:
        """
        prepare statement, i.e. parse statement and
        return its AST

        :param command:
        :return:
        """
        parser = self.frontend
        parser.parse(command)
        if not parser.is_success():
            return Response(False, error_message=f"parse failed due to: [{parser.error_summary()}]")
        return Response(True, body=parser.get_parsed())

    def execute_program(self, program: Program) -> Response:
        """
        execute each command in order. The response is successful only
        if every command is; the body holds all outcomes regardless.
        """
        outcomes = [self.execute_command(command) for command in program.commands]
        failed = [outcome for outcome in outcomes if not outcome.success]
        if failed:
            return Response(False, error_message=failed[0].message, body=outcomes)
        return Response(True, body=outcomes)

    def execute_command(self, command) -> CommandOutcome:
        recorder = StepRecorder() if self.trace else None
        if isinstance(command, InsertCommand):
            result = self.tree.insert(command.key, command.value, recorder)
            success = result == TreeInsertResult.Success
            message = f"Inserted key {command.key}." if success else f"Key {command.key} already exists."
            outcome = CommandOutcome(CommandType.Insert, command.key, success, result, message)
        elif isinstance(command, DeleteCommand):
            result = self.tree.delete(command.key, recorder)
            success = result == TreeDeleteResult.Success
            if success:
                message = f"Deleted key {command.key}."
            elif result == TreeDeleteResult.EmptyTree:
                message = f"Key {command.key} not found in empty tree."
            else:
                message = f"Key {command.key} not found for deletion."
            outcome = CommandOutcome(CommandType.Delete, command.key, success, result, message)
        elif isinstance(command, FindCommand):
            found = self.tree.find(command.key, recorder)
            if found is None:
                outcome = CommandOutcome(CommandType.Find, command.key, False, None,
                                         f"Key {command.key} not found.")
            else:
                outcome = CommandOutcome(CommandType.Find, command.key, True, None,
                                         f"Key {command.key} found with value {found.value!r}; "
                                         f"path: {found.path}",
                                         value=found.value, path=found.path)
        else:
            raise ValueError(f"Unknown command {command}")

        if recorder is not None:
            outcome.steps = recorder.get_steps()
        logging.info(outcome.message)
        return outcome


def print_outcomes(outcomes: List[CommandOutcome]):
    for outcome in outcomes:
        print(outcome.message)
        for step_num, step in enumerate(outcome.steps):
            print(f"  [{step_num}] {step.kind.value}: {step.message} keys: {step.snapshot.keys()}")


def repl(order: int = DEFAULT_ORDER):
    """
    REPL (read-eval-print loop) for the tree
    """

    # create session handler
    session = BPlusTreeSession(order)

    print("Welcome to the B+ tree visualizer")
    print("For help use .help")
    while True:
        input_buffer = input(PROMPT)
        if not input_buffer.strip():
            continue
        resp = session.handle_input(input_buffer)
        if resp.body:
            print_outcomes(resp.body)
        if not resp.success:
            print(f"Command execution failed due to [{resp.error_message}] ")


def run_file(input_filepath: str, order: int = DEFAULT_ORDER) -> Response:
    """
    Execute commands in file.
    """
    if not os.path.exists(input_filepath):
        return Response(False, error_message=f"Argument file [{input_filepath}] not found")

    session = BPlusTreeSession(order)

    with open(input_filepath) as fp:
        contents = fp.read()

    resp = session.handle_input(contents)
    if resp.body:
        print_outcomes(resp.body)
    if not resp.success:
        print(f"Command execution failed due to [{resp.error_message}] ")

    session.tree.print_tree()
    return resp


def run_stress():
    """
    Run stress test
    """
    run_add_del_stress_suite(BPlusTreeSession())


def parse_order(args: List, position: int) -> int:
    """
    read optional order argument at `position`
    """
    if len(args) <= position:
        return DEFAULT_ORDER
    order = int(args[position])
    if not MIN_ORDER <= order <= MAX_ORDER:
        raise ValueError(f"order must be between {MIN_ORDER} and {MAX_ORDER}; received [{order}]")
    return order


def parse_args_and_start(args: List):
    """
    parse args and starts
    :return:
    """
    args_description = """Usage:
python run.py repl [order]
    // start repl
python run.py file <filepath> [order]
    // read file at <filepath>
python run.py stress
    // run add/delete stress suite
    """
    if len(args) < 1:
        print("Error: run-mode not specified")
        print(args_description)
        return

    runmode = args[0].lower()
    try:
        if runmode == "repl":
            order = parse_order(args, 1)
        elif runmode == "file":
            order = parse_order(args, 2)
    except ValueError as e:
        print(f"Error: Invalid order; {e}")
        print(args_description)
        return

    if runmode == "repl":
        repl(order)
    elif runmode == "stress":
        run_stress()
    elif runmode == "file":
        if len(args) < 2:
            print("Error: Expected input filepath")
            print(args_description)
            return
        input_filepath = args[1]
        run_file(input_filepath, order)
    else:
        print(f"Error: Invalid run mode [{runmode}]")
        print(args_description)
        return


def main():
    parse_args_and_start(sys.argv[1:])
