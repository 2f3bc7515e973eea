"""
Contains symbol classes produced by the parser, and the transformer
that converts lark's parse tree into them
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Union

from lark import Token, Transformer, v_args


@dataclass
class Symbol:
    """
    Symbol is the root of parser hierarchy; symbols compose the parser's
    output, i.e. the AST
    """


@dataclass
class InsertCommand(Symbol):
    key: Union[int, float]
    value: Any


@dataclass
class DeleteCommand(Symbol):
    key: Union[int, float]


@dataclass
class FindCommand(Symbol):
    key: Union[int, float]


@dataclass
class Program(Symbol):
    commands: List[Union[InsertCommand, DeleteCommand, FindCommand]]


def parse_number(token: Token) -> Union[int, float]:
    """
    integral literals become ints, everything else floats
    """
    try:
        return int(token)
    except ValueError:
        return float(token)


class ToAst(Transformer):
    """
    Convert lark parse tree into symbols
    """

    def program(self, commands):
        return Program(list(commands))

    @v_args(inline=True)
    def insert_cmd(self, key, value=None):
        # like the interactive driver, a missing value defaults to the key
        return InsertCommand(key, key if value is None else value)

    @v_args(inline=True)
    def delete_cmd(self, key):
        return DeleteCommand(key)

    @v_args(inline=True)
    def find_cmd(self, key):
        return FindCommand(key)

    @v_args(inline=True)
    def key(self, token):
        return parse_number(token)

    @v_args(inline=True)
    def value(self, token):
        if token.type == "SIGNED_NUMBER":
            return parse_number(token)
        # strip quotes
        return str(token)[1:-1]
