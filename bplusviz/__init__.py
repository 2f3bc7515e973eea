from .btree import Tree, TreeInsertResult, TreeDeleteResult, FindResult, InvalidOrder
from .node import NodeType, LeafNode, InternalNode, NodeStore
from .steps import (
    Step,
    StepType,
    StepRecorder,
    TreeSnapshot,
    Highlights,
    KeyRef,
    SplitInfo,
    MergeInfo,
    BorrowInfo,
)
from .interface import BPlusTreeSession, parse_args_and_start, repl, run_file
