# operational constants
EXIT_SUCCESS = 0

# btree constants
# order (M) is the max number of children of an internal node,
# and the max number of keys in a leaf node
MIN_ORDER = 3
# bounds accepted by the interactive frontend; the engine itself only
# enforces MIN_ORDER
DEFAULT_ORDER = 3
MAX_ORDER = 10

# prompt shown by the repl
PROMPT = "bptree > "

USAGE = '''
Supported commands:
-------------------
insert key 3 into tree; value defaults to the key
> insert 3

insert key 3 with an explicit value
> insert 3 "three"

delete key 3 from tree
> delete 3

find key 3 and print its value and search path
> find 3

Multiple commands can be separated by ';'
> insert 1; insert 2; delete 1

Supported meta-commands:
------------------------
print usage
> .help

quit REPL
> .quit

print btree
> .btree

performs internal consistency checks on tree
> .validate

recreate an empty tree with order n (between 3 and 10)
> .order <n>

remove all keys, keeping the current order
> .clear

print the fill rules for the current order
> .rules

print the step trace of each command
> .trace on|off
'''
