"""
"Stress" tests, which perform a large number of insert/delete
operations through the command frontend, and validate the tree
after each one.

These should compliment the static unit tests, in that they
cover many deletion orders and tree orders, and thus expose
rebalancing issues that hand-picked cases can't catch.
"""
import logging
import itertools
import math

from .constants import MIN_ORDER, MAX_ORDER


STRESS_TEST_CASES = [
    [1, 2, 3, 4],
    [64, 5, 13, 82],
    [82, 13, 5, 2, 0],
    [10, 20, 30, 40, 50, 60, 70],
    [72, 79, 96, 38, 47],
    [432, 507, 311, 35, 246, 950, 956, 929, 769, 744, 994, 438],
    [159, 597, 520, 189, 822, 725, 504, 397, 218, 134, 516],
    [960, 267, 947, 400, 795, 327, 464, 884, 667, 870, 92],
    [229, 653, 248, 298, 801, 947, 63, 619, 475, 422, 856, 57, 38],
    [114, 464, 55, 450, 729, 646, 95, 649, 59, 412, 546, 340, 667, 274, 477, 363, 333, 897, 772, 508, 182,
     305, 428, 180, 22],
    # fractional and negative keys
    [0.5, -3, 2.25, -7.5, 11, 4, -0.25, 9.75, 1, -12],
    # sequential and reverse-sequential inserts produce the most lopsided trees
    list(range(1, 41)),
    list(range(40, 0, -1)),
    list(range(0, 120, 3)) + list(range(1, 120, 3)),
]


def run_add_del_stress_test(session, insert_keys, del_keys):
    """
    insert all keys, then delete `del_keys` in order; validate the
    tree and its keys after each delete

    :param session: BPlusTreeSession
    :param insert_keys:
    :param del_keys:
    :return:
    """
    session.reset()

    logging.info(f"running test case (order {session.order}): {insert_keys} {del_keys}")

    # insert; duplicates in the input are rejected by the tree
    for key in insert_keys:
        cmd = f"insert {key}"
        logging.info(f"handling [{cmd}]")
        session.handle_input(cmd)
        session.tree.validate()

    expected_keys = set(insert_keys)
    assert session.tree.keys() == sorted(expected_keys), (
        f"expected: {sorted(expected_keys)}; received {session.tree.keys()}"
    )

    # delete and validate
    for key in del_keys:
        cmd = f"delete {key}"
        logging.info(f"handling [{cmd}]")
        resp = session.handle_input(cmd)
        if key in expected_keys:
            assert resp.success, f"cmd {cmd} failed with {resp.error_message}"
            expected_keys.remove(key)

        # ensure tree is valid
        session.tree.validate()

        # check if all keys we expect are there in result
        expected = sorted(expected_keys)
        actual = session.tree.keys()
        assert actual == expected, f"expected: {expected}; received {actual}"

    assert session.tree.root is None or expected_keys, "tree not empty after deleting every key"


def run_add_del_stress_suite(session, orders=range(MIN_ORDER, MAX_ORDER + 1), num_perms=3):
    """
    Perform a large number of add/del operation
    and validate btree correctness.

    :param session: BPlusTreeSession; its tree is replaced for each order
    :param orders: tree orders to run every test case with
    :param num_perms: number of deletion orders per test case
    :return:
    """
    for order in orders:
        session.order = order
        for insert_keys in STRESS_TEST_CASES:
            # there is a large number of perms ~O(n!)
            # and they are generated in a predictable order
            # we'll skip based on fixed step
            total_perms = math.factorial(len(insert_keys))
            step_size = min(total_perms // num_perms, 10)
            perm_iter = itertools.permutations(insert_keys)

            del_perms = [list(reversed(insert_keys))]
            while len(del_perms) < num_perms:
                for _ in range(step_size - 1):
                    # skip n-1 deletes
                    next(perm_iter)
                del_perms.append(list(next(perm_iter)))

            for del_keys in del_perms:
                try:
                    run_add_del_stress_test(session, insert_keys, del_keys)
                except Exception as e:
                    logging.error(
                        f"stress test failed on order {order}: {insert_keys} {del_keys} with {e}"
                    )
                    raise
