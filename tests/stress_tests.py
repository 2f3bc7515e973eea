from .context import BPlusTreeSession, run_add_del_stress_suite


def test_add_del_stress_suite():
    session = BPlusTreeSession()
    run_add_del_stress_suite(session, orders=[3, 4, 7], num_perms=2)
    assert session.order == 7
