import logging

from loot_api.lootlog.classify import match_shape
from loot_api.lootlog.selftest import DEFAULT_SELFTEST_LINES, run_classifier_selftest


def test_selftest_passes_and_logs(caplog):
    caplog.set_level(logging.INFO, logger="lootview")
    run_classifier_selftest()
    assert f"Classifier self-test passed ({len(DEFAULT_SELFTEST_LINES)} lines)." in caplog.text


def test_selftest_lines_are_recognized():
    # all but the trailing chat message map to a shape
    shapes = [match_shape(line) for line in DEFAULT_SELFTEST_LINES]
    assert all(s is not None for s in shapes[:-1])
    assert shapes[-1] is None
