from choro.session.sequencer import AnimationSequencer


def test_plays_every_key_in_order(qtbot):
    seq = AnimationSequencer()
    played = []
    with qtbot.waitSignal(seq.finished, timeout=2000):
        handle = seq.start([2001, 2002, 2003], 10, played.append)
    assert played == [2001, 2002, 2003]
    assert handle.emitted == [2001, 2002, 2003]
    assert handle.done
    assert not seq.is_active


def test_stepped_signal_carries_each_key(qtbot):
    seq = AnimationSequencer()
    seen = []
    seq.stepped.connect(seen.append)
    with qtbot.waitSignal(seq.finished, timeout=2000):
        seq.start(["a", "b"], 5, lambda key: None)
    assert seen == ["a", "b"]


def test_second_start_cancels_first(qtbot):
    seq = AnimationSequencer()
    first_calls, second_calls = [], []
    first = seq.start([1, 2, 3], 10, first_calls.append)
    with qtbot.waitSignal(seq.finished, timeout=2000):
        second = seq.start([7, 8], 10, second_calls.append)
    assert first.cancelled
    assert first_calls == []
    assert second_calls == [7, 8]
    assert not second.cancelled


def test_restart_replays_from_the_first_key(qtbot):
    seq = AnimationSequencer()
    played = []
    with qtbot.waitSignal(seq.finished, timeout=2000):
        seq.start([1, 2, 3], 5, played.append)
    with qtbot.waitSignal(seq.finished, timeout=2000):
        seq.restart()
    assert played == [1, 2, 3, 1, 2, 3]


def test_restart_mid_sequence(qtbot):
    seq = AnimationSequencer()
    played = []

    def on_step(key):
        played.append(key)
        if played == [1, 2]:
            seq.restart()

    with qtbot.waitSignal(seq.finished, timeout=2000):
        seq.start([1, 2, 3], 5, on_step)
    assert played == [1, 2, 1, 2, 3]


def test_cancel_stops_callbacks(qtbot):
    seq = AnimationSequencer()
    played = []
    handle = seq.start([1, 2, 3], 10, played.append)
    seq.cancel()
    qtbot.wait(60)
    assert played == []
    assert handle.cancelled
    assert seq.active_handle is None


def test_callback_on_final_key_may_start_a_new_sequence(qtbot):
    seq = AnimationSequencer()
    follow_up = []

    def on_step(key):
        if key == 2:
            seq.start([9], 5, follow_up.append)

    seq.start([1, 2], 5, on_step)
    qtbot.waitUntil(lambda: follow_up == [9], timeout=2000)
    assert not seq.is_active


def test_empty_keys_do_nothing(qtbot):
    seq = AnimationSequencer()
    assert seq.start([], 10, lambda key: None) is None
    assert seq.restart() is None
    assert not seq.is_active


def test_shutdown_forgets_the_last_sequence(qtbot):
    seq = AnimationSequencer()
    with qtbot.waitSignal(seq.finished, timeout=2000):
        seq.start([1], 5, lambda key: None)
    seq.shutdown()
    assert seq.restart() is None


def test_superseded_run_does_not_report_finished(qtbot):
    seq = AnimationSequencer()
    finished = []
    seq.finished.connect(lambda: finished.append(seq.active_handle))
    follow_up = []

    def on_step(key):
        if key == 2:
            seq.start([9, 10], 5, follow_up.append)

    seq.start([1, 2], 5, on_step)
    qtbot.waitUntil(lambda: follow_up == [9, 10], timeout=2000)
    qtbot.wait(30)
    assert finished == [None]
