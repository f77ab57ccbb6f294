import threading

from huisserver.handoff import Handoff


def test_begin_and_end_sequence():
    handoff = Handoff()
    assert handoff.begin("a") is True
    assert handoff.current == "a"
    assert handoff.begin("b") is False
    assert handoff.begin("c") is False
    assert handoff.end() is False
    assert handoff.current == "b"
    assert handoff.end() is False
    assert handoff.current == "c"
    assert handoff.end() is True
    assert handoff.begin("d") is True


def test_process_nested_keeps_order():
    handoff = Handoff()
    seen = []

    def handler(item):
        seen.append(item)
        if item == 1:
            assert handoff.process(2, handler) is False
            assert handoff.process(3, handler) is False

    assert handoff.process(1, handler) is True
    assert seen == [1, 2, 3]


def test_concurrent_processing_is_exclusive_and_complete():
    handoff = Handoff()
    seen = []
    active = []
    overlaps = []
    guard = threading.Lock()

    def handler(item):
        with guard:
            active.append(item)
            if len(active) > 1:
                overlaps.append(item)
        seen.append(item)
        with guard:
            active.remove(item)

    threads = [threading.Thread(target=handoff.process, args=(n, handler)) for n in range(100)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert sorted(seen) == list(range(100))
    assert overlaps == []
    assert handoff.begin("again") is True