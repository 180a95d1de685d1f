import queue
import threading

from fzfcore.eventbox import EventBox

EVT_READ_NEW, EVT_READ_FIN, EVT_SEARCH_NEW, EVT_SEARCH_PROGRESS, EVT_SEARCH_FIN = range(5)


def test_event_box():
    eb = EventBox()
    to_main = queue.Queue()
    to_worker = queue.Queue()

    def worker():
        eb.set(EVT_READ_NEW, 10)
        to_main.put(True)
        to_worker.get(timeout=5)
        eb.set(EVT_SEARCH_NEW, 10)
        eb.set(EVT_SEARCH_NEW, 15)
        eb.set(EVT_SEARCH_NEW, 20)
        eb.set(EVT_SEARCH_PROGRESS, 30)
        to_main.put(True)
        to_worker.get(timeout=5)
        eb.set(EVT_SEARCH_FIN, 40)
        to_main.put(True)
        to_worker.get(timeout=5)

    thread = threading.Thread(target=worker, daemon=True)
    thread.start()

    count = 0
    total = 0
    looping = True
    seen_keys = []
    while looping:
        to_main.get(timeout=5)

        def consume(events):
            nonlocal total, looping
            seen_keys.append(sorted(events.keys()))
            for value in events.values():
                if isinstance(value, int):
                    total += value
                    looping = total < 100
            events.clear()

        eb.wait(consume)
        to_worker.put(True)
        count += 1

    thread.join(timeout=5)
    assert count == 3
    assert total == 100
    assert seen_keys == [
        [EVT_READ_NEW],
        [EVT_SEARCH_NEW, EVT_SEARCH_PROGRESS],
        [EVT_SEARCH_FIN],
    ]
    assert eb.peek(EVT_SEARCH_FIN) is False
    assert eb.peek(EVT_READ_NEW) is False


def test_peek():
    eb = EventBox()
    assert eb.peek(EVT_READ_FIN) is False
    eb.set(EVT_READ_FIN, None)
    assert eb.peek(EVT_READ_FIN) is True


def test_wait_for_returns_after_event():
    eb = EventBox()
    done = threading.Event()

    def waiter():
        eb.wait_for(EVT_SEARCH_FIN)
        done.set()

    thread = threading.Thread(target=waiter, daemon=True)
    thread.start()
    eb.set(EVT_SEARCH_FIN, 1)
    thread.join(timeout=5)
    assert done.is_set()
    assert eb.peek(EVT_SEARCH_FIN) is True
    assert eb.peek(EVT_READ_NEW) is False


def test_unwatched_event_still_recorded():
    eb = EventBox()
    eb.unwatch(EVT_READ_NEW)
    eb.set(EVT_READ_NEW, 7)
    seen = {}
    eb.wait(lambda events: seen.update(events))
    assert seen == {EVT_READ_NEW: 7}
    eb.watch(EVT_READ_NEW)
    assert eb.peek(EVT_READ_NEW) is True