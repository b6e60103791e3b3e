import pytest

from idlecore.core.loop import LoopConfig, TickLoop


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_loop_config_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        LoopConfig(tick_interval=0)


def test_first_step_has_zero_delta():
    clock = FakeClock()
    loop = TickLoop(clock=clock)
    deltas = []
    loop.add(deltas.append)

    assert loop.step() == 0.0
    assert deltas == [0.0]


def test_step_passes_wall_clock_delta():
    clock = FakeClock()
    loop = TickLoop(clock=clock)
    deltas = []
    loop.add(deltas.append)

    loop.step()
    clock.advance(0.25)
    loop.step()
    clock.advance(3600)
    loop.step()

    assert deltas == [0.0, pytest.approx(0.25), pytest.approx(3600)]
    assert loop.ticks == 3


def test_max_delta_clamps_when_configured():
    clock = FakeClock()
    loop = TickLoop(LoopConfig(max_delta=1.0), clock=clock)

    loop.step()
    clock.advance(5)

    assert loop.step() == 1.0


def test_updatables_run_in_registration_order():
    loop = TickLoop(clock=FakeClock())
    order = []
    first = lambda dt: order.append("first")
    second = lambda dt: order.append("second")
    loop.add(first)
    loop.add(second)

    loop.step()
    loop.remove(first)
    loop.step()

    assert order == ["first", "second", "second"]


def test_run_stops_after_max_ticks_and_sleeps_between():
    clock = FakeClock()
    sleeps = []

    def sleep(seconds):
        sleeps.append(seconds)
        clock.advance(seconds)

    loop = TickLoop(LoopConfig(tick_interval=0.1), clock=clock, sleep=sleep)
    deltas = []
    loop.add(deltas.append)

    loop.run(max_ticks=3)

    assert loop.ticks == 3
    assert not loop.is_running
    assert sleeps == [pytest.approx(0.1), pytest.approx(0.1)]
    assert deltas[1:] == [pytest.approx(0.1), pytest.approx(0.1)]


def test_stop_from_updatable_ends_run():
    loop = TickLoop(clock=FakeClock(), sleep=lambda s: None)

    def stopper(dt):
        if loop.ticks == 1:
            loop.stop()

    loop.add(stopper)
    loop.run()

    assert loop.ticks == 2
