"""ProgressTicker tests."""

from adgenius.ui.progress import LOADING_MESSAGES, ProgressTicker, VideoState, render_progress


def test_start_shows_first_message():
    state = ProgressTicker().start()

    assert state == VideoState(is_generating=True, progress=0, current_message=LOADING_MESSAGES[0])


def test_tick_cycles_messages_and_caps_below_hundred():
    ticker = ProgressTicker()
    ticker.start()

    states = [ticker.tick() for _ in range(40)]

    assert states[0].current_message == LOADING_MESSAGES[1]
    assert states[len(LOADING_MESSAGES) - 1].current_message == LOADING_MESSAGES[0]
    assert [state.progress for state in states[:3]] == [5, 10, 15]
    assert max(state.progress for state in states) == 95
    assert all(state.is_generating for state in states)


def test_complete_then_reset():
    ticker = ProgressTicker()
    ticker.start()
    ticker.tick()

    done = ticker.complete("Selesai")
    assert done.progress == 100
    assert done.current_message == "Selesai"
    assert done.is_generating is True

    idle = ticker.reset()
    assert idle.is_generating is False


def test_render_progress():
    assert render_progress(VideoState()) == ""
    rendered = render_progress(VideoState(is_generating=True, progress=50, current_message="Proses"))
    assert "Proses" in rendered
    assert "50%" in rendered
