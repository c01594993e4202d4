"""
status_helper.py

Timer helpers for transient UI state.

- schedule(): run a callback once after a delay on a daemon timer thread.
- set_status(): show a status message and clear it after a duration.
"""

import threading
from typing import Callable


def schedule(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """
    Runs *callback* once after *delay* seconds on a daemon timer.

    :return: the started timer (call .cancel() to drop it)
    """
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def set_status(setter_func, message: str, duration: int = 5):
    """
    Sets the status message and clears it after a duration.

    :param setter_func: function that sets the text, e.g. label.config
    :param message: the message to show
    :param duration: seconds until the message is cleared (0 = permanent)
    """
    setter_func(text=message)
    if duration > 0:
        def clear():
            setter_func(text="")
        schedule(duration, clear)
