from time import time

def get_current_timestamp() -> int:
    '''Get the current timestamp in milliseconds.'''
    return int(time() * 1000)  # milliseconds

class FileStamp:
    '''
        Millisecond stamps for output filenames. Never returns the same value
        twice in one process: a stamp that would repeat or go backwards is
        bumped to last + 1.
    '''
    def __init__(self, clock=get_current_timestamp):
        self._clock = clock
        self._last = 0

    def next(self) -> int:
        # Single event loop, no awaits in here, so no lock needed
        stamp = max(self._clock(), self._last + 1)
        self._last = stamp
        return stamp
