from typing import Optional, TextIO


class DebugSink:
    """Verbosity-levelled trace output.

    With `debug_level` above zero, messages go to `debug_file` (opened
    on construction and truncated). With level zero nothing is written.
    Level 1 traces formulas and results, level 2 operator reductions and
    calls, level 3 every token and node.
    """
    def __init__(self, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt', stream: Optional[TextIO] = None):
        self.debug_level = debug_level
        self.debug_fp: Optional[TextIO] = None
        self._owns_fp = False
        if debug_level > 0:
            if stream is not None:
                self.debug_fp = stream
            elif debug_file is not None:
                self.debug_fp = open(debug_file, 'w', encoding='utf-8')
                self._owns_fp = True

    def enabled(self, level: int) -> bool:
        return self.debug_level >= level

    def debug(self, level: int, msg: str):
        if self.debug_level >= level:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp and self._owns_fp:
            self.debug_fp.close()
        self.debug_fp = None

    def __enter__(self) -> 'DebugSink':
        return self

    def __exit__(self, *exc_info):
        self.close()


NULL_SINK = DebugSink(0)
