import getpass
import logging
import sys

logger = logging.getLogger(__name__)


class Console:
    """Line-input provider for the interactive prompts.

    Opened once at the start of a run and closed exactly once afterwards,
    whether the run succeeded or not.
    """

    def __init__(self, stdin=None, stdout=None, secret_reader=getpass.getpass):
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._secret_reader = secret_reader
        self._open = False
        self.closed = False

    def open(self) -> "Console":
        if self.closed:
            raise RuntimeError("Console already closed")
        self._open = True
        return self

    def close(self):
        if self.closed:
            return
        self._open = False
        self.closed = True
        logger.debug("Console closed")

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _check_open(self):
        if not self._open:
            raise RuntimeError("Console is not open")

    def ask(self, question: str) -> str:
        self._check_open()
        self._stdout.write(question)
        self._stdout.flush()
        line = self._stdin.readline()
        if not line:
            raise EOFError(f"No input for: {question.strip()}")
        return line.rstrip("\r\n").strip()

    def ask_secret(self, question: str) -> str:
        """Read a secret without echoing it. Ctrl+C ends the process right away."""
        self._check_open()
        try:
            return self._secret_reader(question, stream=self._stdout)
        except KeyboardInterrupt:
            self._stdout.write("\n")
            self.close()
            raise SystemExit(130)
