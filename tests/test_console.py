import io

import pytest

from console import Console


def make_console(lines="", secret="pw"):
    def reader(prompt, stream=None):
        if isinstance(secret, BaseException):
            raise secret
        stream.write(prompt)
        return secret

    return Console(stdin=io.StringIO(lines), stdout=io.StringIO(), secret_reader=reader)


class TestConsole:
    def test_ask_reads_one_line(self):
        with make_console("pacientes.xlsx\nformulas.xlsx\n") as console:
            assert console.ask("Patients: ") == "pacientes.xlsx"
            assert console.ask("Formulas: ") == "formulas.xlsx"

    def test_ask_at_end_of_input(self):
        with make_console("") as console:
            with pytest.raises(EOFError):
                console.ask("Patients: ")

    def test_secret_does_not_echo(self):
        console = make_console(secret="s3cret")
        with console:
            assert console.ask_secret("Password: ") == "s3cret"
        assert "s3cret" not in console._stdout.getvalue()

    def test_interrupt_during_secret_exits(self):
        console = make_console(secret=KeyboardInterrupt())
        console.open()
        with pytest.raises(SystemExit) as exc_info:
            console.ask_secret("Password: ")
        assert exc_info.value.code == 130
        assert console.closed

    def test_closed_exactly_once(self):
        console = make_console("x\n")
        with console:
            pass
        assert console.closed
        console.close()
        with pytest.raises(RuntimeError):
            console.ask("again: ")
        with pytest.raises(RuntimeError, match="already closed"):
            console.open()
