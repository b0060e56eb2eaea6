"""
End-to-end runs of collect_inputs + run_prescriptions against CSV sources and a fake browser.
"""

import asyncio
import io

import pytest

import navigation
from console import Console
from errors import AuthenticationFailed, SourceUnreadable
from orchestrator import collect_inputs, run_prescriptions
from tests.fakes import FakePage, browser_factory_for

LOGIN_URL = "https://app.rcta.me/AddPrescription"


@pytest.fixture
def sources(tmp_path):
    patients = tmp_path / "pacientes.csv"
    patients.write_text(
        "Paciente,Formula,Cantidad_comp,Nr_de_Frasco,Receta\n"
        "A,1,2,0,\n"
        "B,1,2,3,A\n"
        "C,5,1,0,\n"
        "D,2,10,0,\n",
        encoding="utf-8",
    )
    formulas = tmp_path / "formulas.csv"
    formulas.write_text("Nº,Detalle\n1,X\n2,Y\n1,ignored duplicate\n", encoding="utf-8")
    return patients, formulas


def make_console(lines="doctor\n"):
    secrets = []

    def reader(prompt, stream=None):
        secrets.append(prompt)
        return "s3cret"

    console = Console(stdin=io.StringIO(lines), stdout=io.StringIO(), secret_reader=reader)
    console.secrets = secrets
    return console


def run(console, page, tmp_path, patients_path=None, formulas_path=None, **kwargs):
    patients, formulas, credentials = collect_inputs(console, patients_path, formulas_path)
    options = dict(
        download=False,
        download_dir=tmp_path / "recetas",
        login_url=LOGIN_URL,
        browser_factory=browser_factory_for(page),
        pacing_ms=0,
        download_settle_ms=0,
    )
    options.update(kwargs)
    return asyncio.run(run_prescriptions(patients, formulas, credentials, **options))


class TestRunPrescriptions:
    def test_full_run(self, sources, tmp_path):
        page = FakePage(never_generated_for={"D"})
        with make_console() as console:
            summary = run(console, page, tmp_path, patients_path=sources[0], formulas_path=sources[1])

        assert (summary.total, summary.succeeded, summary.skipped, summary.failed) == (4, 2, 1, 1)
        assert [c[2] for c in page.called("fill", navigation.SEARCH_INPUT)] == ["A", "B", "C", "D"]
        assert page.typed_texts() == ["X X2", "X X2 3)", "Y X10"]
        assert page.calls[0] == ("browser_open", None, None)
        assert page.calls[-1] == ("browser_close", None, None)

    def test_prompts_for_paths_when_missing(self, sources, tmp_path):
        page = FakePage()
        lines = f"{sources[0]}\n{sources[1]}\ndoctor\n"
        with make_console(lines) as console:
            summary = run(console, page, tmp_path)

        assert summary.total == 4
        assert ("fill", navigation.USERNAME_INPUT, "doctor") in page.calls
        assert console.secrets == ["RCTA password: "]

    def test_download_dir_created_and_reported(self, sources, tmp_path):
        page = FakePage()
        target = tmp_path / "out" / "recetas"
        with make_console() as console:
            summary = run(console, page, tmp_path, patients_path=sources[0], formulas_path=sources[1],
                          download=True, download_dir=target)

        assert target.is_dir()
        assert summary.download_dir == target.resolve()
        assert sorted(p.name for p in target.iterdir()) == ["receta-1.pdf", "receta-2.pdf", "receta-3.pdf"]

    def test_failed_login_processes_no_patient(self, sources, tmp_path):
        page = FakePage(post_login_url=LOGIN_URL)
        with make_console() as console:
            with pytest.raises(AuthenticationFailed):
                run(console, page, tmp_path, patients_path=sources[0], formulas_path=sources[1])

        assert page.called("click", navigation.SEARCH_PATIENT_BUTTON) == []
        assert page.calls[-1] == ("browser_close", None, None)

    def test_unreadable_source_aborts_before_login(self, tmp_path):
        page = FakePage()
        with make_console() as console:
            with pytest.raises(SourceUnreadable):
                run(console, page, tmp_path, patients_path=tmp_path / "missing.xlsx",
                    formulas_path=tmp_path / "missing.xlsx")

        assert page.calls == []
        assert console.secrets == []
