import pytest

from seatmap.editor import ConfigEditor, validate_config
from seatmap.exceptions import InvalidConfigEditError
from seatmap.models import CINEMA_CONFIG


@pytest.fixture
def editor():
    return ConfigEditor(CINEMA_CONFIG)


def test_draft_is_a_copy(editor):
    editor.change_section(0, rows=10)
    assert editor.draft.sections[0].rows == 10
    assert CINEMA_CONFIG.sections[0].rows == 7
    assert CINEMA_CONFIG.total_seats == 139


def test_total_recomputed_on_change(editor):
    editor.change_section(1, rows=8, seats_per_row=5)
    assert editor.draft.total_seats == 139 - 28 + 40


def test_add_section_defaults(editor):
    draft = editor.add_section()
    added = draft.sections[-1]
    assert added.name == "Nueva Sección 5"
    assert (added.rows, added.seats_per_row) == (7, 4)
    assert added.prefix not in {"L", "CL", "CR", "R", "B"}
    assert draft.total_seats == 139 + 28


def test_add_section_with_taken_prefix(editor):
    with pytest.raises(InvalidConfigEditError):
        editor.add_section(name="Palco", prefix="CL")
    with pytest.raises(InvalidConfigEditError):
        editor.add_section(name="Palco", prefix="B")
    assert len(editor.draft.sections) == 4


def test_remove_last_section_is_rejected(editor):
    for _ in range(3):
        editor.remove_section(0)
    assert [s.prefix for s in editor.draft.sections] == ["R"]

    with pytest.raises(InvalidConfigEditError):
        editor.remove_section(0)
    assert [s.prefix for s in editor.draft.sections] == ["R"]
    assert editor.draft.total_seats == 35 + 13


def test_unknown_section_index(editor):
    with pytest.raises(InvalidConfigEditError):
        editor.change_section(9, rows=1)


def test_back_row_and_general_settings(editor):
    editor.set_back_row(seats=15, name="Fondo")
    editor.rename("Cine Norte")
    editor.set_price(9.5)
    assert editor.draft.back_row.seats == 15
    assert editor.draft.back_row.name == "Fondo"
    assert editor.draft.total_seats == 141
    assert (editor.draft.name, editor.draft.price_per_seat) == ("Cine Norte", 9.5)


def test_save_load_and_reset(editor):
    editor.rename("Primera")
    assert editor.save() == 0
    editor.rename("Segunda")
    editor.change_section(0, rows=1)

    loaded = editor.load(0)
    assert loaded.name == "Primera"
    assert loaded.sections[0].rows == 7
    loaded.sections[0].rows = 2
    assert editor.saved[0].sections[0].rows == 7

    assert editor.reset().name == "Cine Principal"

    with pytest.raises(InvalidConfigEditError):
        editor.load(3)


def test_apply_returns_independent_copy(editor):
    editor.change_section(0, rows=3)
    applied = editor.apply()
    editor.change_section(0, rows=4)
    assert applied.sections[0].rows == 3


def test_validate_config_rejects_duplicate_prefixes(editor):
    editor.draft.sections[1].prefix = "L"
    with pytest.raises(InvalidConfigEditError):
        validate_config(editor.draft)
    with pytest.raises(InvalidConfigEditError):
        editor.apply()
