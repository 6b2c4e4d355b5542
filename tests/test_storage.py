import json

from seatmap.cinema import toggle_seat
from seatmap.storage import BlobStore, CinemaState, FileBlobStore, MemoryBlobStore, dump_state, persist, restore_state


class BrokenStore(BlobStore):
    def load(self):
        return None

    def save(self, blob):
        return False


def test_default_state():
    state = restore_state(None)
    assert state.config.total_seats == 139
    assert len(state.book) == 1


def test_dump_and_restore(small_config, reservation):
    state = CinemaState(config=small_config)
    state.book.add(small_config, title="Alien", schedule="Sábado 19:00", price=800)
    state.book.replace_seats(2, toggle_seat(state.book.get(2).seats, "Z1-2", reservation))

    restored = restore_state(dump_state(state))

    assert restored.config == small_config
    assert [s.title for s in restored.book.all()] == ["El Exorcista", "Alien"]
    assert restored.book.get(2).seats == state.book.get(2).seats
    assert restored.book.get(2).seats["Z1-2"].reservation == reservation


def test_snapshot_is_readable_json():
    data = json.loads(dump_state(CinemaState()))
    assert data["config"]["totalSeats"] == 139
    assert data["showings"][0]["seats"]["L1-1"] == {"id": "L1-1", "selected": False}


def test_corrupt_blob_gives_default_state():
    assert len(restore_state("{not json").book.get(1).seats) == 139
    assert restore_state('{"config": 1}').config.name == "Cine Principal"


def test_blob_without_showings_gets_default_showing(small_config):
    blob = json.dumps({"config": json.loads(dump_state(CinemaState(config=small_config)))["config"], "showings": []})
    state = restore_state(blob)
    assert len(state.book.get(1).seats) == small_config.total_seats


def test_memory_store_round_trip():
    store = MemoryBlobStore()
    assert store.load() is None
    blob = persist(CinemaState(), store)
    assert store.load() == blob


def test_file_store(tmp_path):
    store = FileBlobStore(str(tmp_path / "nested" / "state.json"))
    assert store.load() is None
    assert store.save('{"a": "ñ"}')
    assert store.load() == '{"a": "ñ"}'


def test_failed_save_keeps_state():
    state = CinemaState()
    state.book.replace_seats(1, toggle_seat(state.book.get(1).seats, "L1-1"))
    blob = persist(state, BrokenStore())
    assert blob is not None
    assert state.book.get(1).seats["L1-1"].selected


def test_seat_under_foreign_key_gives_default_state():
    data = json.loads(dump_state(CinemaState()))
    data["showings"][0]["seats"]["L1-1"]["id"] = "ZZ"
    data["showings"][0]["title"] = "Alien"

    state = restore_state(json.dumps(data))

    assert state.book.get(1).title == "El Exorcista"
    assert state.book.get(1).seats["L1-1"].id == "L1-1"


def test_duplicate_showing_ids_keep_first():
    state = CinemaState()
    state.book.add(state.config, title="Alien")
    data = json.loads(dump_state(state))
    data["showings"][1]["id"] = 1

    restored = restore_state(json.dumps(data))

    assert len(restored.book) == 1
    assert restored.book.get(1).title == "El Exorcista"


def test_applying_layout_resets_draft(small_config):
    state = CinemaState()
    state.editor.rename("Borrador")
    state.editor.save()

    state.apply_config(small_config)

    assert state.editor.draft == small_config
    assert state.editor.draft is not small_config
    assert [c.name for c in state.editor.saved] == ["Borrador"]
