"""Tests for the local draft slot and session loading."""

import json
from datetime import UTC, datetime
from pathlib import Path

from blogdesk.editor.models import Draft, HeadingBlock, ImageBlock, ImageContent, ParagraphBlock
from blogdesk.editor.services import DraftStorage, load_session


def _draft() -> Draft:
    return Draft(
        title="Saved",
        subtitle="Sub",
        blocks=[
            ParagraphBlock(id="p1", content="hello"),
            ImageBlock(id="i1", content=ImageContent(url="/a.png", caption="A")),
        ],
    )


class TestDraftStorage:
    def test_round_trip(self, tmp_path: Path, clock):
        storage = DraftStorage(tmp_path / "draft.json", clock=clock)
        storage.save(_draft())
        loaded = storage.load()
        assert loaded.title == "Saved"
        assert loaded.blocks == _draft().blocks
        assert loaded.last_modified == clock.now

    def test_serialized_shape(self, tmp_path: Path, clock):
        path = tmp_path / "draft.json"
        DraftStorage(path, clock=clock).save(_draft())
        data = json.loads(path.read_text())
        assert set(data) == {"title", "subtitle", "blocks", "lastModified"}
        assert data["blocks"][1] == {
            "id": "i1",
            "kind": "image",
            "content": {"url": "/a.png", "caption": "A"},
        }

    def test_save_overwrites(self, tmp_path: Path):
        storage = DraftStorage(tmp_path / "draft.json")
        storage.save(_draft())
        storage.save(Draft(title="Second", blocks=[ParagraphBlock()]))
        assert storage.load().title == "Second"

    def test_load_missing(self, tmp_path: Path):
        assert DraftStorage(tmp_path / "none.json").load() is None

    def test_load_corrupt_json(self, tmp_path: Path):
        path = tmp_path / "draft.json"
        path.write_text("not valid json {{{", encoding="utf-8")
        assert DraftStorage(path).load() is None

    def test_load_wrong_shape(self, tmp_path: Path):
        path = tmp_path / "draft.json"
        path.write_text(json.dumps({"blocks": [{"kind": "table", "content": 1}]}))
        assert DraftStorage(path).load() is None

    def test_clear(self, tmp_path: Path):
        storage = DraftStorage(tmp_path / "draft.json")
        storage.save(_draft())
        storage.clear()
        assert not storage.exists()
        storage.clear()


class TestLoadSession:
    def test_fresh_session_defaults(self, tmp_path: Path):
        store = load_session(DraftStorage(tmp_path / "draft.json"))
        assert store.title == ""
        assert len(store.blocks) == 1

    def test_restores_stored_draft(self, tmp_path: Path):
        storage = DraftStorage(tmp_path / "draft.json")
        storage.save(_draft())
        store = load_session(storage)
        assert store.title == "Saved"
        assert store.subtitle == "Sub"
        assert [b.id for b in store.blocks] == ["p1", "i1"]

    def test_corrupt_draft_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "draft.json"
        path.write_text('{"title": "half', encoding="utf-8")
        store = load_session(DraftStorage(path))
        assert store.title == ""
        assert store.subtitle == ""
        assert len(store.blocks) == 1
        assert store.blocks[0].kind == "paragraph"
        assert store.blocks[0].content == ""

    def test_stored_draft_without_blocks(self, tmp_path: Path):
        path = tmp_path / "draft.json"
        path.write_text(json.dumps({"title": "T", "subtitle": "", "blocks": []}))
        store = load_session(DraftStorage(path))
        assert store.title == "T"
        assert len(store.blocks) == 1

    def test_edit_mode_ignores_local_draft(self, tmp_path: Path):
        storage = DraftStorage(tmp_path / "draft.json")
        storage.save(_draft())
        existing = Draft(title="Published", blocks=[HeadingBlock(content="Intro")])
        store = load_session(storage, initial=existing)
        assert store.title == "Published"
        assert store.blocks[0].content == "Intro"
        assert storage.load().title == "Saved"

    def test_accepts_legacy_timestamp(self, tmp_path: Path):
        path = tmp_path / "draft.json"
        path.write_text(
            json.dumps(
                {
                    "title": "T",
                    "subtitle": "",
                    "blocks": [{"id": "x", "kind": "paragraph", "content": "c"}],
                    "lastModified": "2026-01-02T03:04:05.000Z",
                }
            )
        )
        draft = DraftStorage(path).load()
        assert draft.last_modified == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)
