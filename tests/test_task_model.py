import pytest

from task_list_manager.core import Task, TaskRecordError, now_iso, tasks_from_json, tasks_to_json


def _record(**overrides):
    data = {"id": 1, "title": "Buy milk", "completed": False, "createdAt": "2026-10-18T09:30:00.123Z"}
    data.update(overrides)
    return data


def test_create_sets_pending_and_timestamp():
    task = Task.create(3, "Write report")
    assert task.id == 3
    assert task.completed is False
    assert task.status == "pending"
    assert task.created_at.endswith("Z")


def test_now_iso_has_millisecond_precision():
    stamp = now_iso()
    # 2026-10-18T09:30:00.123Z
    assert len(stamp) == 24
    assert stamp[19] == "."


def test_mark_completed_only_once():
    task = Task.create(1, "Buy milk")
    assert task.mark_completed() is True
    assert task.status == "done"
    assert task.mark_completed() is False
    assert task.completed is True


def test_to_dict_key_order():
    task = Task.from_dict(_record())
    assert list(task.to_dict().keys()) == ["id", "title", "completed", "createdAt"]


class TestStrictDecoding:
    def test_accepts_valid_record(self):
        task = Task.from_dict(_record(completed=True))
        assert task.completed is True
        assert task.created_at == "2026-10-18T09:30:00.123Z"

    def test_rejects_non_object(self):
        with pytest.raises(TaskRecordError):
            Task.from_dict(["id", 1])

    def test_rejects_missing_key(self):
        data = _record()
        del data["createdAt"]
        with pytest.raises(TaskRecordError, match="missing"):
            Task.from_dict(data)

    def test_rejects_extra_key(self):
        with pytest.raises(TaskRecordError, match="unexpected"):
            Task.from_dict(_record(priority="high"))

    @pytest.mark.parametrize("bad_id", [0, -1, "1", 1.5, True, None])
    def test_rejects_bad_id(self, bad_id):
        with pytest.raises(TaskRecordError, match="id"):
            Task.from_dict(_record(id=bad_id))

    @pytest.mark.parametrize("bad_title", ["", "   ", 42, None])
    def test_rejects_bad_title(self, bad_title):
        with pytest.raises(TaskRecordError, match="title"):
            Task.from_dict(_record(title=bad_title))

    def test_rejects_non_bool_completed(self):
        with pytest.raises(TaskRecordError, match="completed"):
            Task.from_dict(_record(completed="false"))

    @pytest.mark.parametrize(
        "stamp",
        ["2026-10-18T09:30:00.123Z", "2026-10-18T09:30:00.12Z", "2026-10-18T09:30:00Z", "2026-10-18T11:30:00+02:00"],
    )
    def test_accepts_extended_timestamps(self, stamp):
        assert Task.from_dict(_record(createdAt=stamp)).created_at == stamp

    @pytest.mark.parametrize(
        "stamp",
        [
            "yesterday",
            "",
            " 2026-10-18T09:30:00.123Z",
            "20261018T093000Z",
            "2026-10-18T09:30:00",
            "2026-13-18T09:30:00.123Z",
            "2026-02-30T09:30:00.123Z",
        ],
    )
    def test_rejects_bad_timestamp(self, stamp):
        with pytest.raises(TaskRecordError, match="createdAt"):
            Task.from_dict(_record(createdAt=stamp))

    def test_now_iso_passes_validation(self):
        assert Task.from_dict(_record(createdAt=now_iso())).created_at.endswith("Z")

    def test_collection_must_be_array(self):
        with pytest.raises(TaskRecordError, match="array"):
            tasks_from_json({"tasks": []})

    def test_collection_rejects_duplicate_ids(self):
        with pytest.raises(TaskRecordError, match="duplicate"):
            tasks_from_json([_record(), _record(title="Other")])

    def test_collection_preserves_order(self):
        data = [_record(id=5, title="five"), _record(id=2, title="two")]
        tasks = tasks_from_json(data)
        assert [t.id for t in tasks] == [5, 2]
        assert tasks_to_json(tasks) == data
