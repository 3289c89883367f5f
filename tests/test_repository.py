from unittest.mock import MagicMock

from firebase_admin import firestore

from conftest import NOW, minutes
from taskmaster.reminders.models import NotificationDraft, TaskRecord
from taskmaster.reminders.repository import FirestoreReminderRepository
from taskmaster.reminders.window import compute_window


def _snapshot(doc_id, path, data):
    snap = MagicMock()
    snap.id = doc_id
    snap.reference.path = path
    snap.to_dict.return_value = data
    return snap


def test_due_tasks_use_one_collection_group_range_query():
    db = MagicMock()
    query = db.collection_group.return_value.where.return_value.where.return_value
    query.stream.return_value = [
        _snapshot(
            "t1",
            "users/u1/boards/b1/tasks/t1",
            {"title": "Write", "status": "Pending", "userEmail": "ana@example.com", "dueDate": minutes(10)},
        )
    ]
    window = compute_window(NOW, 60)

    tasks = FirestoreReminderRepository(db).get_due_tasks(window)

    db.collection_group.assert_called_once_with("tasks")
    first = db.collection_group.return_value.where.call_args.kwargs["filter"]
    second = db.collection_group.return_value.where.return_value.where.call_args.kwargs["filter"]
    assert (first.field_path, first.op_string, first.value) == ("dueDate", ">", window.now)
    assert (second.field_path, second.op_string, second.value) == ("dueDate", "<=", window.end)
    assert tasks == [
        TaskRecord(
            id="t1",
            path="users/u1/boards/b1/tasks/t1",
            title="Write",
            status="Pending",
            user_email="ana@example.com",
            email_reminder_sent=False,
            due_raw=minutes(10),
        )
    ]
    assert tasks[0].user_id == "u1"


def test_mark_task_reminded_updates_only_the_flag():
    db = MagicMock()
    task = TaskRecord(id="t1", path="users/u1/boards/b1/tasks/t1")

    FirestoreReminderRepository(db).mark_task_reminded(task)

    db.document.assert_called_once_with("users/u1/boards/b1/tasks/t1")
    db.document.return_value.update.assert_called_once_with({"emailReminderSent": True})


def test_create_notification_writes_under_user():
    db = MagicMock()

    FirestoreReminderRepository(db).create_notification(
        "u1", NotificationDraft(title="Task Due Soon", message="hi", type="warning")
    )

    db.collection.assert_called_once_with("users")
    db.collection.return_value.document.assert_called_once_with("u1")
    notifications = db.collection.return_value.document.return_value.collection
    notifications.assert_called_once_with("notifications")
    notifications.return_value.add.assert_called_once_with(
        {
            "title": "Task Due Soon",
            "message": "hi",
            "type": "warning",
            "read": False,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
    )


def test_due_plans_filter_unsent():
    db = MagicMock()
    q = db.collection_group.return_value.where.return_value.where.return_value.where.return_value
    q.stream.return_value = [
        _snapshot("p1", "users/u9/plannerEvents/p1", {"title": "Standup", "start": minutes(30), "upcomingEmailSent": False})
    ]

    plans = FirestoreReminderRepository(db).get_due_plans(compute_window(NOW, 60 * 24))

    db.collection_group.assert_called_once_with("plannerEvents")
    third = db.collection_group.return_value.where.return_value.where.return_value.where.call_args.kwargs["filter"]
    assert (third.field_path, third.op_string, third.value) == ("upcomingEmailSent", "==", False)
    assert plans[0].user_id == "u9"
    assert plans[0].start == minutes(30)


def test_get_user_email():
    db = MagicMock()
    snap = db.collection.return_value.document.return_value.get.return_value
    snap.exists = True
    snap.to_dict.return_value = {"email": "ana@example.com"}

    assert FirestoreReminderRepository(db).get_user_email("u1") == "ana@example.com"

    snap.exists = False
    assert FirestoreReminderRepository(db).get_user_email("u1") is None
