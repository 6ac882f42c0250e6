import datetime as dt
from types import SimpleNamespace

from quoteflow.models.audit_log import AuditLog
from quoteflow.services.audit_service import AuditAction, AuditService, AuditTrail


def test_append_adds_entry_without_touching_prior_entries():
    first = {"timestamp": "2024-03-01T10:00:00+00:00", "actor_id": "a", "change_descriptions": ["x"]}
    prior = [first]
    entity = SimpleNamespace(history=prior)

    at = dt.datetime(2024, 3, 2, 9, 30, tzinfo=dt.timezone.utc)
    entry = AuditTrail().append(entity, actor_id="admin-1", descriptions=["Note changed"], at=at)

    assert entry.change_descriptions == ("Note changed",)
    assert entity.history is not prior
    assert prior == [first]
    assert entity.history[0] == first
    assert entity.history[1]["actor_id"] == "admin-1"
    assert entity.history[1]["change_descriptions"] == ["Note changed"]


def test_append_with_no_descriptions_is_a_noop():
    entity = SimpleNamespace(history=[])
    assert AuditTrail().append(entity, actor_id="admin-1", descriptions=[]) is None
    assert entity.history == []


def test_write_joins_caller_transaction(db):
    svc = AuditService()
    svc.write(
        db,
        action=AuditAction.CREATE_QUOTATION,
        actor_id="admin-1",
        entity_type="quotation",
        entity_id="QT00001",
        request_id="rid-1",
        details={"quotationNumber": "QT00001"},
    )
    db.rollback()

    rows, total = svc.list_logs(db)
    assert total == 0
    assert rows == []


def test_list_logs_newest_first(db):
    base = dt.datetime(2024, 3, 1, tzinfo=dt.timezone.utc)
    for i, action in enumerate([AuditAction.CREATE_QUOTATION, AuditAction.UPDATE_QUOTATION, AuditAction.DELETE_QUOTATION]):
        db.add(
            AuditLog(
                action=action,
                actor_id="admin-1",
                entity_type="quotation",
                entity_id="QT00001",
                details_json={},
                created_at=base + dt.timedelta(minutes=i),
            )
        )
    db.commit()

    rows, total = AuditService().list_logs(db, page=1, limit=2)
    assert total == 3
    assert [r.action for r in rows] == [AuditAction.DELETE_QUOTATION, AuditAction.UPDATE_QUOTATION]

    rows, _ = AuditService().list_logs(db, page=2, limit=2)
    assert [r.action for r in rows] == [AuditAction.CREATE_QUOTATION]
