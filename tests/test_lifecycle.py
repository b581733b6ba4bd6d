from civicops.core.lifecycle import ReportLifecycle, ReportStatus, HistoryEvent
from civicops.models.report import Report, Comment, StatusHistory

def test_change_status_records_history(db_session, make_report, actor):
    report = make_report(status=ReportStatus.UNDER_REVIEW)

    lifecycle = ReportLifecycle(db_session)
    entry = lifecycle.change_status(report, ReportStatus.IN_PROGRESS, actor=actor, notes="Crew dispatched")
    db_session.commit()

    assert report.status == ReportStatus.IN_PROGRESS
    assert report.resolved_at is None

    history = db_session.query(StatusHistory).filter_by(report_id=report.id).all()
    assert len(history) == 1
    assert history[0].id == entry.id
    assert history[0].old_status == ReportStatus.UNDER_REVIEW
    assert history[0].new_status == ReportStatus.IN_PROGRESS
    assert history[0].changed_by == "admin-1"
    assert history[0].changed_by_user == "admin@city.gov"
    assert history[0].event_type == HistoryEvent.STATUS_CHANGE
    assert history[0].automatic is False

def test_change_status_sets_resolved_at_once(db_session, make_report, actor):
    report = make_report(status=ReportStatus.IN_PROGRESS)

    lifecycle = ReportLifecycle(db_session)
    lifecycle.change_status(report, ReportStatus.RESOLVED, actor=actor)
    db_session.commit()
    first_resolution = report.resolved_at
    assert first_resolution is not None

    lifecycle.change_status(report, ReportStatus.CLOSED, actor=actor)
    db_session.commit()
    assert report.resolved_at == first_resolution

def test_change_status_does_not_commit(db_session, make_report, actor):
    report = make_report(status=ReportStatus.SUBMITTED)
    report_id = report.id

    ReportLifecycle(db_session).change_status(report, ReportStatus.REJECTED, actor=actor)
    db_session.rollback()

    assert db_session.get(Report, report_id).status == ReportStatus.SUBMITTED
    assert db_session.query(StatusHistory).count() == 0

def test_assign_keeps_status_and_writes_comment(db_session, make_report, actor):
    report = make_report(status=ReportStatus.UNDER_REVIEW)

    lifecycle = ReportLifecycle(db_session)
    entry = lifecycle.assign(report, "emp-1", "Dana Fixer", actor=actor, notes="Bring cones")
    db_session.commit()

    assert report.assigned_to == "Dana Fixer"
    assert report.assigned_to_id == "emp-1"
    assert report.assigned_at is not None
    assert report.status == ReportStatus.UNDER_REVIEW

    assert entry.event_type == HistoryEvent.ASSIGNMENT
    assert entry.old_status == entry.new_status == ReportStatus.UNDER_REVIEW
    assert entry.notes == "Assigned to Dana Fixer: Bring cones"

    comment = db_session.query(Comment).filter_by(report_id=report.id).one()
    assert comment.content == "📋 Report assigned to Dana Fixer\n\n**Notes:** Bring cones"
    assert comment.user_type == "ADMIN"

def test_unassign_clears_assignment(db_session, make_report, actor):
    report = make_report(assigned_to="Dana Fixer", assigned_to_id="emp-1")

    entry = ReportLifecycle(db_session).unassign(report, actor=actor)
    db_session.commit()

    assert report.assigned_to is None
    assert report.assigned_to_id is None
    assert report.assigned_at is None
    assert entry.event_type == HistoryEvent.UNASSIGNMENT
    assert entry.notes == "Report unassigned"
    comment = db_session.query(Comment).filter_by(report_id=report.id).one()
    assert comment.content == "📋 Report unassigned from previous employee"
