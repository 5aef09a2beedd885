"""Tests for the violation log."""

from __future__ import annotations

import datetime
import typing as t

from sqlalchemy.orm import Session

from assessor.model import Attempt, ViolationEvent, ViolationSeverity
from assessor.storage import violation as violation_storage


class TestViolationLog(object):
    def test_find_orders_by_occurrence(
        self,
        db_session: Session,
        test_attempt: Attempt,
        violation_factory: t.Callable[..., ViolationEvent],
    ) -> None:
        now = datetime.datetime.now(datetime.UTC)
        later = violation_factory(test_attempt.attempt_id, "no_face", now)
        earlier = violation_factory(test_attempt.attempt_id, "tab_switch", now - datetime.timedelta(minutes=3))

        with db_session.begin():
            found = violation_storage.find(attempt_id=test_attempt.attempt_id, session=db_session)

        assert [v.violation_id for v in found] == [earlier.violation_id, later.violation_id]

    def test_defaults(self, test_attempt: Attempt, violation_factory: t.Callable[..., ViolationEvent]) -> None:
        violation = violation_factory(test_attempt.attempt_id, "Tab-Switch", details={"count": 2})

        # stored as reported; canonicalized only when scored
        assert violation.violation_type == "Tab-Switch"
        assert violation.severity is ViolationSeverity.Medium
        assert violation.details == {"count": 2}
        assert violation.occurred_at.tzinfo is not None
