"""
Notification tests

Daily digest, upcoming-meeting alerts, the worker tasks, job dispatch and
the email layer.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone

import httpx
import pytest
from fastapi import BackgroundTasks

from premier_realty import email_service, jobs
from premier_realty.database import SessionLocal
from premier_realty.email_templates import daily_digest_template, new_reservation_admin_template
from premier_realty.models import Reservation
from premier_realty.services import google_calendar_service, notification_service, reminder_service
from premier_realty.services.booking_service import BUSINESS_TZ, business_now
from premier_realty.worker import TASKS, WorkerSettings

CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}


def add_reservation(db, day, time, status="pending", email="jane@example.com", **extra):
    reservation = Reservation(name="Jane Doe", email=email, date=day, time=time, status=status, **extra)
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    return reservation


class TestDailyDigest:
    def test_no_appointments(self, db_session, sent_emails):
        result = asyncio.run(reminder_service.send_daily_reminder(db_session, today=date(2025, 3, 3)))

        assert result == {"message": "No appointments today", "sent": False}
        assert sent_emails == []

    def test_lists_active_appointments_by_time(self, db_session, sent_emails):
        day = date(2025, 3, 3)
        add_reservation(db_session, day, "15:00")
        add_reservation(db_session, day, "09:00", status="confirmed", email="a@example.com")
        add_reservation(db_session, day, "11:00", status="cancelled", email="b@example.com")
        add_reservation(db_session, day + timedelta(days=1), "09:00", email="c@example.com")

        result = asyncio.run(reminder_service.send_daily_reminder(db_session, today=day))

        assert result == {"message": "Reminder sent for 2 appointment(s)", "sent": True, "count": 2}
        [email] = sent_emails
        assert email["type"] == "send_daily_digest"
        date_label, appointments = email["args"]
        assert date_label == "Monday, March 3, 2025"
        assert [a["time"] for a in appointments] == ["09:00", "15:00"]

    def test_cron_endpoint_requires_secret(self, client):
        assert client.get("/cron/daily-reminder").status_code == 401
        wrong = client.get("/cron/daily-reminder", headers={"Authorization": "Bearer nope"})
        assert wrong.status_code == 401
        assert wrong.json()["detail"] == "Unauthorized"

    def test_cron_endpoint_uses_business_today(self, client, db_session, sent_emails):
        add_reservation(db_session, business_now().date(), "20:00")

        response = client.get("/cron/daily-reminder", headers=CRON_HEADERS)

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert len(sent_emails) == 1

    def test_cron_endpoint_reports_failures(self, client, db_session, monkeypatch):
        add_reservation(db_session, business_now().date(), "20:00")

        async def broken(*args, **kwargs):
            raise email_service.EmailNotConfigured("ADMIN_EMAIL not configured")

        monkeypatch.setattr(email_service, "send_daily_digest", broken)
        response = client.get("/cron/daily-reminder", headers=CRON_HEADERS)
        assert response.status_code == 500

    def test_scheduled_at_eight_istanbul(self):
        [job] = WorkerSettings.cron_jobs
        assert job.hour == 5
        assert job.minute == 0


class TestUpcomingAlerts:
    NOW = datetime(2025, 3, 3, 9, 20, tzinfo=BUSINESS_TZ)

    def test_meeting_within_the_hour(self, db_session):
        reservation = add_reservation(db_session, self.NOW.date(), "10:00", status="confirmed")

        alerts = reminder_service.collect_upcoming_alerts(db_session, now=self.NOW)

        assert alerts == [
            {
                "type": "SHOW_NOTIFICATION",
                "title": "Upcoming meeting in 40 min",
                "body": "Jane Doe at 10:00",
                "tag": f"reservation-{reservation.id}",
                "data": {"reservationId": reservation.id},
            }
        ]
        db_session.refresh(reservation)
        assert reservation.notified_at is not None

    def test_alert_is_sent_once(self, db_session):
        add_reservation(db_session, self.NOW.date(), "10:00")

        assert len(reminder_service.collect_upcoming_alerts(db_session, now=self.NOW)) == 1
        assert reminder_service.collect_upcoming_alerts(db_session, now=self.NOW) == []

    def test_skips_started_far_and_cancelled(self, db_session):
        add_reservation(db_session, self.NOW.date(), "09:00")
        add_reservation(db_session, self.NOW.date(), "11:00", email="b@example.com")
        add_reservation(db_session, self.NOW.date(), "10:00", status="cancelled", email="c@example.com")

        assert reminder_service.collect_upcoming_alerts(db_session, now=self.NOW) == []

    def test_admin_endpoint(self, client, db_session, admin_headers):
        start = (business_now() + timedelta(hours=1)).replace(minute=0, second=0, microsecond=0)
        add_reservation(db_session, start.date(), start.strftime("%H:%M"))

        response = client.get("/admin/reservations/upcoming-alerts", headers=admin_headers)

        assert response.status_code == 200
        [alert] = response.json()
        assert alert["type"] == "SHOW_NOTIFICATION"
        assert client.get("/admin/reservations/upcoming-alerts", headers=admin_headers).json() == []


class TestJobs:
    def test_dispatch_queues_when_redis_is_up(self, monkeypatch):
        async def enqueue_job(task_name, *args):
            return "job-123"

        monkeypatch.setattr(jobs, "enqueue_job", enqueue_job)
        background_tasks = BackgroundTasks()

        mode = asyncio.run(jobs.dispatch_job(background_tasks, "daily_reminder_task"))

        assert mode == "queued"
        assert background_tasks.tasks == []

    def test_dispatch_falls_back_to_background(self, queue_down):
        background_tasks = BackgroundTasks()

        mode = asyncio.run(jobs.dispatch_job(background_tasks, "process_new_reservation_task", 7))

        assert mode == "background"
        [task] = background_tasks.tasks
        assert task.func is TASKS["process_new_reservation_task"]
        assert task.args == ({}, 7)

    def test_worker_registers_every_task(self):
        names = {f.__name__ for f in WorkerSettings.functions}
        assert names == set(TASKS)

    def test_task_for_deleted_reservation_is_harmless(self, db_session, sent_emails):
        result = asyncio.run(TASKS["process_new_reservation_task"]({}, 404))
        assert result == {"calendar_synced": False, "admin_email_sent": False, "customer_email_sent": False}
        assert sent_emails == []

    def test_one_failed_email_does_not_block_the_other(self, db_session, sent_emails, monkeypatch):
        reservation = add_reservation(db_session, date(2025, 3, 3), "10:00")

        async def broken(**kwargs):
            raise RuntimeError("resend down")

        monkeypatch.setattr(email_service, "send_new_reservation_notification", broken)
        result = asyncio.run(TASKS["process_new_reservation_task"]({}, reservation.id))

        assert result["admin_email_sent"] is False
        assert result["customer_email_sent"] is True


class TestCalendarSync:
    def test_concurrent_tasks_create_one_event(self, db_session, connected_calendar, sent_emails, monkeypatch):
        reservation = add_reservation(db_session, date(2025, 3, 3), "10:00", status="confirmed")

        async def slow_google(request):
            await asyncio.sleep(0.01)
            return connected_calendar.handler(request)

        monkeypatch.setattr(
            google_calendar_service,
            "get_http_client",
            lambda: httpx.AsyncClient(transport=httpx.MockTransport(slow_google), timeout=5.0),
        )

        async def booked_and_confirmed():
            first, second = SessionLocal(), SessionLocal()
            try:
                return await asyncio.gather(
                    notification_service.process_new_reservation(first, reservation.id),
                    notification_service.process_reservation_confirmed(second, reservation.id),
                )
            finally:
                first.close()
                second.close()

        created, confirmed = asyncio.run(booked_and_confirmed())

        event_id = reservation.public_id.replace("-", "")
        assert list(connected_calendar.events) == [event_id]
        assert connected_calendar.event_counter == 1
        assert created["calendar_synced"] is True
        assert confirmed["calendar_synced"] is True
        db_session.expire_all()
        stored = db_session.get(Reservation, reservation.id)
        assert stored.calendar_event_id == event_id
        assert stored.meet_link == "https://meet.google.com/abc-defg-hij"
        confirmation = next(e for e in sent_emails if e["type"] == "send_reservation_confirmation")
        assert confirmation["meet_link"] == "https://meet.google.com/abc-defg-hij"

    def test_retried_task_reuses_event(self, db_session, connected_calendar, sent_emails):
        reservation = add_reservation(db_session, date(2025, 3, 3), "10:00")
        asyncio.run(notification_service.process_new_reservation(db_session, reservation.id))
        # Worker retry after the event was made but before it was stored
        reservation.calendar_event_id = None
        db_session.commit()

        result = asyncio.run(notification_service.process_new_reservation(db_session, reservation.id))

        assert result["calendar_synced"] is True
        assert len(connected_calendar.events) == 1
        assert len(connected_calendar.calls_to("/events/", method="GET")) == 1
        db_session.refresh(reservation)
        assert reservation.calendar_event_id == reservation.public_id.replace("-", "")


class TestEmailLayer:
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.setattr(email_service, "RESEND_API_KEY", None)
        with pytest.raises(email_service.EmailNotConfigured):
            asyncio.run(email_service.send_email("a@example.com", "Hi", "<mjml></mjml>"))

    def test_digest_subject_pluralizes(self, monkeypatch):
        sent = []

        async def send_email(**kwargs):
            sent.append(kwargs)
            return {}

        monkeypatch.setattr(email_service, "send_email", send_email)
        one = {"name": "A", "email": "a@example.com", "time": "09:00", "status": "pending"}
        two = {"name": "B", "email": "b@example.com", "time": "10:00", "status": "confirmed"}
        asyncio.run(email_service.send_daily_digest("Monday, March 3, 2025", [one]))
        asyncio.run(email_service.send_daily_digest("Monday, March 3, 2025", [one, two]))

        assert sent[0]["subject"] == "📅 You have 1 appointment today"
        assert sent[1]["subject"] == "📅 You have 2 appointments today"
        assert sent[0]["to"] == "office@premier-realty.test"

    def test_templates_escape_customer_input(self):
        mjml = new_reservation_admin_template(
            "<script>alert(1)</script>", "x@example.com", None, "a & b", "Monday, March 3, 2025", "10:00"
        )
        assert "<script>alert(1)</script>" not in mjml
        assert "&lt;script&gt;" in mjml

    def test_digest_template_lists_meet_links(self):
        mjml = daily_digest_template(
            "Monday, March 3, 2025",
            [{"name": "Jane", "email": "j@example.com", "time": "09:00", "status": "confirmed",
              "meet_link": "https://meet.google.com/abc-defg-hij"}],
        )
        assert "https://meet.google.com/abc-defg-hij" in mjml
        assert "Jane" in mjml


def test_notified_at_is_naive_utc(db_session):
    now = datetime(2025, 3, 3, 9, 20, tzinfo=BUSINESS_TZ)
    reservation = add_reservation(db_session, now.date(), "10:00")

    reminder_service.collect_upcoming_alerts(db_session, now=now)

    db_session.refresh(reservation)
    assert reservation.notified_at == now.astimezone(timezone.utc).replace(tzinfo=None)
