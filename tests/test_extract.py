"""Tests for extract.py – card + tooltip → AppointmentRecord."""
from datetime import datetime, timezone

from conftest import make_card, make_overlay
from lizto_sync.extract import AppointmentRecord, extract_appointment
from lizto_sync.text_normalize import Status


class TestExtractAppointment:
    def test_full_record(self):
        rec = extract_appointment(
            make_card(client="  Laura \n Gómez "), make_overlay(),
            site="Marquetalia", owner="Leslie gutierrez",
        )
        assert rec.client == "Laura Gómez"
        assert rec.service == "Manicure tradicional"
        assert rec.specialist == "Ana María"
        assert rec.time_label == "8:45 am"
        assert rec.date_label == "Miércoles 19 de Noviembre del 2025"
        assert rec.status is Status.NEW_BOOKING
        assert rec.phone == 3001234567
        assert rec.site == "Marquetalia"
        assert rec.owner == "Leslie gutierrez"
        assert rec.color_tag == "rgb(76, 175, 80)"
        assert (rec.scheduled_at.hour, rec.scheduled_at.minute) == (8, 45)

    def test_empty_client_is_skipped(self):
        assert extract_appointment(make_card(client="  \n "), make_overlay()) is None

    def test_no_overlay(self):
        rec = extract_appointment(make_card(), ())
        assert rec.time_label == "8:45 am"
        assert rec.scheduled_at is None
        assert rec.date_label is None
        assert rec.phone is None
        assert rec.status is Status.NEW_BOOKING

    def test_overlay_time_preferred_over_card(self):
        rec = extract_appointment(
            make_card(time_range="8:45 am - 9:00 am"),
            make_overlay(time_line="10:15 am - 11:00 am"),
        )
        assert rec.time_label == "10:15 am"
        assert rec.scheduled_at.hour == 10

    def test_card_time_used_when_overlay_has_none(self):
        rec = extract_appointment(
            make_card(time_range="2:30 pm - 3:00 pm"), make_overlay(time_line=None)
        )
        assert rec.time_label == "2:30 pm"
        assert rec.scheduled_at.hour == 14

    def test_dash_line_without_time_is_not_a_time(self):
        overlay = ["Camila Ramírez - 3001234567", "miércoles, 19 de noviembre/2025"]
        rec = extract_appointment(make_card(time_range="8:45 am - 9:00 am"), overlay)
        assert rec.time_label == "8:45 am"
        assert (rec.scheduled_at.hour, rec.scheduled_at.minute) == (8, 45)
        assert rec.phone == 3001234567

    def test_real_time_line_after_dash_name_line(self):
        overlay = ["Samanta - 3001234567", "10:15 am - 11:00 am"]
        rec = extract_appointment(make_card(time_range="8:45 am - 9:00 am"), overlay)
        assert rec.time_label == "10:15 am"

    def test_unparseable_date_keeps_record(self):
        rec = extract_appointment(make_card(), make_overlay(date_line="fecha: 2025/11/19"))
        assert rec is not None
        assert rec.scheduled_at is None
        assert rec.date_label is None
        assert rec.time_label == "8:45 am"

    def test_status_from_overlay(self):
        rec = extract_appointment(make_card(), make_overlay(status="Cita Pagada"))
        assert rec.status is Status.PAID
        rec = extract_appointment(make_card(), make_overlay(status="Cita Cancelada"))
        assert rec.status is Status.CANCELLED

    def test_phone_validation(self):
        assert extract_appointment(make_card(), make_overlay(phone="3001234567")).phone == 3001234567
        assert extract_appointment(make_card(), make_overlay(phone="12345")).phone is None
        assert extract_appointment(make_card(), make_overlay(phone="4001234567")).phone is None

    def test_now_overrides_sync_time(self):
        now = datetime(2025, 11, 19, 13, 0, tzinfo=timezone.utc)
        assert extract_appointment(make_card(), make_overlay(), now=now).last_synced_at == now


class TestAppointmentRecord:
    def test_business_key(self):
        rec = extract_appointment(make_card(), make_overlay())
        assert rec.business_key() == {
            "Cliente": "Laura Gómez",
            "Servicio": "Manicure tradicional",
            "Hora": "8:45 am",
            "Fecha": "Miércoles 19 de Noviembre del 2025",
        }

    def test_document(self):
        rec = AppointmentRecord(client="Laura Gómez", status=Status.PAID, phone=3001234567)
        doc = rec.to_document()
        assert doc["Cliente"] == "Laura Gómez"
        assert doc["Estado"] == "Cita pagada"
        assert doc["Celular"] == 3001234567
        assert doc["appointmentAt"] is None
        assert set(doc) == {
            "Cliente", "Celular", "Servicio", "Especialista", "Hora", "Fecha",
            "Estado", "appointmentAt", "Sede", "Usuario", "bgColor", "lastSyncedAt",
        }
        assert doc["lastSyncedAt"].tzinfo is not None
