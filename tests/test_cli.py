"""
Tests for the command line interface, run against the mock calendar.
"""

import pendulum
from typer.testing import CliRunner

from physioslots import __version__
from physioslots.adapters.mock_calendar import ConsoleEmailSender, MockCalendarProvider
from physioslots.cli import app as cli_app
from physioslots.cli.app import app
from physioslots.domain.booking import PatientDetails, PaymentIntent, SymptomAssessment
from physioslots.domain.models import AvailableSlot, BusyInterval, TimeInterval

runner = CliRunner()

TZ = "America/New_York"
DETAILS_INPUT = "Jane Doe\njane@example.com\n\n\ny\n"


def _config_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "backend:\n"
        "  url: https://example.supabase.co\n"
        "  anon_key: key\n"
        "email:\n"
        "  donation_template_id: tpl-don\n",
        encoding="utf-8",
    )
    return str(config_path)


class TakenOnceCalendar(MockCalendarProvider):
    """Mock calendar where the first single-slot re-check finds the slot taken."""

    instances = []

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.rechecks = 0
        TakenOnceCalendar.instances.append(self)

    def check_availability(self, range_start, range_end):
        busy = super().check_availability(range_start, range_end)
        if range_start != range_start.start_of("day"):
            self.rechecks += 1
            if self.rechecks == 1:
                busy.append(BusyInterval(start=range_start, end=range_end, summary="Booked elsewhere"))
        return busy


class StubPayments:
    def __init__(self):
        self.cancelled = []

    def create_payment(self, donation):
        return PaymentIntent(
            id="pi_1",
            client_secret="secret_123",
            amount=donation.amount_cents,
            currency=donation.currency.lower(),
            status="requires_payment_method",
        )

    def cancel_subscription(self, subscription_id):
        self.cancelled.append(subscription_id)


class TestAvailabilityCommands:
    """Tests for slots and month."""

    def test_slots_for_day_in_mock_mode(self, tmp_path):
        result = runner.invoke(
            app, ["slots", "2024-01-15", "--mock", "--config", str(tmp_path / "none.yaml")]
        )

        assert result.exit_code == 0, result.output
        assert "January 15, 2024" in result.output
        assert "Morning" in result.output
        assert "Afternoon" in result.output
        assert "10:00 AM" in result.output
        assert "11:00 AM" in result.output
        # 9-10 team meeting and 12-13 lunch on Mondays
        assert "9:00 AM" not in result.output

    def test_weekend_has_no_slots(self, tmp_path):
        result = runner.invoke(
            app, ["slots", "2024-01-13", "--mock", "--config", str(tmp_path / "none.yaml")]
        )

        assert result.exit_code == 0, result.output
        assert "No availability" in result.output

    def test_month_in_mock_mode(self, tmp_path):
        result = runner.invoke(
            app, ["month", "2024-01", "--mock", "--config", str(tmp_path / "none.yaml")]
        )

        assert result.exit_code == 0, result.output
        assert "January 2024" in result.output
        assert "January 31, 2024" in result.output
        assert "January 13, 2024" not in result.output

    def test_unbookable_duration_is_rejected(self, tmp_path):
        for duration in ("240", "10"):
            result = runner.invoke(
                app,
                ["slots", "2024-01-16", "--mock", "--duration", duration,
                 "--config", str(tmp_path / "none.yaml")],
            )

            assert result.exit_code == 2
            assert "PM" not in result.output

    def test_missing_config_without_mock(self, tmp_path):
        result = runner.invoke(app, ["slots", "--config", str(tmp_path / "none.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestBookCommand:
    """Tests for the interactive booking wizard."""

    def test_book_first_free_slot(self, tmp_path):
        result = runner.invoke(
            app,
            ["book", "--mock", "--config", str(tmp_path / "none.yaml")],
            input="1\n1\n" + DETAILS_INPUT,
        )

        assert result.exit_code == 0, result.output
        assert "Appointment booked!" in result.output
        assert "mock-event-" in result.output
        assert "could not be sent" not in result.output

    def test_back_and_invalid_choices(self, tmp_path):
        """Invalid numbers re-prompt; 0 on the time step goes back to the dates."""
        result = runner.invoke(
            app,
            ["book", "--mock", "--config", str(tmp_path / "none.yaml")],
            input="99\n1\n0\n1\n99\n1\n" + DETAILS_INPUT,
        )

        assert result.exit_code == 0, result.output
        assert result.output.count("Invalid choice.") == 2
        assert result.output.count("1. Select a date") == 3
        assert result.output.count("2. Select a time") == 3
        assert "Appointment booked!" in result.output

    def test_slot_taken_before_confirming(self, tmp_path, monkeypatch):
        """The wizard returns to the time step and keeps the entered details."""
        TakenOnceCalendar.instances.clear()
        monkeypatch.setattr(cli_app, "MockCalendarProvider", TakenOnceCalendar)

        result = runner.invoke(
            app,
            ["book", "--mock", "--config", str(tmp_path / "none.yaml")],
            # second round accepts the remembered name and email
            input="1\n1\n" + DETAILS_INPUT + "1\n\n\n\n\ny\n",
        )

        assert result.exit_code == 0, result.output
        calendar = TakenOnceCalendar.instances[0]
        assert calendar.rechecks == 2
        assert result.output.count("2. Select a time") == 2
        assert result.output.count("4. Confirm") == 2
        assert "Appointment booked!" in result.output
        assert len(calendar.appointments) == 1
        assert next(iter(calendar.appointments.values())).patient_name == "Jane Doe"

    def test_ends_when_input_runs_out(self, tmp_path):
        result = runner.invoke(
            app, ["book", "--mock", "--config", str(tmp_path / "none.yaml")], input="1\n"
        )

        assert result.exit_code != 0
        assert "Appointment booked!" not in result.output


class TestBackendCommands:
    """Commands that need the hosted backend, run against stand-ins."""

    def test_show_appointment(self, tmp_path, monkeypatch):
        calendar = MockCalendarProvider(timezone=TZ, events=[])
        start = pendulum.parse("2024-01-15 10:00", tz=TZ)
        patient = PatientDetails(name="Jane Doe", email="jane@example.com", notes="Lower back")
        record = calendar.create_appointment(
            AvailableSlot.from_interval(TimeInterval(start=start, end=start.add(hours=1))),
            patient,
            SymptomAssessment.default_for(patient),
        )
        monkeypatch.setattr(cli_app, "SupabaseCalendarProvider", lambda client, timezone: calendar)

        result = runner.invoke(app, ["show", record.event_id, "--config", _config_file(tmp_path)])

        assert result.exit_code == 0, result.output
        assert record.event_id in result.output
        assert "January 15, 2024" in result.output
        assert "10:00 AM" in result.output
        assert "Jane Doe" in result.output

    def test_show_unknown_appointment(self, tmp_path, monkeypatch):
        calendar = MockCalendarProvider(timezone=TZ, events=[])
        monkeypatch.setattr(cli_app, "SupabaseCalendarProvider", lambda client, timezone: calendar)

        result = runner.invoke(app, ["show", "nope", "--config", _config_file(tmp_path)])

        assert result.exit_code == 1
        assert "Unknown appointment" in result.output

    def test_unsubscribe(self, tmp_path, monkeypatch):
        payments = StubPayments()
        monkeypatch.setattr(cli_app, "StripePaymentProvider", lambda client: payments)

        result = runner.invoke(app, ["unsubscribe", "sub_1", "--config", _config_file(tmp_path)])

        assert result.exit_code == 0, result.output
        assert payments.cancelled == ["sub_1"]

    def test_donate_with_receipt(self, tmp_path, monkeypatch):
        sender = ConsoleEmailSender()
        monkeypatch.setattr(cli_app, "StripePaymentProvider", lambda client: StubPayments())
        monkeypatch.setattr(cli_app, "EmailJSSender", lambda settings, timeout_seconds: sender)

        result = runner.invoke(
            app,
            ["donate", "25", "--name", "Sam", "--email", "sam@example.com", "--send-receipt",
             "--config", _config_file(tmp_path)],
        )

        assert result.exit_code == 0, result.output
        assert "secret_123" in result.output
        assert "Receipt sent" in result.output
        assert sender.sent[0]["template_id"] == "tpl-don"
        assert sender.sent[0]["params"]["donation_amount"] == "25.00"

    def test_donate_without_receipt_flag(self, tmp_path, monkeypatch):
        sender = ConsoleEmailSender()
        monkeypatch.setattr(cli_app, "StripePaymentProvider", lambda client: StubPayments())
        monkeypatch.setattr(cli_app, "EmailJSSender", lambda settings, timeout_seconds: sender)

        result = runner.invoke(
            app, ["donate", "25", "--email", "sam@example.com", "--config", _config_file(tmp_path)]
        )

        assert result.exit_code == 0, result.output
        assert sender.sent == []


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
