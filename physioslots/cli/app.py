"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.edge_functions import EdgeFunctionClient
from ..adapters.emailjs import EmailJSSender
from ..adapters.mock_calendar import ConsoleEmailSender, MockCalendarProvider
from ..adapters.stripe_payments import StripePaymentProvider
from ..adapters.supabase_calendar import SupabaseCalendarProvider
from ..config import AppConfig, load_config
from ..domain.booking import Donation, PatientDetails
from ..domain.exceptions import (
    AppointmentValidationError,
    CollaboratorError,
    PhysioSlotsError,
    SlotUnavailableError,
)
from ..domain.formatting import format_date, format_month, format_slot, format_time
from ..domain.grouping import group_by_day, split_by_period
from ..domain.models import AvailableSlot, SlotRequest
from ..domain.slot_engine import SlotEngine
from ..domain.validation import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES
from ..domain.wizard import (
    BookingConfirmed,
    DateSelected,
    DetailsSubmitted,
    EditDetails,
    SlotSelected,
    StepBack,
    WizardState,
    WizardStep,
    initial_state,
    transition,
)
from ..services.availability_service import AvailabilityService
from ..services.booking_service import BookingService
from ..services.donation_service import DonationService

app = typer.Typer(
    name="physioslots",
    help="Find and book physiotherapy appointment slots",
    add_completion=False
)

console = Console()
logger = logging.getLogger(__name__)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use the bundled mock calendar instead of the backend."),
]
DurationOption = Annotated[
    Optional[int],
    typer.Option(
        "--duration",
        "-d",
        min=MIN_DURATION_MINUTES,
        max=MAX_DURATION_MINUTES,
        help=f"Slot duration in minutes ({MIN_DURATION_MINUTES}-{MAX_DURATION_MINUTES})",
    ),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Appointment availability and booking for the practice.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _build_services(config: AppConfig, mock: bool) -> Tuple[AvailabilityService, BookingService]:
    """Wire the collaborators for either the hosted backend or mock mode."""
    working_hours = config.working_hours()

    if mock:
        calendar = MockCalendarProvider(timezone=config.timezone)
        email_sender = ConsoleEmailSender()
        template_id = config.email.appointment_template_id or "mock-appointment-template"
    else:
        calendar = SupabaseCalendarProvider(
            EdgeFunctionClient(config.backend), timezone=config.timezone
        )
        email_sender = EmailJSSender(config.email, timeout_seconds=config.backend.timeout_seconds)
        template_id = config.email.appointment_template_id

    availability = AvailabilityService(provider=calendar, engine=SlotEngine(working_hours))
    booking = BookingService(
        availability=availability,
        store=calendar,
        working_hours=working_hours,
        email_sender=email_sender,
        confirmation_template_id=template_id,
        locale=config.locale,
    )
    return availability, booking


def _print_error(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")


def _print_periods(slots: List[AvailableSlot], config: AppConfig) -> List[AvailableSlot]:
    """
    Print numbered morning/afternoon tables and return the slots in display order.
    """
    periods = split_by_period(slots, cutoff_hour=config.defaults.morning_cutoff_hour)
    ordered = periods.morning + periods.afternoon
    index = 1

    for title, group in (("Morning", periods.morning), ("Afternoon", periods.afternoon)):
        if not group:
            continue
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("#", style="bold yellow", justify="right")
        table.add_column("Start")
        table.add_column("End", style="dim")
        for slot in group:
            table.add_row(
                str(index),
                format_time(slot.start, config.locale),
                format_time(slot.end, config.locale),
            )
            index += 1
        console.print(table)

    return ordered


@app.command()
def slots(
    day: Annotated[Optional[str], typer.Argument(help="Day to check (YYYY-MM-DD). Defaults to today.")] = None,
    duration: DurationOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the free appointment slots of one day, split into morning and afternoon.
    """
    try:
        config = load_config(config_file, allow_missing=mock)
        tz = config.timezone
        target = (
            pendulum.from_format(day, "YYYY-MM-DD", tz=tz) if day else pendulum.now(tz)
        ).start_of("day")
        minutes = duration or config.defaults.duration_minutes

        availability, _ = _build_services(config, mock)
        snapshot = availability.slots_for_day(target.date(), minutes)

        console.print(f"\n[bold]{format_date(target, config.locale)}[/bold] ({minutes} min)\n")
        if not snapshot:
            console.print("[yellow]No availability on this day.[/yellow]\n")
            return
        _print_periods(snapshot.slots, config)
        console.print()

    except (PhysioSlotsError, FileNotFoundError, ValueError) as e:
        _print_error(e)
        raise typer.Exit(1)


@app.command()
def month(
    month_arg: Annotated[Optional[str], typer.Argument(metavar="MONTH", help="Month to check (YYYY-MM). Defaults to this month.")] = None,
    duration: DurationOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List the dates of a month that still have at least one free slot.
    """
    try:
        config = load_config(config_file, allow_missing=mock)
        tz = config.timezone
        first = (
            pendulum.from_format(month_arg, "YYYY-MM", tz=tz) if month_arg else pendulum.now(tz)
        ).start_of("month")
        minutes = duration or config.defaults.duration_minutes

        availability, _ = _build_services(config, mock)
        snapshot = availability.slots_for_month(first.year, first.month, minutes)

        console.print(f"\n[bold]{format_month(first, config.locale)}[/bold] ({minutes} min)\n")
        by_day = group_by_day(snapshot.slots)
        if not by_day:
            console.print("[yellow]No availability this month.[/yellow]\n")
            return

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Date", style="bold")
        table.add_column("Free slots", justify="right")
        for date, day_slots in by_day.items():
            table.add_row(
                format_date(pendulum.datetime(date.year, date.month, date.day, tz=tz), config.locale),
                str(len(day_slots)),
            )
        console.print(table)
        console.print()

    except (PhysioSlotsError, FileNotFoundError, ValueError) as e:
        _print_error(e)
        raise typer.Exit(1)


def _wizard_select_date(state: WizardState, availability: AvailabilityService, config: AppConfig, minutes: int) -> WizardState:
    tz = config.timezone
    start = pendulum.now(tz).add(days=1).start_of("day")
    end = start.add(days=config.defaults.booking_window_days).end_of("day")
    dates = availability.find_slots(SlotRequest(start, end, minutes)).dates()

    if not dates:
        console.print("[yellow]No availability in the booking window. Please try again later.[/yellow]")
        raise typer.Exit(0)

    console.print("\n[bold]1. Select a date[/bold]")
    for idx, date in enumerate(dates, 1):
        dt = pendulum.datetime(date.year, date.month, date.day, tz=tz)
        console.print(f"  {idx}. {dt.format('dddd', locale=config.locale)}, {format_date(dt, config.locale)}")

    choice = typer.prompt("→ Date number", type=int, default=1)
    if not 1 <= choice <= len(dates):
        console.print("[yellow]Invalid choice.[/yellow]")
        return state
    return transition(state, DateSelected(dates[choice - 1]))


def _wizard_select_time(state: WizardState, availability: AvailabilityService, config: AppConfig, minutes: int) -> WizardState:
    snapshot = availability.slots_for_day(state.selected_date, minutes)
    console.print("\n[bold]2. Select a time[/bold]")
    if not snapshot:
        console.print("[yellow]This day has just been fully booked.[/yellow]")
        return transition(state, StepBack())

    ordered = _print_periods(snapshot.slots, config)
    choice = typer.prompt("→ Slot number (0 to go back)", type=int, default=1)
    if choice == 0:
        return transition(state, StepBack())
    if not 1 <= choice <= len(ordered):
        console.print("[yellow]Invalid choice.[/yellow]")
        return state
    return transition(state, SlotSelected(ordered[choice - 1]))


def _wizard_enter_details(state: WizardState) -> WizardState:
    console.print("\n[bold]3. Your details[/bold]")
    previous = state.patient
    name = typer.prompt("→ Name", default=previous.name if previous else None)
    email = typer.prompt("→ Email", default=previous.email if previous else None)
    phone = typer.prompt("→ Phone (optional)", default="", show_default=False)
    notes = typer.prompt("→ Notes (optional)", default="", show_default=False)
    patient = PatientDetails(name=name, email=email, phone=phone or None, notes=notes or None)
    return transition(state, DetailsSubmitted(patient))


def _wizard_confirm(state: WizardState, booking: BookingService, config: AppConfig) -> WizardState:
    slot = state.selected_slot
    patient = state.patient
    console.print("\n[bold]4. Confirm[/bold]")
    console.print(f"   When: {format_slot(slot, config.locale)}")
    console.print(f"   Patient: {patient.name} <{patient.email}>")

    if not typer.confirm("→ Book this appointment?", default=True):
        return transition(state, EditDetails())

    try:
        result = booking.book(slot, patient)
    except AppointmentValidationError as e:
        for message in e.errors:
            console.print(f"[red]• {message}[/red]")
        return transition(state, EditDetails())
    except SlotUnavailableError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return transition(transition(state, EditDetails()), StepBack())

    if not result.confirmation_sent:
        console.print("[yellow]⚠ The confirmation email could not be sent.[/yellow]")
    return transition(state, BookingConfirmed(result.appointment))


@app.command()
def book(
    duration: DurationOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Book an appointment interactively: date, time, details, confirmation.
    """
    try:
        config = load_config(config_file, allow_missing=mock)
        minutes = duration or config.defaults.duration_minutes
        availability, booking = _build_services(config, mock)

        console.print("\n" + "=" * 60)
        console.print("[bold cyan]Book a physiotherapy appointment[/bold cyan]")
        console.print("=" * 60)
        if mock:
            console.print("[yellow]⚠  MOCK MODE: using the bundled test calendar[/yellow]")

        state = initial_state()
        while state.step != WizardStep.COMPLETE:
            if state.step == WizardStep.SELECT_DATE:
                state = _wizard_select_date(state, availability, config, minutes)
            elif state.step == WizardStep.SELECT_TIME:
                state = _wizard_select_time(state, availability, config, minutes)
            elif state.step == WizardStep.ENTER_DETAILS:
                state = _wizard_enter_details(state)
            elif state.step == WizardStep.CONFIRM:
                state = _wizard_confirm(state, booking, config)

        appointment = state.appointment
        lines = [
            "[bold green]✓ Appointment booked![/bold green]\n",
            f"[bold]Reference:[/bold] {appointment.event_id}",
            f"[bold]When:[/bold] {format_slot(state.selected_slot, config.locale)}",
        ]
        if appointment.meet_link:
            lines.append(f"[bold]Video link:[/bold] {appointment.meet_link}")
        console.print(Panel.fit("\n".join(lines), title="Booking complete"))

    except (PhysioSlotsError, FileNotFoundError, ValueError) as e:
        _print_error(e)
        raise typer.Exit(1)


@app.command()
def show(
    event_id: Annotated[str, typer.Argument(help="Booking reference of the appointment")],
    config_file: ConfigOption = None,
):
    """
    Show the details of a booked appointment.
    """
    try:
        config = load_config(config_file)
        _, booking = _build_services(config, mock=False)
        appointment = booking.get_appointment(event_id)

        table = Table(show_header=False, box=None)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Reference", appointment.event_id)
        table.add_row("Status", appointment.status)
        table.add_row("Date", format_date(appointment.start, config.locale))
        table.add_row(
            "Time",
            f"{format_time(appointment.start, config.locale)} – {format_time(appointment.end, config.locale)}",
        )
        table.add_row("Patient", f"{appointment.patient_name} <{appointment.patient_email}>")
        if appointment.patient_phone:
            table.add_row("Phone", appointment.patient_phone)
        if appointment.notes:
            table.add_row("Notes", appointment.notes)
        if appointment.meet_link:
            table.add_row("Video link", appointment.meet_link)
        console.print(Panel.fit(table, title="Appointment"))

    except (PhysioSlotsError, FileNotFoundError, ValueError) as e:
        _print_error(e)
        raise typer.Exit(1)


@app.command()
def cancel(
    event_id: Annotated[str, typer.Argument(help="Booking reference of the appointment")],
    config_file: ConfigOption = None,
):
    """
    Cancel a booked appointment.
    """
    try:
        config = load_config(config_file)
        _, booking = _build_services(config, mock=False)
        booking.cancel(event_id)
        console.print(f"\n[green]✓ Appointment {event_id} cancelled.[/green]\n")

    except (PhysioSlotsError, FileNotFoundError, ValueError) as e:
        _print_error(e)
        raise typer.Exit(1)


def _build_donations(config: AppConfig) -> DonationService:
    return DonationService(
        payments=StripePaymentProvider(EdgeFunctionClient(config.backend)),
        settings=config.donations,
        email_sender=EmailJSSender(config.email, timeout_seconds=config.backend.timeout_seconds),
        receipt_template_id=config.email.donation_template_id,
        locale=config.locale,
    )


@app.command()
def donate(
    amount: Annotated[float, typer.Argument(help="Donation amount in the configured currency")],
    monthly: Annotated[bool, typer.Option("--monthly", help="Create a monthly subscription")] = False,
    name: Annotated[str, typer.Option("--name", help="Donor name")] = "",
    email: Annotated[str, typer.Option("--email", help="Donor email for the receipt")] = "",
    message: Annotated[str, typer.Option("--message", help="Message to the practice")] = "",
    send_receipt: Annotated[
        bool,
        typer.Option(
            "--send-receipt",
            help="Email the donor a receipt now, using email.donation_template_id. "
            "Use once the card payment has been confirmed with the client secret.",
        ),
    ] = False,
    config_file: ConfigOption = None,
):
    """
    Start a donation and print the client secret used to confirm the payment.
    """
    try:
        config = load_config(config_file)
        service = _build_donations(config)
        donation = Donation(
            amount=amount,
            currency=config.donations.currency,
            donation_type="monthly" if monthly else "one_time",
            donor_name=name,
            donor_email=email,
            message=message,
            is_anonymous=not name,
        )
        intent = service.start_donation(donation)
        console.print(Panel.fit(
            f"[bold]Payment id:[/bold] {intent.id}\n"
            f"[bold]Client secret:[/bold] {intent.client_secret}\n"
            f"[bold]Status:[/bold] {intent.status}",
            title="Donation started"
        ))

        if send_receipt:
            try:
                sent = service.send_receipt(donation, intent)
            except CollaboratorError as e:
                # The payment exists either way; only the email is missing.
                logger.warning("Donation receipt for %s failed: %s", intent.id, e)
                sent = False
            if sent:
                console.print(f"[green]✓ Receipt sent to {email}.[/green]")
            else:
                console.print("[yellow]⚠ No receipt was sent.[/yellow]")

    except (PhysioSlotsError, FileNotFoundError, ValueError) as e:
        _print_error(e)
        raise typer.Exit(1)


@app.command()
def unsubscribe(
    subscription_id: Annotated[str, typer.Argument(help="Subscription id of the monthly donation")],
    config_file: ConfigOption = None,
):
    """
    Cancel a monthly donation.
    """
    try:
        config = load_config(config_file)
        _build_donations(config).cancel_subscription(subscription_id)
        console.print(f"\n[green]✓ Monthly donation {subscription_id} cancelled.[/green]\n")

    except (PhysioSlotsError, FileNotFoundError, ValueError) as e:
        _print_error(e)
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]physioslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
