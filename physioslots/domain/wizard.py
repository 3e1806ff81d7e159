"""
Booking wizard as an explicit state machine.

The wizard never talks to the calendar: callers feed it events and read the
resulting state. ``transition`` is pure and returns a new ``WizardState``.
"""

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional, Union

from pendulum import Date

from .booking import AppointmentRecord, PatientDetails
from .exceptions import InvalidTransitionError
from .models import AvailableSlot


class WizardStep(IntEnum):
    SELECT_DATE = 0
    SELECT_TIME = 1
    ENTER_DETAILS = 2
    CONFIRM = 3
    COMPLETE = 4


@dataclass(frozen=True)
class WizardState:
    step: WizardStep = WizardStep.SELECT_DATE
    selected_date: Optional[Date] = None
    selected_slot: Optional[AvailableSlot] = None
    patient: Optional[PatientDetails] = None
    appointment: Optional[AppointmentRecord] = None


@dataclass(frozen=True)
class DateSelected:
    date: Date


@dataclass(frozen=True)
class SlotSelected:
    slot: AvailableSlot


@dataclass(frozen=True)
class DetailsSubmitted:
    patient: PatientDetails


@dataclass(frozen=True)
class BookingConfirmed:
    appointment: AppointmentRecord


@dataclass(frozen=True)
class StepBack:
    pass


@dataclass(frozen=True)
class EditDetails:
    pass


@dataclass(frozen=True)
class Restart:
    pass


WizardEvent = Union[
    DateSelected, SlotSelected, DetailsSubmitted, BookingConfirmed, StepBack, EditDetails, Restart
]

_PREVIOUS_STEP = {
    WizardStep.SELECT_TIME: WizardStep.SELECT_DATE,
    WizardStep.ENTER_DETAILS: WizardStep.SELECT_TIME,
    WizardStep.CONFIRM: WizardStep.ENTER_DETAILS,
}


def initial_state() -> WizardState:
    return WizardState()


def transition(state: WizardState, event: WizardEvent) -> WizardState:
    """
    Apply ``event`` to ``state`` and return the next state.

    Raises:
        InvalidTransitionError: If the event is not accepted in the current step
    """
    step = state.step

    if isinstance(event, Restart):
        return initial_state()

    if isinstance(event, DateSelected) and step in (WizardStep.SELECT_DATE, WizardStep.SELECT_TIME):
        return replace(
            state,
            step=WizardStep.SELECT_TIME,
            selected_date=event.date,
            selected_slot=None,
        )

    if isinstance(event, SlotSelected) and step == WizardStep.SELECT_TIME:
        if event.slot.start.date() != state.selected_date:
            raise InvalidTransitionError(
                f"Slot {event.slot} is not on the selected date {state.selected_date}"
            )
        return replace(state, step=WizardStep.ENTER_DETAILS, selected_slot=event.slot)

    if isinstance(event, DetailsSubmitted) and step == WizardStep.ENTER_DETAILS:
        return replace(state, step=WizardStep.CONFIRM, patient=event.patient)

    if isinstance(event, EditDetails) and step == WizardStep.CONFIRM:
        return replace(state, step=WizardStep.ENTER_DETAILS)

    if isinstance(event, BookingConfirmed) and step == WizardStep.CONFIRM:
        return replace(state, step=WizardStep.COMPLETE, appointment=event.appointment)

    if isinstance(event, StepBack) and step in _PREVIOUS_STEP:
        previous = _PREVIOUS_STEP[step]
        if previous == WizardStep.SELECT_DATE:
            return replace(state, step=previous, selected_slot=None)
        return replace(state, step=previous)

    raise InvalidTransitionError(
        f"{type(event).__name__} is not allowed in step {step.name}"
    )
