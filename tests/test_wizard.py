"""
Tests for the booking wizard state machine.
"""

import pendulum
import pytest

from physioslots.domain.booking import AppointmentRecord, PatientDetails
from physioslots.domain.exceptions import InvalidTransitionError
from physioslots.domain.models import AvailableSlot, TimeInterval
from physioslots.domain.wizard import (
    BookingConfirmed,
    DateSelected,
    DetailsSubmitted,
    EditDetails,
    Restart,
    SlotSelected,
    StepBack,
    WizardStep,
    initial_state,
    transition,
)

TZ = "America/New_York"
MONDAY = pendulum.date(2024, 1, 15)
PATIENT = PatientDetails(name="Jane Doe", email="jane@example.com")


def _slot(start="2024-01-15 10:00", end="2024-01-15 11:00") -> AvailableSlot:
    interval = TimeInterval(start=pendulum.parse(start, tz=TZ), end=pendulum.parse(end, tz=TZ))
    return AvailableSlot.from_interval(interval)


def _record(slot: AvailableSlot) -> AppointmentRecord:
    return AppointmentRecord(
        event_id="evt-1",
        patient_name=PATIENT.name,
        patient_email=PATIENT.email,
        start=slot.start,
        end=slot.end,
    )


def _at_confirm():
    state = transition(initial_state(), DateSelected(MONDAY))
    state = transition(state, SlotSelected(_slot()))
    return transition(state, DetailsSubmitted(PATIENT))


class TestWizardTransitions:
    """Tests for the happy path and navigation."""

    def test_happy_path(self):
        state = initial_state()
        assert state.step == WizardStep.SELECT_DATE

        state = transition(state, DateSelected(MONDAY))
        assert state.step == WizardStep.SELECT_TIME
        assert state.selected_date == MONDAY

        slot = _slot()
        state = transition(state, SlotSelected(slot))
        assert state.step == WizardStep.ENTER_DETAILS
        assert state.selected_slot == slot

        state = transition(state, DetailsSubmitted(PATIENT))
        assert state.step == WizardStep.CONFIRM
        assert state.patient == PATIENT

        state = transition(state, BookingConfirmed(_record(slot)))
        assert state.step == WizardStep.COMPLETE
        assert state.appointment.event_id == "evt-1"

    def test_transition_does_not_mutate_previous_state(self):
        start = initial_state()
        transition(start, DateSelected(MONDAY))

        assert start.step == WizardStep.SELECT_DATE
        assert start.selected_date is None

    def test_changing_date_clears_slot(self):
        state = transition(initial_state(), DateSelected(MONDAY))
        state = transition(state, DateSelected(pendulum.date(2024, 1, 16)))

        assert state.step == WizardStep.SELECT_TIME
        assert state.selected_date == pendulum.date(2024, 1, 16)
        assert state.selected_slot is None

    def test_edit_details_from_confirm(self):
        state = transition(_at_confirm(), EditDetails())

        assert state.step == WizardStep.ENTER_DETAILS
        assert state.patient == PATIENT

    def test_step_back_chain(self):
        state = _at_confirm()

        state = transition(state, StepBack())
        assert state.step == WizardStep.ENTER_DETAILS
        state = transition(state, StepBack())
        assert state.step == WizardStep.SELECT_TIME
        state = transition(state, StepBack())
        assert state.step == WizardStep.SELECT_DATE
        assert state.selected_slot is None

    def test_restart_from_anywhere(self):
        state = transition(_at_confirm(), Restart())

        assert state == initial_state()


class TestInvalidTransitions:
    """Events that are not allowed in the current step."""

    def test_slot_before_date(self):
        with pytest.raises(InvalidTransitionError):
            transition(initial_state(), SlotSelected(_slot()))

    def test_slot_on_other_day(self):
        state = transition(initial_state(), DateSelected(MONDAY))

        with pytest.raises(InvalidTransitionError, match="not on the selected date"):
            transition(state, SlotSelected(_slot("2024-01-16 10:00", "2024-01-16 11:00")))

    def test_confirm_before_details(self):
        state = transition(initial_state(), DateSelected(MONDAY))

        with pytest.raises(InvalidTransitionError):
            transition(state, BookingConfirmed(_record(_slot())))

    def test_step_back_from_first_step(self):
        with pytest.raises(InvalidTransitionError):
            transition(initial_state(), StepBack())

    def test_complete_is_final_except_restart(self):
        slot = _slot()
        done = transition(_at_confirm(), BookingConfirmed(_record(slot)))

        with pytest.raises(InvalidTransitionError):
            transition(done, StepBack())
        with pytest.raises(InvalidTransitionError):
            transition(done, DateSelected(MONDAY))
