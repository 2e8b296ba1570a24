"""
Multi-step booking wizard.

Two variants share one state machine:
- portal: a client books for themselves (provider -> date/time -> details)
- backoffice: staff book for a client (client -> provider -> date/time -> details)
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..errors import BookingValidationError, InvalidTransitionError
from ..models import (
    Appointment,
    ClientSummary,
    CreateAppointmentRequest,
    Provider,
    Room,
)
from ..services.notifier import Notifier
from ..services.store import AppointmentStore
from ..utils.helpers import format_slot_time, parse_instant, utcnow
from .calendar import BookingCalendar
from .search import ClientSearch

logger = logging.getLogger(__name__)


class WizardVariant(Enum):
    PORTAL = "portal"
    BACKOFFICE = "backoffice"


class WizardStep(Enum):
    SELECTING_CLIENT = "selecting_client"
    SELECTING_PROVIDER = "selecting_provider"
    SELECTING_DATE_TIME = "selecting_date_time"
    ENTERING_DETAILS = "entering_details"
    SUBMITTING = "submitting"


class WizardEvent(Enum):
    NEXT = "next"
    BACK = "back"
    SUBMIT = "submit"
    SUBMIT_SUCCEEDED = "submit_succeeded"
    SUBMIT_FAILED = "submit_failed"
    CLOSE = "close"


Step = WizardStep
Event = WizardEvent

FLOWS: Dict[WizardVariant, Tuple[WizardStep, ...]] = {
    WizardVariant.PORTAL: (
        Step.SELECTING_PROVIDER,
        Step.SELECTING_DATE_TIME,
        Step.ENTERING_DETAILS,
    ),
    WizardVariant.BACKOFFICE: (
        Step.SELECTING_CLIENT,
        Step.SELECTING_PROVIDER,
        Step.SELECTING_DATE_TIME,
        Step.ENTERING_DETAILS,
    ),
}

STEP_TITLES = {
    Step.SELECTING_CLIENT: "Selecciona el cliente",
    Step.SELECTING_PROVIDER: "Selecciona un profesional",
    Step.SELECTING_DATE_TIME: "Elige fecha y hora",
    Step.ENTERING_DETAILS: "Detalles de la cita",
    Step.SUBMITTING: "Creando cita...",
}


def build_transitions(variant: WizardVariant) -> Dict[Tuple[WizardStep, WizardEvent], WizardStep]:
    """
    Build the (step, event) -> next step table for a variant.

    Pairs missing from the table are invalid.
    """
    flow = FLOWS[variant]
    initial, last = flow[0], flow[-1]
    table: Dict[Tuple[WizardStep, WizardEvent], WizardStep] = {}

    for current, following in zip(flow, flow[1:]):
        table[(current, Event.NEXT)] = following
        table[(following, Event.BACK)] = current

    table[(last, Event.SUBMIT)] = Step.SUBMITTING
    table[(Step.SUBMITTING, Event.SUBMIT_FAILED)] = last
    table[(Step.SUBMITTING, Event.SUBMIT_SUCCEEDED)] = initial

    for step in (*flow, Step.SUBMITTING):
        table[(step, Event.CLOSE)] = initial

    return table


@dataclass
class BookingDraft:
    """Appointment being assembled by the wizard."""
    client: Optional[ClientSummary] = None
    provider_id: Optional[str] = None
    date: Optional[date] = None
    duration_minutes: int = 60
    room: Optional[Room] = None
    selected_slot: Optional[datetime] = None
    title: str = ""
    description: str = ""

    def to_request(self, include_client: bool) -> CreateAppointmentRequest:
        """Build the create request; only valid once every guard holds."""
        return CreateAppointmentRequest(
            client_id=self.client.id if include_client and self.client else None,
            provider_id=self.provider_id,
            title=self.title.strip(),
            description=self.description.strip() or None,
            start_time=self.selected_slot,
            duration_minutes=self.duration_minutes,
            room=self.room,
        )


# Completion predicate and validation message for each step.
GUARDS: Dict[WizardStep, Tuple[Callable[[BookingDraft], bool], str, str]] = {
    Step.SELECTING_CLIENT: (
        lambda d: d.client is not None,
        "Selecciona un cliente para continuar",
        "client",
    ),
    Step.SELECTING_PROVIDER: (
        lambda d: bool(d.provider_id),
        "Selecciona un profesional para continuar",
        "provider_id",
    ),
    Step.SELECTING_DATE_TIME: (
        lambda d: d.selected_slot is not None,
        "Selecciona un horario disponible para continuar",
        "selected_slot",
    ),
    Step.ENTERING_DETAILS: (
        lambda d: bool(d.title.strip()),
        "El título de la cita es obligatorio",
        "title",
    ),
}


class BookingWizard:
    """
    State machine guiding a user to a valid CreateAppointmentRequest.

    Slot lists are fetched whenever the wizard is on the date/time step and
    provider, date or duration change. Each fetch is tagged with the wizard
    generation (bumped on every reset) and a monotonic request number; a
    response is applied only if its tag is still the latest, so neither a
    superseded request nor one that outlived a reset can overwrite state.
    """

    def __init__(
        self,
        api,
        notifier: Notifier,
        variant: WizardVariant = WizardVariant.PORTAL,
        calendar: Optional[BookingCalendar] = None,
        client_search: Optional[ClientSearch] = None,
        store: Optional[AppointmentStore] = None,
        clock: Callable[[], datetime] = utcnow,
        default_duration: int = 60,
        default_room: Union[Room, str] = Room.GABINETE_01,
    ):
        """
        Initialize the wizard.

        Args:
            api: Backend client (ArnelaApiClient or a compatible fake)
            notifier: Sink for user notifications
            variant: Portal or backoffice flow
            calendar: Date policy (defaults to Mon-Fri, 6 months ahead)
            client_search: Client search for the backoffice variant
            store: Appointment store to add created appointments to
            clock: Returns the current aware datetime
            default_duration: Duration preselected in a fresh draft
            default_room: Room preselected in a fresh backoffice draft
        """
        self._api = api
        self.notifier = notifier
        self.variant = variant
        self.calendar = calendar or BookingCalendar()
        self.store = store
        self._clock = clock
        self.default_duration = default_duration
        self.default_room = Room(default_room)

        if variant == WizardVariant.BACKOFFICE and client_search is None:
            client_search = ClientSearch(api.search_clients)
        self.client_search = client_search

        self._transitions = build_transitions(variant)
        self._generation = 0
        self._slot_request_seq = 0
        self._slot_token: Tuple[int, int] = (0, 0)

        self.is_open = False
        self.providers: List[Provider] = []
        self._reset()

    # ==================== State ====================

    @property
    def flow(self) -> Tuple[WizardStep, ...]:
        return FLOWS[self.variant]

    @property
    def initial_step(self) -> WizardStep:
        return self.flow[0]

    @property
    def step_number(self) -> int:
        """1-based position of the current step (submitting counts as the last)."""
        if self.step == Step.SUBMITTING:
            return len(self.flow)
        return self.flow.index(self.step) + 1

    @property
    def step_title(self) -> str:
        return f"Paso {self.step_number}: {STEP_TITLES[self.step]}"

    @property
    def can_proceed(self) -> bool:
        """Whether the current step's completion predicate holds."""
        guard = GUARDS.get(self.step)
        return guard is not None and guard[0](self.draft)

    @property
    def can_go_back(self) -> bool:
        return (self.step, Event.BACK) in self._transitions

    @property
    def selected_provider(self) -> Optional[Provider]:
        return next((p for p in self.providers if p.id == self.draft.provider_id), None)

    def _fire(self, event: WizardEvent) -> WizardStep:
        target = self._transitions.get((self.step, event))
        if target is None:
            raise InvalidTransitionError(
                f"{event.value} is not valid while {self.step.value}"
            )
        logger.debug(f"Wizard {self.variant.value}: {self.step.value} --{event.value}--> {target.value}")
        self.step = target
        return target

    def _require_guard(self) -> None:
        guard = GUARDS.get(self.step)
        if guard is None:
            return
        predicate, message, field_name = guard
        if not predicate(self.draft):
            raise BookingValidationError(message, field=field_name)

    def _reset(self) -> None:
        self._generation += 1
        self._slot_token = (self._generation, self._slot_request_seq)
        self.step = self.initial_step
        self.draft = BookingDraft(
            duration_minutes=self.default_duration,
            room=self.default_room if self.variant == WizardVariant.BACKOFFICE else None,
        )
        self.available_slots: List[datetime] = []
        self.loading_slots = False
        self.slots_error: Optional[str] = None
        self.submit_error: Optional[str] = None
        if self.client_search is not None:
            self.client_search.reset()

    # ==================== Lifecycle ====================

    async def open(self) -> None:
        """Open the wizard on a fresh draft and load the provider list."""
        self._reset()
        self.is_open = True
        await self.load_providers()

    async def load_providers(self) -> None:
        try:
            self.providers = await self._api.list_providers()
        except Exception as e:
            logger.error(f"Error loading providers: {e}")
            self.providers = []
            self.notifier.error("Error al cargar los profesionales", _describe(e))

    def close(self) -> None:
        """Cancel the wizard from any step, discarding the draft."""
        self._fire(Event.CLOSE)
        self._reset()
        self.is_open = False

    # ==================== Navigation ====================

    async def next(self) -> WizardStep:
        """
        Advance one step if the current step is complete.

        Raises:
            BookingValidationError: the current step's predicate does not hold
            InvalidTransitionError: there is no next step from here
        """
        if (self.step, Event.NEXT) not in self._transitions:
            raise InvalidTransitionError(f"next is not valid while {self.step.value}")
        self._require_guard()
        step = self._fire(Event.NEXT)
        if step == Step.SELECTING_DATE_TIME:
            await self.refresh_slots()
        return step

    def back(self) -> WizardStep:
        """Go back one step, keeping everything entered so far."""
        return self._fire(Event.BACK)

    # ==================== Client (backoffice) ====================

    def search_clients(self, query: str) -> None:
        """Feed a keystroke to the debounced client search."""
        if self.client_search is None:
            raise InvalidTransitionError("Client search is only available in the backoffice wizard")
        self.client_search.update_query(query)

    def select_client(self, client: ClientSummary) -> None:
        if self.variant != WizardVariant.BACKOFFICE:
            raise InvalidTransitionError("The portal wizard books for the signed-in client")
        self.draft.client = client
        self.client_search.reset()

    def clear_client(self) -> None:
        self.draft.client = None

    # ==================== Provider, date and slot ====================

    async def select_provider(self, provider_id: str) -> None:
        """Choose the provider; a different provider invalidates slots."""
        if not provider_id:
            raise BookingValidationError("Selecciona un profesional", field="provider_id")
        if provider_id == self.draft.provider_id:
            return
        self.draft.provider_id = provider_id
        await self._availability_changed()

    async def select_date(self, day: date) -> None:
        """
        Choose the booking date.

        Raises:
            BookingValidationError: weekend, past date or beyond the booking horizon
        """
        if isinstance(day, datetime):
            day = day.date()
        is_valid, message = self.calendar.validate_date(day, self._clock().date())
        if not is_valid:
            raise BookingValidationError(message, field="date")
        self.draft.date = day
        await self._availability_changed()

    async def set_duration(self, minutes: int) -> None:
        if minutes not in (45, 60):
            raise BookingValidationError("La duración debe ser de 45 o 60 minutos", field="duration_minutes")
        if minutes == self.draft.duration_minutes:
            return
        self.draft.duration_minutes = minutes
        await self._availability_changed()

    def set_room(self, room: Union[Room, str]) -> None:
        self.draft.room = Room(room)

    def select_slot(self, slot: Union[datetime, str]) -> None:
        """Choose one of the currently listed slots."""
        slot = parse_instant(slot)
        if slot not in self.available_slots:
            raise BookingValidationError("Ese horario no está disponible", field="selected_slot")
        self.draft.selected_slot = slot

    def slot_labels(self, tz=None) -> List[Tuple[datetime, str]]:
        """Listed slots paired with their HH:MM label in the display timezone."""
        return [(slot, format_slot_time(slot, tz)) for slot in self.available_slots]

    async def _availability_changed(self) -> None:
        self.draft.selected_slot = None
        self.available_slots = []
        if self.step == Step.SELECTING_DATE_TIME:
            await self.refresh_slots()

    async def refresh_slots(self) -> None:
        """Fetch slots for the current (provider, date, duration)."""
        provider_id = self.draft.provider_id
        day = self.draft.date
        duration = self.draft.duration_minutes
        if not provider_id or day is None:
            self.available_slots = []
            return

        self._slot_request_seq += 1
        token = (self._generation, self._slot_request_seq)
        self._slot_token = token
        previous_slot = self.draft.selected_slot
        self.draft.selected_slot = None
        self.available_slots = []
        self.loading_slots = True
        self.slots_error = None

        try:
            slots = await self._api.get_available_slots(provider_id, day, duration)
        except Exception as e:
            if token != self._slot_token:
                return
            logger.error(f"Error fetching slots for {provider_id} on {day}: {e}")
            self.available_slots = []
            self.loading_slots = False
            self.slots_error = _describe(e) or "Error al cargar horarios disponibles"
            self.notifier.error("Error al cargar horarios disponibles", self.slots_error)
            return

        if token != self._slot_token:
            logger.debug(f"Discarding stale slots for {provider_id} on {day}")
            return

        self.available_slots = list(slots)
        self.loading_slots = False
        if previous_slot in self.available_slots:
            self.draft.selected_slot = previous_slot

    # ==================== Details and submission ====================

    def set_title(self, title: str) -> None:
        self.draft.title = title

    def set_description(self, description: str) -> None:
        self.draft.description = description

    async def submit(self) -> Optional[Appointment]:
        """
        Send the draft to the backend.

        On success the appointment is added to the store, the wizard resets
        and closes, and the created appointment is returned. On failure the
        wizard goes back to the details step with the draft intact, records
        `submit_error` and returns None.

        Raises:
            BookingValidationError: the title is empty
            InvalidTransitionError: not on the details step
        """
        if (self.step, Event.SUBMIT) not in self._transitions:
            raise InvalidTransitionError(f"submit is not valid while {self.step.value}")
        self._require_guard()

        request = self.draft.to_request(include_client=self.variant == WizardVariant.BACKOFFICE)
        generation = self._generation
        self.submit_error = None
        self._fire(Event.SUBMIT)

        try:
            created = await self._api.create_appointment(request)
        except Exception as e:
            if generation != self._generation:
                logger.info("Submission failed after the wizard was closed; ignoring")
                return None
            logger.error(f"Error creating appointment: {e}")
            self._fire(Event.SUBMIT_FAILED)
            self.submit_error = _describe(e) or "Por favor verifica los datos e inténtalo nuevamente"
            self.notifier.error("Error al crear la cita", self.submit_error)
            return None

        if self.store is not None:
            self.store.add_appointment(created)

        if generation != self._generation:
            logger.info(f"Appointment {created.id} created after the wizard was closed")
            return created

        description = None
        if self.draft.client is not None:
            description = f"Cita agendada para {self.draft.client.full_name}"
        self.notifier.success("Cita creada exitosamente", description)

        self._fire(Event.SUBMIT_SUCCEEDED)
        self._reset()
        self.is_open = False
        return created


def _describe(error: Exception) -> Optional[str]:
    """User-facing text for an error, when it has one."""
    user_message = getattr(error, "user_message", None)
    return user_message if isinstance(user_message, str) else None
